# Court Shuffle
# Copyright (C) 2025  Court Shuffle developers
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <http://www.gnu.org/licenses/>.

from courtshuffle.models.match_config import MatchConfig, normalize_round_type
from courtshuffle.models.partner_history import (
    PartnerHistory,
    pair_key,
    partner_conflicts,
)
from courtshuffle.models.player import Player
from courtshuffle.models.round_data import (
    Game,
    Round,
    Schedule,
    schedule_from_list,
    schedule_to_list,
)

__all__ = [
    "Player",
    "Game",
    "Round",
    "Schedule",
    "PartnerHistory",
    "MatchConfig",
    "pair_key",
    "partner_conflicts",
    "normalize_round_type",
    "schedule_to_list",
    "schedule_from_list",
]
