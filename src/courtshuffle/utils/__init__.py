"""Shared helpers: logging setup, id generation and score-key formatting."""

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

import logging
import sys
import uuid
from typing import Optional, Tuple

from courtshuffle.constants import TEAM_1, TEAM_2, TEAM_KEYS
from courtshuffle.type_hints import Team

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_handler: Optional[logging.Handler] = None


def setup_logger(name: str, level: int = logging.INFO) -> logging.Logger:
    """Return a module logger attached to the shared package handler.

    The handler is installed once on the ``courtshuffle`` root logger so every
    module logger propagates to the same stream.
    """
    global _handler
    root = logging.getLogger("courtshuffle")
    if _handler is None:
        _handler = logging.StreamHandler(sys.stderr)
        _handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(_handler)
        root.setLevel(level)
    return logging.getLogger(name)


def generate_id(prefix: str = "") -> str:
    """Generate a short unique identifier, optionally prefixed."""
    short = uuid.uuid4().hex[:9]
    return f"{prefix}_{short}" if prefix else short


def score_key(round_idx: int, game_idx: int, team: Team) -> str:
    """Build the score map key for one team field of a game."""
    return f"{round_idx}_{game_idx}_{team}"


def game_keys(round_idx: int, game_idx: int) -> Tuple[str, str]:
    """Both score map keys of a game, team 1 first."""
    return (
        score_key(round_idx, game_idx, TEAM_1),
        score_key(round_idx, game_idx, TEAM_2),
    )


def parse_score_key(key: str) -> Optional[Tuple[int, int, str]]:
    """Split ``"r_g_team"`` into its parts, or None if the key is malformed."""
    parts = key.split("_")
    if len(parts) != 3 or parts[2] not in TEAM_KEYS:
        return None
    try:
        return int(parts[0]), int(parts[1]), parts[2]
    except ValueError:
        return None


def sibling_team(team: Team) -> Team:
    """The other team key of the same game."""
    return TEAM_2 if team == TEAM_1 else TEAM_1
