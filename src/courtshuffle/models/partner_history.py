"""Partner history tracking for doubles pairings."""

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

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Tuple

from courtshuffle.models.player import Player
from courtshuffle.models.round_data import Round


def pair_key(player1_id: str, player2_id: str) -> str:
    """Order-independent key for two player ids."""
    return "-".join(sorted((player1_id, player2_id)))


@dataclass
class PartnerHistory:
    """
    Counts how often each unordered pair of players has shared a team.

    Attributes
    ----------
    counts : dict of str to int
        Mapping of ``pair_key`` to the number of games the pair has
        played as teammates.
    """

    counts: Dict[str, int] = field(default_factory=dict)

    def add_pairing(self, player1_id: str, player2_id: str) -> None:
        """Record that two players have been teammates once more."""
        key = pair_key(player1_id, player2_id)
        self.counts[key] = self.counts.get(key, 0) + 1

    def count(self, player1_id: str, player2_id: str) -> int:
        """Number of times two players have been teammates."""
        return self.counts.get(pair_key(player1_id, player2_id), 0)

    def have_partnered(self, player1_id: str, player2_id: str) -> bool:
        return self.count(player1_id, player2_id) >= 1

    def team_count(self, team: Iterable[Player]) -> int:
        a, b = team
        return self.count(a.id, b.id)

    def record_round(self, round_data: Round) -> None:
        """Add every team of an accepted round."""
        for game in round_data.games:
            for team in (game.team1, game.team2):
                self.add_pairing(team[0].id, team[1].id)

    def repeated_pairs(self) -> List[Tuple[str, int]]:
        """Pairs that have been teammates more than once, most frequent first."""
        repeats = [(k, c) for k, c in self.counts.items() if c > 1]
        return sorted(repeats, key=lambda item: (-item[1], item[0]))

    @classmethod
    def from_schedule(cls, schedule: Iterable[Round]) -> "PartnerHistory":
        """Build the history of an existing schedule, swaps included."""
        history = cls()
        for round_data in schedule:
            history.record_round(round_data)
        return history

    def to_dict(self) -> Dict[str, Any]:
        """Serialize partner history to dictionary."""
        return {"counts": dict(self.counts)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PartnerHistory":
        """Deserialize partner history from dictionary."""
        return cls(counts={str(k): int(v) for k, v in data.get("counts", {}).items()})


def partner_conflicts(schedule: Iterable[Round]) -> Dict[str, int]:
    """Teammate counts over the whole schedule.

    A pair whose count is above one has been put on the same team more than
    once, usually after manual swaps.
    """
    return dict(PartnerHistory.from_schedule(schedule).counts)
