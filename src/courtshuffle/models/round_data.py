"""Data models for a scheduled round and its games."""

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
from typing import Any, Dict, List

from courtshuffle.constants import ROUND_TYPE_ALIASES
from courtshuffle.models.player import Player
from courtshuffle.type_hints import RoundType


@dataclass
class Game:
    """A single 2v2 game.

    Attributes
    ----------
    id : str
        Game identifier, unique within the schedule.
    team1 : list of Player
        Exactly two players.
    team2 : list of Player
        Exactly two players.
    """

    id: str
    team1: List[Player]
    team2: List[Player]

    def team(self, team_idx: int) -> List[Player]:
        """Return team 1 or team 2 by its 1-based index."""
        if team_idx == 1:
            return self.team1
        if team_idx == 2:
            return self.team2
        raise IndexError(f"Team index must be 1 or 2, got {team_idx}")

    @property
    def players(self) -> List[Player]:
        return [*self.team1, *self.team2]

    def player_ids(self) -> List[str]:
        return [p.id for p in self.players]

    def to_dict(self) -> Dict[str, Any]:
        """Serialize game to dictionary."""
        return {
            "id": self.id,
            "team1": [p.to_dict() for p in self.team1],
            "team2": [p.to_dict() for p in self.team2],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Game":
        """Deserialize game from dictionary."""
        return cls(
            id=str(data["id"]),
            team1=[Player.from_dict(p) for p in data["team1"]],
            team2=[Player.from_dict(p) for p in data["team2"]],
        )


@dataclass
class Round:
    """All games and byes of one round.

    Attributes
    ----------
    id : str
        Round identifier, ``round-<index>`` for generated rounds.
    type : str
        One of ``mixed``, ``same-gender`` or ``mixer``.
    games : list of Game
        Games played this round.
    byes : list of Player
        Players sitting out this round.
    """

    id: str
    type: RoundType
    games: List[Game] = field(default_factory=list)
    byes: List[Player] = field(default_factory=list)

    def player_ids(self) -> List[str]:
        """Every player id in the round, games first then byes."""
        ids: List[str] = []
        for game in self.games:
            ids.extend(game.player_ids())
        ids.extend(p.id for p in self.byes)
        return ids

    def to_dict(self) -> Dict[str, Any]:
        """Serialize round to dictionary."""
        return {
            "id": self.id,
            "type": self.type,
            "games": [g.to_dict() for g in self.games],
            "byes": [p.to_dict() for p in self.byes],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Round":
        """Deserialize round from dictionary."""
        round_type = data.get("type", "mixer")
        return cls(
            id=str(data["id"]),
            type=ROUND_TYPE_ALIASES.get(round_type, round_type),
            games=[Game.from_dict(g) for g in data.get("games", [])],
            byes=[Player.from_dict(p) for p in data.get("byes", [])],
        )


Schedule = List[Round]


def schedule_to_list(schedule: Schedule) -> List[Dict[str, Any]]:
    """Serialize a whole schedule."""
    return [r.to_dict() for r in schedule]


def schedule_from_list(data: List[Dict[str, Any]]) -> Schedule:
    """Deserialize a whole schedule.

    Rounds or games stored without an id are given positional ids.
    """
    schedule: Schedule = []
    for r_idx, raw_round in enumerate(data):
        raw_round = dict(raw_round)
        raw_round.setdefault("id", f"round-{r_idx}")
        raw_round["games"] = [
            {**g, "id": g.get("id") or f"game-{r_idx}-{g_idx}"}
            for g_idx, g in enumerate(raw_round.get("games", []))
        ]
        schedule.append(Round.from_dict(raw_round))
    return schedule
