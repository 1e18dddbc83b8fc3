"""MatchConfig data class."""

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
from typing import Any, Dict

from courtshuffle.constants import (
    DEFAULT_ROUND_COUNT,
    DEFAULT_ROUND_TYPE,
    DEFAULT_WINNING_SCORE,
    MAX_SHUFFLE_ATTEMPTS,
    POLL_INTERVAL,
    PROTECTION_WINDOW,
    ROUND_TYPE_ALIASES,
    ROUND_TYPES,
)
from courtshuffle.exceptions import InvalidConfigurationException
from courtshuffle.type_hints import RoundRequests


def normalize_round_type(round_type: str) -> str:
    """Map legacy round type names onto the canonical ones."""
    return ROUND_TYPE_ALIASES.get(round_type, round_type)


@dataclass
class MatchConfig:
    """Live match configuration settings.

    Attributes
    ----------
    name : str
        Group or match name, sent as session metadata.
    winning_score : int
        Score that wins a game; drives score prediction.
    round_types : list of str
        Ordered round type requests, one per round.
    max_shuffle_attempts : int
        Retry bound of the shuffle-and-validate generator.
    poll_interval : float
        Seconds between sync polls.
    protection_window : float
        Seconds a locally typed score is shielded from incoming polls.
    """

    name: str = "Live Match"
    winning_score: int = DEFAULT_WINNING_SCORE
    round_types: RoundRequests = field(
        default_factory=lambda: [DEFAULT_ROUND_TYPE] * DEFAULT_ROUND_COUNT
    )
    max_shuffle_attempts: int = MAX_SHUFFLE_ATTEMPTS
    poll_interval: float = POLL_INTERVAL
    protection_window: float = PROTECTION_WINDOW

    def __post_init__(self):
        self.round_types = [normalize_round_type(t) for t in self.round_types]
        unknown = [t for t in self.round_types if t not in ROUND_TYPES]
        if unknown:
            raise InvalidConfigurationException(f"Unknown round types: {unknown}")
        if self.winning_score < 1:
            raise InvalidConfigurationException("Winning score must be positive")
        if self.max_shuffle_attempts < 1:
            raise InvalidConfigurationException("max_shuffle_attempts must be >= 1")
        if self.poll_interval <= 0 or self.protection_window <= 0:
            raise InvalidConfigurationException("Sync intervals must be positive")

    def to_dict(self) -> Dict[str, Any]:
        """Serialize configuration to dictionary."""
        return {
            "name": self.name,
            "winning_score": self.winning_score,
            "round_types": self.round_types,
            "max_shuffle_attempts": self.max_shuffle_attempts,
            "poll_interval": self.poll_interval,
            "protection_window": self.protection_window,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MatchConfig":
        """Deserialize configuration from dictionary."""
        return cls(
            name=data.get("name", "Live Match"),
            winning_score=int(data.get("winning_score", DEFAULT_WINNING_SCORE)),
            round_types=data.get(
                "round_types", [DEFAULT_ROUND_TYPE] * DEFAULT_ROUND_COUNT
            ),
            max_shuffle_attempts=int(
                data.get("max_shuffle_attempts", MAX_SHUFFLE_ATTEMPTS)
            ),
            poll_interval=float(data.get("poll_interval", POLL_INTERVAL)),
            protection_window=float(data.get("protection_window", PROTECTION_WINDOW)),
        )
