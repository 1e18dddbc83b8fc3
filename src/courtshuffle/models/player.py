"""Player data class."""

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

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class Player:
    """A participant in a live match.

    Attributes
    ----------
    id : str
        Stable identity of the player; never changes during a session.
    display_name : str
        Name shown on the schedule. Mutable through rename.
    gender : str or None
        Free-form gender string. Anything starting with ``f`` counts as
        female, everything else (including missing) as male.
    """

    id: str
    display_name: str
    gender: Optional[str] = None

    @property
    def is_female(self) -> bool:
        return (self.gender or "").strip().lower().startswith("f")

    @property
    def is_male(self) -> bool:
        return not self.is_female

    def to_dict(self) -> Dict[str, Any]:
        """Serialize player to dictionary."""
        return {
            "id": self.id,
            "display_name": self.display_name,
            "gender": self.gender,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Player":
        """Deserialize player from dictionary.

        Roster payloads name the display field ``first_name`` or ``name``;
        both are accepted.
        """
        name = (
            data.get("display_name")
            or data.get("first_name")
            or data.get("name")
            or "Unknown"
        )
        return cls(id=str(data["id"]), display_name=name, gender=data.get("gender"))
