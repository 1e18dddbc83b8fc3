"""Short-lived protection of locally typed score fields."""

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

from typing import Dict, Iterable, List

from courtshuffle.constants import PROTECTION_WINDOW
from courtshuffle.sync.clock import Clock


class ProtectedKeys:
    """Map of score key to expiry instant.

    A protected key is skipped when poll results are applied, so a value the
    user just typed is not replaced by a server copy that predates it.
    Entries expire on their own; nothing has to remove them.
    """

    def __init__(self, clock: Clock, window: float = PROTECTION_WINDOW):
        self.clock = clock
        self.window = window
        self._expiry: Dict[str, float] = {}

    def protect(self, keys: Iterable[str]) -> None:
        """Protect keys for a full window from now, extending any earlier entry."""
        expires_at = self.clock.now() + self.window
        for key in keys:
            self._expiry[key] = expires_at

    def is_protected(self, key: str) -> bool:
        expires_at = self._expiry.get(key)
        if expires_at is None:
            return False
        if self.clock.now() >= expires_at:
            del self._expiry[key]
            return False
        return True

    def active_keys(self) -> List[str]:
        """Keys still inside their window, expired entries dropped."""
        return [key for key in list(self._expiry) if self.is_protected(key)]

    def clear(self) -> None:
        self._expiry.clear()

    def __contains__(self, key: str) -> bool:
        return self.is_protected(key)
