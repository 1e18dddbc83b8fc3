"""Sync settings read from the environment."""

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

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from courtshuffle.constants import DEFAULT_HTTP_TIMEOUT
from courtshuffle.exceptions import InvalidConfigurationException


@dataclass
class SyncSettings:
    """Where and how to reach the remote session store.

    Attributes
    ----------
    api_url : str
        Base URL of the collaboration endpoints.
    timeout : float
        Per-request timeout in seconds.
    user_id : str or None
        Identifies this device to the store for the connected-users count.
    """

    api_url: str
    timeout: float = DEFAULT_HTTP_TIMEOUT
    user_id: Optional[str] = None

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "SyncSettings":
        """Read ``COURTSHUFFLE_API_URL``, ``COURTSHUFFLE_HTTP_TIMEOUT`` and
        ``COURTSHUFFLE_USER_ID``.

        Raises:
            InvalidConfigurationException: If the URL is missing or the
                timeout is not a positive number
        """
        env = os.environ if environ is None else environ
        api_url = env.get("COURTSHUFFLE_API_URL", "").strip()
        if not api_url:
            raise InvalidConfigurationException("COURTSHUFFLE_API_URL is not set")

        raw_timeout = env.get("COURTSHUFFLE_HTTP_TIMEOUT", str(DEFAULT_HTTP_TIMEOUT))
        try:
            timeout = float(raw_timeout.strip())
        except ValueError:
            raise InvalidConfigurationException(
                f"COURTSHUFFLE_HTTP_TIMEOUT is not a number: {raw_timeout!r}"
            ) from None
        if timeout <= 0:
            raise InvalidConfigurationException(
                "COURTSHUFFLE_HTTP_TIMEOUT must be positive"
            )

        user_id = env.get("COURTSHUFFLE_USER_ID", "").strip() or None
        return cls(api_url=api_url.rstrip("/"), timeout=timeout, user_id=user_id)
