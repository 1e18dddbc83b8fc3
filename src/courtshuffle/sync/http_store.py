"""HTTP client for the collaboration endpoints.

Every endpoint answers JSON with a ``status`` field; anything other than
``"success"`` is treated as a failure.
"""

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

from typing import Any, Dict, Optional

import requests

from courtshuffle.constants import (
    ENDPOINT_CREATE_SESSION,
    ENDPOINT_FINISH_SESSION,
    ENDPOINT_GET_SCORES,
    ENDPOINT_JOIN_SESSION,
    ENDPOINT_SYNC_SCORES,
    SESSION_ACTIVE,
)
from courtshuffle.exceptions import NetworkException
from courtshuffle.sync.settings import SyncSettings
from courtshuffle.sync.store import (
    CreatedSession,
    JoinedSession,
    PollResponse,
    RemoteSessionStore,
    ScoreUpdate,
)
from courtshuffle.utils import setup_logger

logger = setup_logger(__name__)


class HttpSessionStore(RemoteSessionStore):
    """Remote session store backed by the PHP collaboration API.

    Args:
        settings: Base URL, timeout and device user id.
        session: Optional ``requests.Session`` to reuse connections (or to
            stub the transport in tests).
    """

    def __init__(
        self, settings: SyncSettings, session: Optional[requests.Session] = None
    ):
        self.settings = settings
        self.http = session if session is not None else requests.Session()

    def _url(self, endpoint: str) -> str:
        return f"{self.settings.api_url}/{endpoint}"

    def _check(self, response: requests.Response, endpoint: str) -> Dict[str, Any]:
        try:
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            raise NetworkException(f"{endpoint}: {e}") from e
        if not isinstance(data, dict) or data.get("status") != "success":
            message = data.get("message") if isinstance(data, dict) else None
            raise NetworkException(f"{endpoint}: {message or 'request failed'}")
        return data

    def _post(self, endpoint: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        try:
            response = self.http.post(
                self._url(endpoint), json=payload, timeout=self.settings.timeout
            )
        except requests.RequestException as e:
            raise NetworkException(f"{endpoint}: {e}") from e
        return self._check(response, endpoint)

    def _get(self, endpoint: str, params: Dict[str, Any]) -> Dict[str, Any]:
        try:
            response = self.http.get(
                self._url(endpoint), params=params, timeout=self.settings.timeout
            )
        except requests.RequestException as e:
            raise NetworkException(f"{endpoint}: {e}") from e
        return self._check(response, endpoint)

    def create_session(self, metadata: Dict[str, Any]) -> CreatedSession:
        # Scores are pushed separately once the session exists
        payload = {**metadata, "scores": {}}
        data = self._post(ENDPOINT_CREATE_SESSION, payload)
        try:
            return CreatedSession(
                session_id=str(data["session_id"]), share_code=str(data["share_code"])
            )
        except KeyError as e:
            raise NetworkException(f"create session: missing {e}") from e

    def join_session(
        self, share_code: str, user_id: Optional[str] = None
    ) -> JoinedSession:
        user = user_id or self.settings.user_id or ""
        joined = self._post(
            ENDPOINT_JOIN_SESSION, {"share_code": share_code, "user_id": user}
        )
        session = joined.get("session") or {}
        scores = self.poll_updates(share_code, 0, user_id=user)
        return JoinedSession(
            session_id=str(session.get("id", "")),
            share_code=str(session.get("share_code", share_code)),
            metadata={
                "group_name": session.get("group_name"),
                "schedule": joined.get("schedule") or [],
                "players": joined.get("players") or [],
            },
            updates=scores.updates,
            latest_timestamp=scores.latest_timestamp,
            connected_count=scores.connected_count,
        )

    def upsert_scores(
        self,
        share_code: str,
        session_id: str,
        round_idx: int,
        game_idx: int,
        s1: str,
        s2: str,
        client_timestamp: int,
    ) -> None:
        self._post(
            ENDPOINT_SYNC_SCORES,
            {
                "share_code": share_code,
                "session_id": session_id,
                "round_idx": round_idx,
                "game_idx": game_idx,
                "s1_str": s1,
                "s2_str": s2,
                "updated_at": client_timestamp,
            },
        )

    def poll_updates(
        self, share_code: str, since: int, user_id: Optional[str] = None
    ) -> PollResponse:
        data = self._get(
            ENDPOINT_GET_SCORES,
            {
                "share_code": share_code,
                "since": since,
                "user_id": user_id or self.settings.user_id or "",
            },
        )
        try:
            updates = [ScoreUpdate.from_dict(u) for u in data.get("updates") or []]
        except (KeyError, TypeError, ValueError) as e:
            raise NetworkException(f"poll: malformed update {e}") from e
        return PollResponse(
            updates=updates,
            latest_timestamp=int(data.get("latest_timestamp") or 0),
            connected_count=int(data.get("connected_users") or 0),
            session_status=data.get("session_status") or SESSION_ACTIVE,
            group_name=data.get("group_name"),
        )

    def finish_session(self, share_code: str, session_id: str) -> None:
        self._post(
            ENDPOINT_FINISH_SESSION,
            {"share_code": share_code, "session_id": session_id},
        )
