"""Remote session store interface and an in-memory implementation.

The store is an opaque keyed upsert/fetch service: one row per game holding
both score strings and the time of the last write. The in-memory store
backs the tests and the developer CLI's multi-device simulation.
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

import random
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set, Tuple

from courtshuffle.constants import (
    SESSION_ACTIVE,
    SESSION_FINISHED,
    SHARE_CODE_ALPHABET,
    SHARE_CODE_LENGTH,
)
from courtshuffle.exceptions import (
    NetworkException,
    SessionFinishedException,
    SessionJoinException,
)
from courtshuffle.sync.clock import Clock, SystemClock
from courtshuffle.type_hints import SessionStatus
from courtshuffle.utils import generate_id, setup_logger

logger = setup_logger(__name__)


@dataclass
class ScoreUpdate:
    """Stored scores of one game."""

    round_idx: int
    game_idx: int
    s1: str
    s2: str
    updated_at: int

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the wire field names."""
        return {
            "round_idx": self.round_idx,
            "game_idx": self.game_idx,
            "s1_str": self.s1,
            "s2_str": self.s2,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScoreUpdate":
        """Deserialize from the wire field names. Missing scores become empty."""
        return cls(
            round_idx=int(data["round_idx"]),
            game_idx=int(data["game_idx"]),
            s1=str(data.get("s1_str") or ""),
            s2=str(data.get("s2_str") or ""),
            updated_at=int(data.get("updated_at") or 0),
        )


@dataclass
class CreatedSession:
    session_id: str
    share_code: str


@dataclass
class JoinedSession:
    """Everything a joining device needs: metadata and the full score set."""

    session_id: str
    share_code: str
    metadata: Dict[str, Any] = field(default_factory=dict)
    updates: List[ScoreUpdate] = field(default_factory=list)
    latest_timestamp: int = 0
    connected_count: int = 0


@dataclass
class PollResponse:
    updates: List[ScoreUpdate] = field(default_factory=list)
    latest_timestamp: int = 0
    connected_count: int = 0
    session_status: SessionStatus = SESSION_ACTIVE
    group_name: Optional[str] = None

    @property
    def finished(self) -> bool:
        return self.session_status == SESSION_FINISHED


class RemoteSessionStore:
    """Operations the sync engine needs from the backend.

    Implementations raise :class:`NetworkException` for transport failures
    and failed responses.
    """

    def create_session(self, metadata: Dict[str, Any]) -> CreatedSession:
        raise NotImplementedError

    def join_session(
        self, share_code: str, user_id: Optional[str] = None
    ) -> JoinedSession:
        raise NotImplementedError

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
        raise NotImplementedError

    def poll_updates(
        self, share_code: str, since: int, user_id: Optional[str] = None
    ) -> PollResponse:
        raise NotImplementedError

    def finish_session(self, share_code: str, session_id: str) -> None:
        raise NotImplementedError


@dataclass
class _StoredSession:
    session_id: str
    share_code: str
    metadata: Dict[str, Any]
    status: str = SESSION_ACTIVE
    rows: Dict[Tuple[int, int], ScoreUpdate] = field(default_factory=dict)
    participants: Set[str] = field(default_factory=set)
    last_timestamp: int = 0


class InMemorySessionStore(RemoteSessionStore):
    """Process-local store shared by several sync engines.

    Row timestamps never go backwards: a write is stamped with the later of
    its client timestamp and one past the session's previous write, so a
    ``since`` cursor never misses a row.

    Args:
        clock: Used to stamp rows when a client sends no timestamp.
        rng: Random source for share codes.
    """

    def __init__(
        self, clock: Optional[Clock] = None, rng: Optional[random.Random] = None
    ):
        self.clock = clock if clock is not None else SystemClock()
        self.rng = rng if rng is not None else random.Random()
        self.sessions: Dict[str, _StoredSession] = {}
        # Set to simulate a network outage
        self.offline = False

    def _ensure_online(self) -> None:
        if self.offline:
            raise NetworkException("Remote store unreachable")

    def _session(self, share_code: str) -> _StoredSession:
        session = self.sessions.get(share_code.strip().upper())
        if session is None:
            raise SessionJoinException(f"No session with code {share_code}")
        return session

    def _new_share_code(self) -> str:
        while True:
            code = "".join(
                self.rng.choice(SHARE_CODE_ALPHABET) for _ in range(SHARE_CODE_LENGTH)
            )
            if code not in self.sessions:
                return code

    def create_session(self, metadata: Dict[str, Any]) -> CreatedSession:
        self._ensure_online()
        code = self._new_share_code()
        session = _StoredSession(
            session_id=generate_id("session"), share_code=code, metadata=dict(metadata)
        )
        creator = metadata.get("user_id")
        if creator:
            session.participants.add(str(creator))
        self.sessions[code] = session
        logger.debug("Stored new session %s", code)
        return CreatedSession(session_id=session.session_id, share_code=code)

    def join_session(
        self, share_code: str, user_id: Optional[str] = None
    ) -> JoinedSession:
        self._ensure_online()
        session = self._session(share_code)
        if user_id:
            session.participants.add(user_id)
        return JoinedSession(
            session_id=session.session_id,
            share_code=session.share_code,
            metadata=dict(session.metadata),
            updates=list(session.rows.values()),
            latest_timestamp=session.last_timestamp,
            connected_count=len(session.participants),
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
        self._ensure_online()
        session = self._session(share_code)
        if session.session_id != session_id:
            raise NetworkException("Session id does not match share code")
        if session.status == SESSION_FINISHED:
            raise SessionFinishedException(f"Session {share_code} is finished")

        stamp = client_timestamp or self.clock.timestamp_ms()
        stamp = max(stamp, session.last_timestamp + 1)
        session.last_timestamp = stamp
        session.rows[(round_idx, game_idx)] = ScoreUpdate(
            round_idx, game_idx, s1, s2, stamp
        )

    def poll_updates(
        self, share_code: str, since: int, user_id: Optional[str] = None
    ) -> PollResponse:
        self._ensure_online()
        session = self._session(share_code)
        if user_id:
            session.participants.add(user_id)
        updates = sorted(
            (row for row in session.rows.values() if row.updated_at > since),
            key=lambda row: row.updated_at,
        )
        return PollResponse(
            updates=updates,
            latest_timestamp=session.last_timestamp,
            connected_count=len(session.participants),
            session_status=session.status,
            group_name=session.metadata.get("group_name"),
        )

    def finish_session(self, share_code: str, session_id: str) -> None:
        self._ensure_online()
        session = self._session(share_code)
        if session.session_id != session_id:
            raise NetworkException("Session id does not match share code")
        session.status = SESSION_FINISHED
