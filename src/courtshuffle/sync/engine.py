"""Score replication between devices sharing a live session.

One device creates the session and pushes whatever scores it already has;
others join with the share code and take over the remote score set. From
then on every device pushes its own settled changes and polls for the
changes of the others.

Network calls go through an optional :class:`concurrent.futures.Executor`
so they do not block the caller. Results are always applied on the thread
that drives the scheduler: a poll submitted on one tick is applied on a
later tick once it is done. Without an executor calls run inline, which is
what the tests use.
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

from concurrent.futures import Executor, Future
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Callable, Dict, List, Optional, Tuple

from courtshuffle.constants import (
    NOTICE_DURATION,
    NOTICE_MATCH_COMPLETE,
    NOTICE_UPDATED_BY_COLLABORATOR,
    POLL_INTERVAL,
    PROTECTION_WINDOW,
    SHARE_CODE_LENGTH,
    TEAM_1,
    TEAM_2,
)
from courtshuffle.controllers import ScoreChangeResult, ScoreStateMachine
from courtshuffle.exceptions import (
    InvalidShareCodeException,
    NetworkException,
    SessionCreateException,
    SessionJoinException,
    SessionNotInitializedException,
    SyncException,
)
from courtshuffle.models import Schedule, schedule_to_list
from courtshuffle.sync.clock import Clock, SystemClock
from courtshuffle.sync.protection import ProtectedKeys
from courtshuffle.sync.scheduler import Scheduler, TimerHandle
from courtshuffle.sync.store import (
    JoinedSession,
    PollResponse,
    RemoteSessionStore,
    ScoreUpdate,
)
from courtshuffle.type_hints import ScoreMap
from courtshuffle.utils import game_keys, parse_score_key, score_key, setup_logger

logger = setup_logger(__name__)


class SyncState(Enum):
    IDLE = auto()
    INITIALIZED = auto()
    FINISHED = auto()


@dataclass
class SyncSession:
    """Handle on the remote session this device is attached to.

    Attributes
    ----------
    share_code : str
        Public code other devices join with.
    session_id : str
        Store-side id, sent along with every upsert.
    last_seen_timestamp : int
        Newest update timestamp already applied; polls ask for newer rows.
    connected_count : int
        Participants the store reported on the last join or poll.
    is_creator : bool
        True on the device that created the session.
    """

    share_code: str
    session_id: str
    last_seen_timestamp: int = 0
    connected_count: int = 0
    is_creator: bool = False


def normalize_share_code(share_code: str) -> str:
    """Strip and upper-case a typed share code.

    Raises:
        InvalidShareCodeException: If the result is not a six character
            alphanumeric code
    """
    code = (share_code or "").strip().upper()
    if len(code) != SHARE_CODE_LENGTH or not code.isalnum():
        raise InvalidShareCodeException(f"Invalid share code '{share_code}'")
    return code


def scores_from_updates(updates: List[ScoreUpdate]) -> ScoreMap:
    """Flatten stored game rows into a score map, skipping empty values."""
    scores = {}
    for update in updates:
        for team, value in ((TEAM_1, update.s1), (TEAM_2, update.s2)):
            if value:
                scores[score_key(update.round_idx, update.game_idx, team)] = value
    return scores


class SyncEngine:
    """Replicates a :class:`ScoreStateMachine` through a remote store.

    Args:
        scores: The local score state machine. The engine writes into it
            only for keys outside the protection window.
        store: Remote session store.
        scheduler: Timer source for the poll interval and notice expiry.
        clock: Clock for protection expiry and client timestamps.
        executor: Optional executor for network calls.
        poll_interval: Seconds between polls.
        protection_window: Seconds a locally pushed field ignores the server.
        user_id: Device id reported to the store.
        on_notice: Called with a notice text, and with None once it hides.
        on_finished: Called once with the group name when a collaborator
            finishes the match.
    """

    def __init__(
        self,
        scores: ScoreStateMachine,
        store: RemoteSessionStore,
        scheduler: Scheduler,
        clock: Optional[Clock] = None,
        executor: Optional[Executor] = None,
        poll_interval: float = POLL_INTERVAL,
        protection_window: float = PROTECTION_WINDOW,
        user_id: Optional[str] = None,
        on_notice: Optional[Callable[[Optional[str]], None]] = None,
        on_finished: Optional[Callable[[Optional[str]], None]] = None,
    ):
        self.scores = scores
        self.store = store
        self.scheduler = scheduler
        self.clock = clock if clock is not None else SystemClock()
        self.executor = executor
        self.poll_interval = poll_interval
        self.protected = ProtectedKeys(self.clock, protection_window)
        self.user_id = user_id
        self.on_notice = on_notice
        self.on_finished = on_finished

        self.state = SyncState.IDLE
        self.session: Optional[SyncSession] = None
        self.notice: Optional[str] = None
        self.finished_group_name: Optional[str] = None
        self._poll_timer: Optional[TimerHandle] = None
        self._notice_timer: Optional[TimerHandle] = None
        self._pending_poll: Optional[Future] = None

    @property
    def initialized(self) -> bool:
        return self.state is SyncState.INITIALIZED

    @property
    def finished(self) -> bool:
        return self.state is SyncState.FINISHED

    # ----- session setup -----

    def create_session(
        self, schedule: Schedule, metadata: Optional[Dict[str, Any]] = None
    ) -> SyncSession:
        """Open a remote session for ``schedule`` and push the current scores.

        Returns:
            The new session, already polling

        Raises:
            SessionCreateException: If the store could not be reached
        """
        self.clear_finished()
        self.stop()
        payload: Dict[str, Any] = {
            "schedule": schedule_to_list(schedule),
            "user_id": self.user_id,
        }
        payload.update(metadata or {})

        try:
            created = self.store.create_session(payload)
        except NetworkException as e:
            logger.error("Could not create session: %s", e)
            raise SessionCreateException(str(e)) from e

        session = SyncSession(
            share_code=created.share_code,
            session_id=created.session_id,
            connected_count=1,
            is_creator=True,
        )
        self.session = session
        for (round_idx, game_idx), (s1, s2) in self._entered_games():
            self._push(round_idx, game_idx, s1, s2)

        logger.info("Created session %s", session.share_code)
        self._start()
        return session

    def join_session(self, share_code: str) -> JoinedSession:
        """Attach to an existing session and adopt its scores.

        The local score map is replaced, not merged.

        Raises:
            InvalidShareCodeException: If the code is malformed
            SessionJoinException: If the session does not exist or the store
                could not be reached
        """
        code = normalize_share_code(share_code)
        self.clear_finished()
        self.stop()
        try:
            joined = self.store.join_session(code, self.user_id)
        except NetworkException as e:
            logger.error("Could not join session %s: %s", code, e)
            raise SessionJoinException(str(e)) from e

        self.scores.replace_scores(scores_from_updates(joined.updates))
        self.protected.clear()
        newest = max((u.updated_at for u in joined.updates), default=0)
        self.session = SyncSession(
            share_code=joined.share_code,
            session_id=joined.session_id,
            last_seen_timestamp=max(newest, joined.latest_timestamp),
            connected_count=joined.connected_count,
        )
        logger.info(
            "Joined session %s with %s scored games (%s connected)",
            joined.share_code,
            len(joined.updates),
            joined.connected_count,
        )
        self._start()
        return joined

    def _entered_games(self) -> List[Tuple[Tuple[int, int], Tuple[str, str]]]:
        games: Dict[Tuple[int, int], List[str]] = {}
        for key, value in self.scores.scores.items():
            parsed = parse_score_key(key)
            if parsed is None or not value:
                continue
            round_idx, game_idx, team = parsed
            pair = games.setdefault((round_idx, game_idx), ["", ""])
            pair[0 if team == TEAM_1 else 1] = value
        return [(address, (s1, s2)) for address, (s1, s2) in sorted(games.items())]

    def _start(self) -> None:
        self.state = SyncState.INITIALIZED
        self._poll_timer = self.scheduler.call_every(self.poll_interval, self.poll)

    # ----- outgoing -----

    def handle_result(self, result: Optional[ScoreChangeResult]) -> Optional[Future]:
        """Forward a score machine result. Unchanged results are never sent."""
        if result is None or not result.changed:
            return None
        return self.push_score(result.round_idx, result.game_idx, result.s1, result.s2)

    def push_score(
        self, round_idx: int, game_idx: int, s1: str, s2: str
    ) -> Optional[Future]:
        """Protect both fields of a game and upsert the settled pair.

        Does nothing unless a session is active. Failures are logged; the
        next keystroke or poll reconciles.
        """
        if not self.initialized:
            logger.debug(
                "Sync not initialized, not pushing game %s/%s", round_idx, game_idx
            )
            return None
        self.protected.protect(game_keys(round_idx, game_idx))
        return self._push(round_idx, game_idx, s1, s2)

    def _push(self, round_idx: int, game_idx: int, s1: str, s2: str) -> Future:
        session = self.session
        future = self._submit(
            self.store.upsert_scores,
            session.share_code,
            session.session_id,
            round_idx,
            game_idx,
            s1,
            s2,
            self.clock.timestamp_ms(),
        )
        future.add_done_callback(self._log_push_failure)
        return future

    @staticmethod
    def _log_push_failure(future: Future) -> None:
        error = future.exception()
        if error is not None:
            logger.warning("Score push failed: %s", error)

    def _submit(self, fn: Callable[..., Any], *args: Any) -> Future:
        if self.executor is not None:
            return self.executor.submit(fn, *args)
        future: Future = Future()
        try:
            future.set_result(fn(*args))
        except SyncException as e:
            future.set_exception(e)
        return future

    # ----- incoming -----

    def poll(self) -> None:
        """One poll tick.

        Applies a finished earlier request first. A request still in flight
        makes the tick a no-op so requests never overlap.
        """
        if not self.initialized:
            return
        if self._pending_poll is not None:
            if not self._pending_poll.done():
                return
            future, self._pending_poll = self._pending_poll, None
            self._complete_poll(future)
            if not self.initialized:
                return

        session = self.session
        future = self._submit(
            self.store.poll_updates,
            session.share_code,
            session.last_seen_timestamp,
            self.user_id,
        )
        if future.done():
            self._complete_poll(future)
        else:
            self._pending_poll = future

    def _complete_poll(self, future: Future) -> None:
        error = future.exception()
        if error is not None:
            logger.warning("Poll failed: %s", error)
            return
        if self.initialized:
            self.apply_poll(future.result())

    def apply_poll(self, response: PollResponse) -> List[str]:
        """Merge a poll response into the local score map.

        Returns:
            The keys that took a collaborator's value
        """
        if response.finished:
            self._finish_remotely(response.group_name)
            return []

        session = self.session
        session.connected_count = response.connected_count
        applied = []
        newest = session.last_seen_timestamp
        # Oldest row holding a different value for a protected key. The
        # cursor stays before it so the row is fetched again after expiry.
        held_back: Optional[int] = None
        for update in response.updates:
            newest = max(newest, update.updated_at)
            if not self.scores.has_game(update.round_idx, update.game_idx):
                logger.debug(
                    "Ignoring update for unknown game %s/%s",
                    update.round_idx,
                    update.game_idx,
                )
                continue
            for team, value in ((TEAM_1, update.s1), (TEAM_2, update.s2)):
                key = score_key(update.round_idx, update.game_idx, team)
                differs = value and value != self.scores.scores.get(key, "")
                if key in self.protected:
                    if differs and (held_back is None or update.updated_at < held_back):
                        held_back = update.updated_at
                    continue
                if differs:
                    self.scores.apply_remote(key, value)
                    applied.append(key)

        cursor = max(newest, response.latest_timestamp)
        if held_back is not None:
            cursor = min(cursor, held_back - 1)
        session.last_seen_timestamp = max(session.last_seen_timestamp, cursor)

        if applied:
            logger.info("Applied %s field(s) from collaborators", len(applied))
            self.show_notice(NOTICE_UPDATED_BY_COLLABORATOR)
        return applied

    def _finish_remotely(self, group_name: Optional[str]) -> None:
        logger.info(
            "Session %s was finished by a collaborator", self.session.share_code
        )
        self.finished_group_name = group_name
        self._end()
        self.show_notice(NOTICE_MATCH_COMPLETE, auto_hide=False)
        if self.on_finished:
            self.on_finished(group_name)

    # ----- notices -----

    def show_notice(self, text: str, auto_hide: bool = True) -> None:
        if self._notice_timer is not None:
            self._notice_timer.cancel()
            self._notice_timer = None
        self.notice = text
        if self.on_notice:
            self.on_notice(text)
        if auto_hide:
            self._notice_timer = self.scheduler.call_later(
                NOTICE_DURATION, self.dismiss_notice
            )

    def dismiss_notice(self) -> None:
        if self._notice_timer is not None:
            self._notice_timer.cancel()
            self._notice_timer = None
        if self.notice is None:
            return
        self.notice = None
        if self.on_notice:
            self.on_notice(None)

    # ----- teardown -----

    def finish_session(self) -> None:
        """Mark the session finished for every participant.

        Raises:
            SessionNotInitializedException: If no session is active
            NetworkException: If the store could not be reached
        """
        if not self.initialized:
            raise SessionNotInitializedException("No active session to finish")
        session = self.session
        self.store.finish_session(session.share_code, session.session_id)
        logger.info("Finished session %s", session.share_code)
        self._end()

    def _end(self) -> None:
        self._cancel_timers()
        self.state = SyncState.FINISHED
        self.scores.locked = True

    def stop(self) -> None:
        """Stop polling and detach. A finished session stays finished."""
        self._cancel_timers()
        self.protected.clear()
        if self.state is SyncState.INITIALIZED:
            logger.info("Left session %s", self.session.share_code)
            self.state = SyncState.IDLE
            self.session = None

    def clear_finished(self) -> None:
        """Forget a finished session and unlock the score sheet."""
        if self.state is not SyncState.FINISHED:
            return
        self.dismiss_notice()
        self.state = SyncState.IDLE
        self.session = None
        self.scores.locked = False
        self.finished_group_name = None

    def _cancel_timers(self) -> None:
        if self._poll_timer is not None:
            self._poll_timer.cancel()
            self._poll_timer = None
        self._pending_poll = None
