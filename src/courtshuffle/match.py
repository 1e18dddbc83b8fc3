"""The live match: roster, schedule, swaps, scores and sync in one place."""

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
from concurrent.futures import Executor
from typing import Any, Callable, Dict, Iterable, List, Optional

from courtshuffle.constants import DEFAULT_ROUND_COUNT, DEFAULT_ROUND_TYPE
from courtshuffle.controllers import (
    CompletedGame,
    FocusTarget,
    ScoreChangeResult,
    ScoreStateMachine,
    Slot,
    SwapEngine,
    SwapOutcome,
)
from courtshuffle.exceptions import (
    InsufficientPlayersException,
    InvalidConfigurationException,
)
from courtshuffle.models import (
    MatchConfig,
    PartnerHistory,
    Player,
    Schedule,
    partner_conflicts,
    schedule_from_list,
    schedule_to_list,
)
from courtshuffle.pairing import ScheduleGenerator
from courtshuffle.sync import (
    Clock,
    JoinedSession,
    RemoteSessionStore,
    Scheduler,
    SyncEngine,
    SyncSession,
)
from courtshuffle.utils import setup_logger

logger = setup_logger(__name__)


class LiveMatch:
    """Main live match class.

    This class wires the pieces of a session together:
    - ScheduleGenerator: builds rounds from the roster
    - SwapEngine: tap-to-swap and rename on the schedule
    - ScoreStateMachine: score entry and focus
    - SyncEngine: replication to other devices (only with a store)

    Args
    ----
    players: Roster of the match
    config: Match configuration, defaults to five mixer rounds to 11
    rng: Random source for generation
    store: Remote session store; without one the match is local only
    scheduler: Timer source for sync, required together with ``store``
    clock: Clock for sync timestamps and protection
    executor: Runs sync network calls off the calling thread
    user_id: Device id reported to the store
    on_focus, on_complete: Score machine callbacks
    on_notice: Receives swap and sync notices, None when a notice hides
    on_finished: Called with the group name when a collaborator finishes
    """

    def __init__(
        self,
        players: Iterable[Player],
        config: Optional[MatchConfig] = None,
        rng: Optional[random.Random] = None,
        store: Optional[RemoteSessionStore] = None,
        scheduler: Optional[Scheduler] = None,
        clock: Optional[Clock] = None,
        executor: Optional[Executor] = None,
        user_id: Optional[str] = None,
        on_focus: Optional[Callable[[FocusTarget], None]] = None,
        on_complete: Optional[Callable[[], None]] = None,
        on_notice: Optional[Callable[[Optional[str]], None]] = None,
        on_finished: Optional[Callable[[Optional[str]], None]] = None,
    ) -> None:
        self.config = config if config is not None else MatchConfig()
        self.players: Dict[str, Player] = {p.id: p for p in players}
        self.rng = rng if rng is not None else random.Random()
        self.generator = self._new_generator()
        self.schedule: Schedule = []

        self.swap_engine = SwapEngine(self.schedule, on_notice=on_notice)
        self.scores = ScoreStateMachine(
            self.schedule,
            winning_score=self.config.winning_score,
            on_focus=on_focus,
            on_complete=on_complete,
        )

        self.sync: Optional[SyncEngine] = None
        if store is not None:
            if scheduler is None:
                raise InvalidConfigurationException("A store needs a scheduler")
            self.sync = SyncEngine(
                self.scores,
                store,
                scheduler,
                clock=clock,
                executor=executor,
                poll_interval=self.config.poll_interval,
                protection_window=self.config.protection_window,
                user_id=user_id,
                on_notice=on_notice,
                on_finished=on_finished,
            )

    # ========== Properties ==========

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def roster(self) -> List[Player]:
        return list(self.players.values())

    @property
    def session(self) -> Optional[SyncSession]:
        return self.sync.session if self.sync is not None else None

    # ========== Schedule ==========

    def _new_generator(self) -> ScheduleGenerator:
        return ScheduleGenerator(
            rng=self.rng,
            history=PartnerHistory(),
            max_attempts=self.config.max_shuffle_attempts,
        )

    def generate(self, round_types: Optional[List[str]] = None) -> Schedule:
        """Generate a fresh schedule, dropping scores and partner history.

        Raises:
            InsufficientPlayersException: If the roster is empty
            InvalidRoundTypeException: If a round type is not recognised
        """
        if not self.players:
            raise InsufficientPlayersException("Cannot generate rounds without players")
        types = round_types if round_types is not None else self.config.round_types
        self.generator = self._new_generator()
        schedule = self.generator.generate(self.roster, types)
        self._install(schedule)
        return schedule

    def reshuffle(self) -> Schedule:
        """Regenerate with the same round types as the current schedule."""
        if self.schedule:
            types = [round_data.type for round_data in self.schedule]
        else:
            types = [DEFAULT_ROUND_TYPE] * DEFAULT_ROUND_COUNT
        logger.info("Reshuffling %s rounds", len(types))
        return self.generate(types)

    def _install(self, schedule: Schedule, keep_scores: bool = False) -> None:
        self.schedule = schedule
        self.swap_engine.reset(schedule)
        self.scores.schedule = schedule
        if not keep_scores:
            self.scores.clear_scores()

    def partner_conflicts(self) -> Dict[str, int]:
        return partner_conflicts(self.schedule)

    # ========== Swap / rename ==========

    def tap(self, slot: Slot) -> SwapOutcome:
        return self.swap_engine.tap(slot)

    def rename(self, slot: Slot, new_name: str) -> Player:
        player = self.swap_engine.rename(slot, new_name)
        if player.id in self.players:
            self.players[player.id].display_name = player.display_name
        return player

    # ========== Scores ==========

    def set_winning_score(self, value: Any) -> int:
        number = self.scores.set_winning_score(value)
        self.config.winning_score = number
        return number

    def enter_score(
        self, round_idx: int, game_idx: int, team: str, value: str
    ) -> Optional[ScoreChangeResult]:
        """Feed a keystroke to the score machine and replicate settled pairs."""
        result = self.scores.handle_score_change(round_idx, game_idx, team, value)
        if self.sync is not None:
            self.sync.handle_result(result)
        return result

    def clear_scores(self) -> None:
        self.scores.clear_scores()

    def completed_games(self) -> List[CompletedGame]:
        return self.scores.completed_games()

    def is_complete(self) -> bool:
        return bool(self.schedule) and self.scores.is_complete()

    # ========== Collaboration ==========

    def _require_sync(self) -> SyncEngine:
        if self.sync is None:
            raise InvalidConfigurationException("No remote session store configured")
        return self.sync

    def invite(self) -> SyncSession:
        """Open a shared session for the current schedule.

        Raises:
            InvalidConfigurationException: If the match has no store
            SessionCreateException: If the store could not be reached
        """
        sync = self._require_sync()
        metadata = {
            "group_name": self.config.name,
            "players": [p.to_dict() for p in self.roster],
        }
        return sync.create_session(self.schedule, metadata)

    def join(self, share_code: str) -> JoinedSession:
        """Join a shared session and adopt its schedule and scores.

        Raises:
            InvalidConfigurationException: If the match has no store
            SessionJoinException: If the code is unknown or the store could
                not be reached
        """
        joined = self._require_sync().join_session(share_code)

        group_name = joined.metadata.get("group_name")
        if group_name:
            self.config.name = group_name
        schedule_data = joined.metadata.get("schedule")
        if schedule_data:
            schedule = schedule_from_list(schedule_data)
            self._adopt_players(schedule)
            self._install(schedule, keep_scores=True)
        return joined

    def _adopt_players(self, schedule: Schedule) -> None:
        for round_data in schedule:
            for game in round_data.games:
                for player in game.players:
                    self.players.setdefault(player.id, player)
            for player in round_data.byes:
                self.players.setdefault(player.id, player)

    def finish(self) -> None:
        """Mark the shared session finished for everyone."""
        self._require_sync().finish_session()

    def leave(self) -> None:
        if self.sync is not None:
            self.sync.stop()

    # ========== Serialization ==========

    def to_dict(self) -> Dict[str, Any]:
        """Serialize match to dictionary."""
        return {
            "config": self.config.to_dict(),
            "players": [p.to_dict() for p in self.roster],
            "schedule": schedule_to_list(self.schedule),
            "scores": dict(self.scores.scores),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], **kwargs: Any) -> "LiveMatch":
        """Deserialize match from dictionary.

        Keyword arguments are passed to the constructor (store, scheduler,
        callbacks and so on).
        """
        match = cls(
            players=[Player.from_dict(p) for p in data.get("players", [])],
            config=MatchConfig.from_dict(data.get("config", {})),
            **kwargs,
        )
        schedule = schedule_from_list(data.get("schedule", []))
        match._adopt_players(schedule)
        match._install(schedule, keep_scores=True)
        match.scores.replace_scores(data.get("scores", {}))
        return match
