"""Tap-to-swap and inline rename for a generated schedule.

An operator rearranges a round by tapping one player slot and then another
slot of the same round; the two players trade places. Renaming is separate
and never touches the swap selection.
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

from dataclasses import dataclass
from enum import Enum, auto
from typing import Callable, Iterator, Optional, Tuple

from courtshuffle.constants import NOTICE_SAME_ROUND_ONLY, PLAYERS_PER_TEAM
from courtshuffle.exceptions import CrossRoundSwapException, SlotNotFoundException
from courtshuffle.models import Player, Schedule
from courtshuffle.utils import setup_logger

logger = setup_logger(__name__)


class SwapState(Enum):
    """Selection state of the swap engine."""

    IDLE = auto()
    SELECTING = auto()


class SwapAction(Enum):
    """What a tap did."""

    SELECTED = "selected"
    DESELECTED = "deselected"
    REJECTED = "rejected"
    SWAPPED = "swapped"


@dataclass(frozen=True)
class Slot:
    """Address of one player position: round, game, team (1 or 2), position (0 or 1)."""

    round_idx: int
    game_idx: int
    team_idx: int
    pos_idx: int


@dataclass
class SwapOutcome:
    """Result of a tap, handed back to the presentation shell."""

    action: SwapAction
    notice: Optional[str] = None
    first: Optional[Player] = None
    second: Optional[Player] = None


class SwapEngine:
    """Two-state tap-to-swap machine plus rename.

    Args:
        schedule: The schedule to edit in place.
        on_notice: Optional callback receiving user-facing notices.
    """

    def __init__(
        self,
        schedule: Schedule,
        on_notice: Optional[Callable[[str], None]] = None,
    ):
        self.schedule = schedule
        self.on_notice = on_notice
        self._selected: Optional[Slot] = None
        self._editing: Optional[Slot] = None

    @property
    def state(self) -> SwapState:
        return SwapState.IDLE if self._selected is None else SwapState.SELECTING

    @property
    def selected(self) -> Optional[Slot]:
        return self._selected

    @property
    def editing(self) -> Optional[Slot]:
        return self._editing

    def reset(self, schedule: Optional[Schedule] = None) -> None:
        """Drop any selection or edit, optionally switching schedules."""
        if schedule is not None:
            self.schedule = schedule
        self._selected = None
        self._editing = None

    def player_at(self, slot: Slot) -> Player:
        """Return the player occupying a slot.

        Raises:
            SlotNotFoundException: If the slot is outside the schedule
        """
        self._check_slot(slot)
        game = self.schedule[slot.round_idx].games[slot.game_idx]
        return game.team(slot.team_idx)[slot.pos_idx]

    def tap(self, slot: Slot) -> SwapOutcome:
        """Handle a tap on a player slot."""
        self._check_slot(slot)

        if self._selected is None:
            self._selected = slot
            return SwapOutcome(SwapAction.SELECTED, first=self.player_at(slot))

        source, self._selected = self._selected, None

        if source == slot:
            return SwapOutcome(SwapAction.DESELECTED)

        if source.round_idx != slot.round_idx:
            logger.info(
                "Rejected swap between round %s and round %s",
                source.round_idx + 1,
                slot.round_idx + 1,
            )
            if self.on_notice:
                self.on_notice(NOTICE_SAME_ROUND_ONLY)
            return SwapOutcome(SwapAction.REJECTED, notice=NOTICE_SAME_ROUND_ONLY)

        first, second = self.swap(source, slot)
        return SwapOutcome(SwapAction.SWAPPED, first=first, second=second)

    def swap(self, source: Slot, target: Slot) -> Tuple[Player, Player]:
        """Exchange the players of two slots in the same round.

        Returns:
            The (source player, target player) pair as they were before the swap

        Raises:
            CrossRoundSwapException: If the slots are in different rounds
            SlotNotFoundException: If either slot is outside the schedule
        """
        if source.round_idx != target.round_idx:
            raise CrossRoundSwapException(NOTICE_SAME_ROUND_ONLY)

        src_player = self.player_at(source)
        tgt_player = self.player_at(target)
        games = self.schedule[source.round_idx].games
        games[source.game_idx].team(source.team_idx)[source.pos_idx] = tgt_player
        games[target.game_idx].team(target.team_idx)[target.pos_idx] = src_player

        logger.info(
            "Round %s: swapped %s and %s",
            source.round_idx + 1,
            src_player.display_name,
            tgt_player.display_name,
        )
        return src_player, tgt_player

    # ----- rename -----

    def begin_rename(self, slot: Slot) -> str:
        """Start an inline edit (long-press). Returns the current name."""
        player = self.player_at(slot)
        self._editing = slot
        return player.display_name

    def commit_rename(self, new_name: str) -> Optional[Player]:
        """Apply the pending edit (blur). Returns the renamed player, if any."""
        if self._editing is None:
            return None
        slot, self._editing = self._editing, None
        return self.rename(slot, new_name)

    def cancel_rename(self) -> None:
        self._editing = None

    def rename(self, slot: Slot, new_name: str) -> Player:
        """Rename the player in a slot.

        Every occurrence of the same player id in the schedule shows the new
        name. Blank names are ignored.
        """
        player = self.player_at(slot)
        name = new_name.strip()
        if not name or name == player.display_name:
            return player

        old_name = player.display_name
        for candidate in self._occurrences(player.id):
            candidate.display_name = name
        logger.info("Renamed %s to %s", old_name, name)
        return player

    def _occurrences(self, player_id: str) -> Iterator[Player]:
        for round_data in self.schedule:
            for game in round_data.games:
                yield from (p for p in game.players if p.id == player_id)
            yield from (p for p in round_data.byes if p.id == player_id)

    def _check_slot(self, slot: Slot) -> None:
        if not 0 <= slot.round_idx < len(self.schedule):
            raise SlotNotFoundException(f"No round {slot.round_idx}")
        games = self.schedule[slot.round_idx].games
        if not 0 <= slot.game_idx < len(games):
            raise SlotNotFoundException(
                f"No game {slot.game_idx} in round {slot.round_idx}"
            )
        if slot.team_idx not in (1, 2) or not 0 <= slot.pos_idx < PLAYERS_PER_TEAM:
            raise SlotNotFoundException(f"Invalid team/position in {slot}")
