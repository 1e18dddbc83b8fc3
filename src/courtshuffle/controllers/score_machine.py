"""Score entry with prediction and auto-advance.

Each game has two score fields, ``t1`` and ``t2``, holding 0-2 digit
strings. Typing a losing score fills the winning score into the empty
opposing field and moves focus on; ambiguous prefixes (the first digit of
the winning score, or one below it) wait for the next keystroke.

Every keystroke returns the settled pair of both fields. A result with
``changed=False`` means the user is still typing and must not be replicated.
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
from typing import Callable, List, Mapping, Optional, Union

from courtshuffle.constants import (
    DEFAULT_WINNING_SCORE,
    MAX_SCORE_DIGITS,
    TEAM_1,
    TEAM_2,
)
from courtshuffle.exceptions import (
    InvalidScoreKeyException,
    InvalidWinningScoreException,
)
from courtshuffle.models import Game, Schedule
from courtshuffle.type_hints import ScoreMap, Team
from courtshuffle.utils import game_keys, score_key, setup_logger, sibling_team

logger = setup_logger(__name__)


@dataclass
class ScoreChangeResult:
    """Both fields of a game after a keystroke, auto-fill included."""

    round_idx: int
    game_idx: int
    s1: str
    s2: str
    changed: bool


@dataclass
class FocusTarget:
    """Where input focus should go next.

    ``scroll_to_round`` is set when the target lies in a different round than
    the field that was just typed in.
    """

    key: str
    round_idx: int
    game_idx: int
    team: Team
    scroll_to_round: Optional[int] = None


@dataclass
class CompletedGame:
    """A game with both scores entered, numbered 1-based for display."""

    round_number: int
    court_number: int
    game: Game
    s1: str
    s2: str


class ScoreStateMachine:
    """Owns the score map of a schedule.

    Args:
        schedule: Schedule whose games are being scored.
        winning_score: Score that wins a game.
        on_focus: Called with a :class:`FocusTarget` whenever focus advances.
        on_complete: Called once when no empty field is left.
    """

    def __init__(
        self,
        schedule: Schedule,
        winning_score: int = DEFAULT_WINNING_SCORE,
        on_focus: Optional[Callable[[FocusTarget], None]] = None,
        on_complete: Optional[Callable[[], None]] = None,
    ):
        self.schedule = schedule
        self.scores: ScoreMap = {}
        self.winning_score = winning_score
        self.on_focus = on_focus
        self.on_complete = on_complete
        self.focus: Optional[FocusTarget] = None
        self.locked = False
        self._complete_signalled = False

    # ----- configuration -----

    def set_winning_score(self, value: Union[int, str]) -> int:
        """Change the winning score.

        Raises:
            InvalidWinningScoreException: If the value is not a positive integer
        """
        try:
            number = int(str(value).strip())
        except ValueError:
            raise InvalidWinningScoreException(f"Not a number: {value!r}") from None
        if number <= 0:
            raise InvalidWinningScoreException(
                f"Winning score must be positive: {number}"
            )
        self.winning_score = number
        logger.info("Winning score set to %s", number)
        return number

    # ----- score map access -----

    def get(self, round_idx: int, game_idx: int, team: str) -> str:
        return self.scores.get(score_key(round_idx, game_idx, team), "")

    def result_for(
        self, round_idx: int, game_idx: int, changed: bool
    ) -> ScoreChangeResult:
        return ScoreChangeResult(
            round_idx=round_idx,
            game_idx=game_idx,
            s1=self.get(round_idx, game_idx, TEAM_1),
            s2=self.get(round_idx, game_idx, TEAM_2),
            changed=changed,
        )

    def has_game(self, round_idx: int, game_idx: int) -> bool:
        return 0 <= round_idx < len(self.schedule) and 0 <= game_idx < len(
            self.schedule[round_idx].games
        )

    def apply_remote(self, key: str, value: str) -> None:
        """Write a value received from a collaborator."""
        self.scores[key] = value

    def replace_scores(self, scores: Mapping[str, str]) -> None:
        """Replace the whole score map, dropping anything not in ``scores``."""
        self.scores = {k: v for k, v in scores.items() if v != ""}
        self._complete_signalled = False

    def clear_scores(self) -> None:
        """Forget every score and focus the first field again."""
        self.scores = {}
        self._complete_signalled = False
        if self.schedule and self.schedule[0].games:
            self._set_focus(0, 0, TEAM_1, None)

    # ----- keystrokes -----

    def handle_score_change(
        self, round_idx: int, game_idx: int, team: str, value: str
    ) -> Optional[ScoreChangeResult]:
        """Apply a keystroke to one field and settle both fields of the game.

        Returns None for input longer than two characters or while the score
        sheet is locked; nothing is stored in that case.

        Raises:
            InvalidScoreKeyException: If the game or team does not exist
        """
        self._check_address(round_idx, game_idx, team)
        if len(value) > MAX_SCORE_DIGITS:
            return None
        if self.locked:
            logger.debug("Score sheet locked, ignoring input for %s", team)
            return None

        current_key = score_key(round_idx, game_idx, team)
        other_team = sibling_team(team)
        other_key = score_key(round_idx, game_idx, other_team)
        self.scores[current_key] = value

        if value == "" or not value.isdecimal() or not value.isascii():
            return self.result_for(round_idx, game_idx, False)

        number = int(value)
        wts = self.winning_score
        wts_str = str(wts)

        if len(value) == 1:
            if value == wts_str[0]:
                return self.result_for(round_idx, game_idx, False)
            if number <= wts - 2:
                self._auto_fill(other_key, wts_str)
                self._advance(round_idx, game_idx, team)
                return self.result_for(round_idx, game_idx, True)
            if number > wts:
                self._advance(round_idx, game_idx, team)
                return self.result_for(round_idx, game_idx, True)
            # One below the winning score: a second digit may follow
            return self.result_for(round_idx, game_idx, False)

        if number > wts + 2:
            self.scores[current_key] = value[0]
            return self.result_for(round_idx, game_idx, False)
        if number >= wts:
            self._advance(round_idx, game_idx, team)
            return self.result_for(round_idx, game_idx, True)
        if number <= wts - 2:
            self._auto_fill(other_key, wts_str)
            self._advance(round_idx, game_idx, team)
            return self.result_for(round_idx, game_idx, True)
        if self.scores.get(other_key):
            self._advance(round_idx, game_idx, team)
            return self.result_for(round_idx, game_idx, True)
        return self.result_for(round_idx, game_idx, False)

    def _auto_fill(self, other_key: str, wts_str: str) -> None:
        if not self.scores.get(other_key):
            self.scores[other_key] = wts_str
            logger.debug("Auto-filled %s with %s", other_key, wts_str)

    # ----- focus -----

    def next_empty_field(
        self, round_idx: int, game_idx: int, team: str
    ) -> Optional[FocusTarget]:
        """First empty field after the given one, or None if the sheet is full.

        The sibling field of the same game comes first. After that the search
        runs through the following games in round order and finally wraps
        around to the games before the current one.
        """
        other_team = sibling_team(team)
        if not self.get(round_idx, game_idx, other_team):
            return FocusTarget(
                score_key(round_idx, game_idx, other_team),
                round_idx,
                game_idx,
                other_team,
            )

        addresses = [
            (r, g)
            for r, round_data in enumerate(self.schedule)
            for g in range(len(round_data.games))
        ]
        start = addresses.index((round_idx, game_idx)) + 1
        for r, g in addresses[start:] + addresses[:start]:
            for candidate in (TEAM_1, TEAM_2):
                if not self.get(r, g, candidate):
                    return FocusTarget(
                        score_key(r, g, candidate),
                        r,
                        g,
                        candidate,
                        scroll_to_round=r if r != round_idx else None,
                    )
        return None

    def is_complete(self) -> bool:
        """True when every field of every game holds a value."""
        return all(
            self.scores.get(key)
            for r, round_data in enumerate(self.schedule)
            for g in range(len(round_data.games))
            for key in game_keys(r, g)
        )

    def _advance(self, round_idx: int, game_idx: int, team: str) -> None:
        target = self.next_empty_field(round_idx, game_idx, team)
        if target is not None:
            self.focus = target
            if self.on_focus:
                self.on_focus(target)
            return

        self.focus = None
        if self._complete_signalled:
            return
        self._complete_signalled = True
        logger.info("All scores entered")
        if self.on_complete:
            self.on_complete()

    def _set_focus(
        self, round_idx: int, game_idx: int, team: str, scroll: Optional[int]
    ) -> None:
        key = score_key(round_idx, game_idx, team)
        self.focus = FocusTarget(key, round_idx, game_idx, team, scroll)
        if self.on_focus:
            self.on_focus(self.focus)

    # ----- reporting -----

    def completed_games(self) -> List[CompletedGame]:
        """Games with both scores entered, in schedule order."""
        completed = []
        for r, round_data in enumerate(self.schedule):
            for g, game in enumerate(round_data.games):
                s1, s2 = self.get(r, g, TEAM_1), self.get(r, g, TEAM_2)
                if s1 and s2:
                    completed.append(CompletedGame(r + 1, g + 1, game, s1, s2))
        return completed

    def _check_address(self, round_idx: int, game_idx: int, team: str) -> None:
        if team not in (TEAM_1, TEAM_2):
            raise InvalidScoreKeyException(f"Unknown team '{team}'")
        if not 0 <= round_idx < len(self.schedule):
            raise InvalidScoreKeyException(f"No round {round_idx}")
        if not 0 <= game_idx < len(self.schedule[round_idx].games):
            raise InvalidScoreKeyException(f"No game {game_idx} in round {round_idx}")
