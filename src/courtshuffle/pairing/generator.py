"""Doubles schedule generation.

This module turns a roster and an ordered list of round types into a
schedule of 2v2 games and byes. Every round is built by a
shuffle-and-validate loop driven by an injectable random source, so a
seeded ``random.Random`` reproduces the same schedule.

Two rules are checked for every group of four players:

- hard: a team of two men never faces a team of two women;
- soft: nobody is paired with a partner they already had this session.

When the retry budget runs out the soft rule is dropped, the hard rule never is.
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
from typing import Iterable, List, Optional, Sequence, Tuple

from courtshuffle.constants import (
    MAX_SHUFFLE_ATTEMPTS,
    PLAYERS_PER_GAME,
    ROUND_MIXED,
    ROUND_MIXER,
    ROUND_SAME_GENDER,
)
from courtshuffle.exceptions import InvalidRoundTypeException
from courtshuffle.models import (
    Game,
    PartnerHistory,
    Player,
    Round,
    Schedule,
    normalize_round_type,
)
from courtshuffle.utils import setup_logger

logger = setup_logger(__name__)

Team = Tuple[Player, Player]
PoolResult = Tuple[List[Tuple[Team, Team]], List[Player]]


def is_gender_illegal(team1: Sequence[Player], team2: Sequence[Player]) -> bool:
    """True when an all-male team faces an all-female team."""
    t1_all_male = all(p.is_male for p in team1)
    t1_all_female = all(p.is_female for p in team1)
    t2_all_male = all(p.is_male for p in team2)
    t2_all_female = all(p.is_female for p in team2)
    return (t1_all_male and t2_all_female) or (t1_all_female and t2_all_male)


class ScheduleGenerator:
    """Builds rounds of doubles games while tracking partner history.

    Args:
        rng: Random source used for every shuffle. Defaults to a fresh
            ``random.Random``.
        history: Partner history to extend. A new one is created if omitted.
        max_attempts: Shuffle retries per pool before the fallback kicks in.
    """

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        history: Optional[PartnerHistory] = None,
        max_attempts: int = MAX_SHUFFLE_ATTEMPTS,
    ):
        self.rng = rng if rng is not None else random.Random()
        self.history = history if history is not None else PartnerHistory()
        self.max_attempts = max_attempts
        # Indices of rounds where the partner rule had to be relaxed
        self.fallback_rounds: List[int] = []
        self._fallback_used = False

    def generate(
        self, players: Sequence[Player], round_types: Iterable[str]
    ) -> Schedule:
        """Generate one round per requested type, in order."""
        schedule: Schedule = []
        for round_type in round_types:
            schedule.append(self.generate_round(players, round_type, len(schedule)))
        logger.info(
            "Generated %s rounds for %s players (%s with repeated partners allowed)",
            len(schedule),
            len(players),
            len(self.fallback_rounds),
        )
        return schedule

    def generate_round(
        self, players: Sequence[Player], round_type: str, round_idx: int
    ) -> Round:
        """Generate a single round and record its teams in the partner history.

        Raises:
            InvalidRoundTypeException: If the round type is not recognised
        """
        round_type = normalize_round_type(round_type)
        self._fallback_used = False

        if round_type == ROUND_MIXED:
            matchups, byes = self._build_mixed(list(players))
        elif round_type == ROUND_SAME_GENDER:
            matchups, byes = self._build_same_gender(list(players))
        elif round_type == ROUND_MIXER:
            matchups, byes = self._process_pool(list(players))
        else:
            raise InvalidRoundTypeException(f"Unknown round type '{round_type}'")

        games = [
            Game(
                id=f"r{round_idx + 1}g{g_idx + 1}",
                team1=list(team1),
                team2=list(team2),
            )
            for g_idx, (team1, team2) in enumerate(matchups)
        ]
        round_data = Round(
            id=f"round-{round_idx}", type=round_type, games=games, byes=byes
        )
        self.history.record_round(round_data)

        if self._fallback_used:
            self.fallback_rounds.append(round_idx)
            logger.warning(
                "Round %s (%s): repeated partners allowed after %s attempts",
                round_idx + 1,
                round_type,
                self.max_attempts,
            )
        logger.debug(
            "Round %s (%s): %s games, %s byes",
            round_idx + 1,
            round_type,
            len(games),
            len(byes),
        )
        return round_data

    # ----- validation -----

    def _try_make_game(
        self, a: Player, b: Player, c: Player, d: Player
    ) -> Optional[Tuple[Team, Team]]:
        """Return ``((a, b), (c, d))`` if it passes both rules, else None."""
        if self.history.count(a.id, b.id) >= 1 or self.history.count(c.id, d.id) >= 1:
            return None
        if is_gender_illegal((a, b), (c, d)):
            return None
        return (a, b), (c, d)

    def _shuffled(self, pool: Sequence[Player]) -> List[Player]:
        shuffled = list(pool)
        self.rng.shuffle(shuffled)
        return shuffled

    # ----- builders -----

    def _process_pool(self, pool: List[Player]) -> PoolResult:
        """Generic shuffle-and-validate over a single pool."""
        usable = len(pool) - len(pool) % PLAYERS_PER_GAME
        shuffled: List[Player] = list(pool)

        for _ in range(self.max_attempts):
            shuffled = self._shuffled(pool)
            matchups = []
            for i in range(0, usable, PLAYERS_PER_GAME):
                game = self._try_make_game(*shuffled[i : i + PLAYERS_PER_GAME])
                if game is None:
                    break
                matchups.append(game)
            else:
                return matchups, shuffled[usable:]

        # Keep the last shuffle, fix only the gender rule
        self._fallback_used = True
        matchups = []
        for i in range(0, usable, PLAYERS_PER_GAME):
            a, b, c, d = shuffled[i : i + PLAYERS_PER_GAME]
            if is_gender_illegal((a, b), (c, d)):
                b, c = c, b
            matchups.append(((a, b), (c, d)))
        return matchups, shuffled[usable:]

    def _build_mixed(self, players: List[Player]) -> PoolResult:
        """One man and one woman per team wherever the roster allows it."""
        men = [p for p in players if p.is_male]
        women = [p for p in players if p.is_female]
        if min(len(men), len(women)) < 2:
            # Not a single mixed game is possible
            return self._process_pool(players)

        matchups: List[Tuple[Team, Team]] = []
        men_left: List[Player] = men
        women_left: List[Player] = women
        for _ in range(self.max_attempts):
            men_left = self._shuffled(men)
            women_left = self._shuffled(women)
            matchups = []
            valid = True
            while len(men_left) >= 2 and len(women_left) >= 2:
                m1, f1 = men_left.pop(), women_left.pop()
                m2, f2 = men_left.pop(), women_left.pop()
                game = self._try_make_game(m1, f1, m2, f2)
                if game is None:
                    valid = False
                    break
                matchups.append(game)
            if valid:
                return matchups, men_left + women_left

        # Keep the mixed structure, accept repeated partners
        self._fallback_used = True
        men_left = self._shuffled(men)
        women_left = self._shuffled(women)
        matchups = []
        while len(men_left) >= 2 and len(women_left) >= 2:
            m1, f1 = men_left.pop(), women_left.pop()
            m2, f2 = men_left.pop(), women_left.pop()
            matchups.append(((m1, f1), (m2, f2)))
        return matchups, men_left + women_left

    def _build_same_gender(self, players: List[Player]) -> PoolResult:
        """Men with men and women with women, leftovers mixed together."""
        men = [p for p in players if p.is_male]
        women = [p for p in players if p.is_female]
        men_games, men_left = self._process_pool(men)
        women_games, women_left = self._process_pool(women)
        rest_games, byes = self._process_pool(men_left + women_left)
        return men_games + women_games + rest_games, byes


def generate_schedule(
    players: Sequence[Player],
    round_types: Iterable[str],
    rng: Optional[random.Random] = None,
    history: Optional[PartnerHistory] = None,
    max_attempts: int = MAX_SHUFFLE_ATTEMPTS,
) -> Schedule:
    """Generate a full schedule. See :class:`ScheduleGenerator`."""
    generator = ScheduleGenerator(rng=rng, history=history, max_attempts=max_attempts)
    return generator.generate(players, round_types)
