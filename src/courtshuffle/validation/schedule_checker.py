"""Schedule checker: validates generated or hand-edited schedules.

Hard rules must always hold, whatever path produced the round. The soft
rule (no repeated partners) may be broken by the generator's fallback and
by manual swaps, so it is reported as a quality warning.
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

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional

from courtshuffle.constants import PLAYERS_PER_GAME
from courtshuffle.models import PartnerHistory, Player, Round, Schedule
from courtshuffle.pairing import is_gender_illegal
from courtshuffle.utils import setup_logger

logger = setup_logger(__name__)


class CriterionStatus(Enum):
    """Status of a rule check."""

    COMPLIANT = "COMPLIANT"
    VIOLATION = "VIOLATION"
    NOT_APPLICABLE = "NOT_APPLICABLE"


class ViolationType(Enum):
    HARD = "HARD"  # H1-H4: must never happen
    SOFT = "SOFT"  # S1: allowed under fallback or manual swaps


@dataclass
class CriterionResult:
    """Result of checking one rule on one round."""

    criterion: str
    status: CriterionStatus
    round_index: int
    violation_type: Optional[ViolationType] = None
    description: str = ""
    details: Dict[str, object] = field(default_factory=dict)

    @property
    def criterion_id(self) -> str:
        return self.criterion.split(":")[0].strip()


@dataclass
class ValidationReport:
    """Complete validation report for a schedule."""

    total_criteria: int
    compliant_count: int
    violations: List[CriterionResult]
    overall_status: CriterionStatus
    summary: str
    quality_warnings: List[CriterionResult] = field(default_factory=list)
    criteria_results: List[CriterionResult] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return self.overall_status == CriterionStatus.COMPLIANT

    @property
    def compliance_percentage(self) -> float:
        if self.total_criteria == 0:
            return 100.0
        return (self.compliant_count / self.total_criteria) * 100.0


def _compliant(criterion: str, round_index: int, description: str) -> CriterionResult:
    return CriterionResult(
        criterion=criterion,
        status=CriterionStatus.COMPLIANT,
        round_index=round_index,
        description=description,
    )


class HardRuleChecker:
    """Rules every round must satisfy (H1-H4)."""

    def check_h1_game_size(
        self, round_data: Round, round_index: int
    ) -> CriterionResult:
        """H1: every game has four distinct players, two per team."""
        for game in round_data.games:
            ids = game.player_ids()
            if (
                len(game.team1) != 2
                or len(game.team2) != 2
                or len(set(ids)) != PLAYERS_PER_GAME
            ):
                return CriterionResult(
                    criterion="H1",
                    status=CriterionStatus.VIOLATION,
                    round_index=round_index,
                    violation_type=ViolationType.HARD,
                    description=f"Game {game.id} does not have four distinct players",
                    details={"game": game.id, "players": ids},
                )
        return _compliant("H1", round_index, "All games have four distinct players")

    def check_h2_once_per_round(
        self, round_data: Round, round_index: int
    ) -> CriterionResult:
        """H2: a player appears at most once in a round, games and byes together."""
        counts = Counter(round_data.player_ids())
        duplicates = sorted(pid for pid, n in counts.items() if n > 1)
        if duplicates:
            return CriterionResult(
                criterion="H2",
                status=CriterionStatus.VIOLATION,
                round_index=round_index,
                violation_type=ViolationType.HARD,
                description=f"Players listed more than once: {', '.join(duplicates)}",
                details={"players": duplicates},
            )
        return _compliant("H2", round_index, "Every player appears at most once")

    def check_h3_gender_rule(
        self, round_data: Round, round_index: int
    ) -> CriterionResult:
        """H3: an all-male team never faces an all-female team."""
        for game in round_data.games:
            if is_gender_illegal(game.team1, game.team2):
                return CriterionResult(
                    criterion="H3",
                    status=CriterionStatus.VIOLATION,
                    round_index=round_index,
                    violation_type=ViolationType.HARD,
                    description=f"Game {game.id} pits two men against two women",
                    details={"game": game.id},
                )
        return _compliant(
            "H3", round_index, "No all-male team faces an all-female team"
        )

    def check_h4_roster_coverage(
        self,
        round_data: Round,
        round_index: int,
        roster: Optional[Iterable[Player]],
    ) -> CriterionResult:
        """H4: the round holds exactly the roster, each player playing or on a bye."""
        if roster is None:
            return CriterionResult(
                criterion="H4",
                status=CriterionStatus.NOT_APPLICABLE,
                round_index=round_index,
                description="No roster given",
            )
        expected = {p.id for p in roster}
        present = set(round_data.player_ids())
        missing = sorted(expected - present)
        extra = sorted(present - expected)
        if missing or extra:
            return CriterionResult(
                criterion="H4",
                status=CriterionStatus.VIOLATION,
                round_index=round_index,
                violation_type=ViolationType.HARD,
                description="Round does not match the roster",
                details={"missing": missing, "extra": extra},
            )
        return _compliant("H4", round_index, "Round covers the roster")


class SoftRuleChecker:
    """Partner repetition (S1)."""

    def check_s1_no_repeat_partners(
        self, round_data: Round, round_index: int, history: PartnerHistory
    ) -> CriterionResult:
        """S1: no team pairs players who already partnered earlier."""
        repeats = []
        for game in round_data.games:
            for team in (game.team1, game.team2):
                if len(team) == 2 and history.team_count(team) >= 1:
                    repeats.append(f"{team[0].display_name} & {team[1].display_name}")
        if repeats:
            return CriterionResult(
                criterion="S1",
                status=CriterionStatus.VIOLATION,
                round_index=round_index,
                violation_type=ViolationType.SOFT,
                description=f"Repeated partners: {'; '.join(repeats)}",
                details={"pairs": repeats},
            )
        return _compliant("S1", round_index, "No repeated partners")


class ScheduleChecker:
    """Checks every round of a schedule against the hard and soft rules."""

    def __init__(self):
        self.hard_checker = HardRuleChecker()
        self.soft_checker = SoftRuleChecker()

    def check_round(
        self,
        round_data: Round,
        round_index: int,
        history: PartnerHistory,
        roster: Optional[List[Player]] = None,
    ) -> List[CriterionResult]:
        """Check one round against partner history accumulated before it."""
        return [
            self.hard_checker.check_h1_game_size(round_data, round_index),
            self.hard_checker.check_h2_once_per_round(round_data, round_index),
            self.hard_checker.check_h3_gender_rule(round_data, round_index),
            self.hard_checker.check_h4_roster_coverage(round_data, round_index, roster),
            self.soft_checker.check_s1_no_repeat_partners(
                round_data, round_index, history
            ),
        ]

    def validate_schedule(
        self,
        schedule: Schedule,
        roster: Optional[List[Player]] = None,
        history: Optional[PartnerHistory] = None,
    ) -> ValidationReport:
        """Validate a whole schedule in round order.

        Args:
            schedule: Rounds to check.
            roster: When given, each round must contain exactly these players.
            history: Partner history from before the first round. It is
                copied, never modified.
        """
        logger.info("Validating schedule of %s rounds", len(schedule))
        running = PartnerHistory(counts=dict(history.counts) if history else {})

        all_results: List[CriterionResult] = []
        for round_index, round_data in enumerate(schedule):
            all_results.extend(
                self.check_round(round_data, round_index, running, roster)
            )
            running.record_round(round_data)

        compliant_count = sum(
            1 for r in all_results if r.status == CriterionStatus.COMPLIANT
        )
        hard_violations = [
            r
            for r in all_results
            if r.status == CriterionStatus.VIOLATION
            and r.violation_type == ViolationType.HARD
        ]
        quality_warnings = [
            r
            for r in all_results
            if r.status == CriterionStatus.VIOLATION
            and r.violation_type == ViolationType.SOFT
        ]
        overall_status = (
            CriterionStatus.VIOLATION if hard_violations else CriterionStatus.COMPLIANT
        )

        if overall_status == CriterionStatus.COMPLIANT:
            summary = (
                f"Hard rules satisfied; {len(quality_warnings)} "
                "rounds with repeated partners"
            )
        else:
            summary = (
                f"Hard rule violations detected - {len(hard_violations)} "
                f"checks failed; {len(quality_warnings)} quality warnings"
            )
        logger.info("Schedule validation complete: %s", summary)

        return ValidationReport(
            total_criteria=len(all_results),
            compliant_count=compliant_count,
            violations=hard_violations,
            quality_warnings=quality_warnings,
            overall_status=overall_status,
            summary=summary,
            criteria_results=all_results,
        )


def validate_schedule(schedule: Schedule, **kwargs) -> ValidationReport:
    """Quick validation function for a schedule."""
    return ScheduleChecker().validate_schedule(schedule, **kwargs)
