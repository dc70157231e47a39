"""
Match result aggregation: court outcomes → match result.

Pure and stateless; the same board and score sheet always give the same
aggregate, so it can be recomputed from memory or from persisted rows.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List

from app.services.court_board import BoardState
from app.services.score_recorder import CourtOutcome, ScoreSheet, Side, court_outcome

RESULT_WIN = "win"
RESULT_LOSS = "loss"
RESULT_TIE = "tie"
RESULT_PENDING = "pending"


@dataclass(frozen=True)
class CourtResult:
    court_number: int
    is_complete: bool  # Both seats filled
    outcome: CourtOutcome

    @property
    def contributes(self) -> bool:
        return self.is_complete and self.outcome.recorded_sets > 0 and self.outcome.is_decided


@dataclass(frozen=True)
class MatchAggregate:
    courts_won: int
    courts_lost: int
    result: str
    summary: str


def result_from_counts(courts_won: int, courts_lost: int) -> str:
    if courts_won > courts_lost:
        return RESULT_WIN
    if courts_won < courts_lost:
        return RESULT_LOSS
    return RESULT_TIE


def compute_match_aggregate(courts: Iterable[CourtResult]) -> MatchAggregate:
    """Reduce court results to a match aggregate.

    Only complete courts with at least one recorded set and a decided
    outcome count. If any complete court is not counted yet, the result is
    pending; the summary still reports what has been decided.
    """
    courts = list(courts)
    complete = [c for c in courts if c.is_complete]
    contributing = [c for c in complete if c.contributes]

    courts_won = sum(1 for c in contributing if c.outcome.winner is Side.HOME)
    courts_lost = sum(1 for c in contributing if c.outcome.winner is Side.AWAY)

    if not complete or len(contributing) < len(complete):
        result = RESULT_PENDING
    else:
        result = result_from_counts(courts_won, courts_lost)

    return MatchAggregate(
        courts_won=courts_won,
        courts_lost=courts_lost,
        result=result,
        summary=f"{courts_won}-{courts_lost}",
    )


def court_results(state: BoardState, sheet: ScoreSheet) -> List[CourtResult]:
    return [
        CourtResult(
            court_number=slot.court_number,
            is_complete=slot.is_complete,
            outcome=court_outcome(sheet, slot.court_number),
        )
        for slot in state.courts
    ]


def aggregate_board(state: BoardState, sheet: ScoreSheet) -> MatchAggregate:
    return compute_match_aggregate(court_results(state, sheet))


def has_scored_court(state: BoardState, sheet: ScoreSheet) -> bool:
    """True when at least one complete court has a recorded set."""
    return any(slot.is_complete and sheet.has_recorded_set(slot.court_number) for slot in state.courts)
