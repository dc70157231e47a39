"""
Lineup Save Service - commits a lineup board and its scores for one match.

Steps (in order, one transaction):
1. Upsert one lineup per court that has at least one occupied seat
2. Delete all existing set scores for the match's lineups
3. Insert the recorded sets, keyed by the persisted lineup ids
4. Recompute the match aggregate and write it onto the match

Any failure rolls the whole save back and raises LineupSaveError naming the
failed step; nothing from a failed attempt is committed. Lineups are keyed
by (match, court) and scores are replaced wholesale, so retrying an
identical save never duplicates rows.
"""

import logging
import threading
from typing import Dict, List, Optional

from sqlmodel import Session

from app.models.set_score import SetScore
from app.services import lineup_repository
from app.services.availability_index import RosterAvailabilityIndex
from app.services.court_board import BoardState, rating_warnings
from app.services.match_result import MatchAggregate, aggregate_board, has_scored_court
from app.services.score_recorder import ScoreSheet, score_warnings

logger = logging.getLogger(__name__)

STEP_LOAD_MATCH = "load_match"
STEP_UPSERT_LINEUPS = "upsert_lineups"
STEP_DELETE_SCORES = "delete_scores"
STEP_INSERT_SCORES = "insert_scores"
STEP_UPDATE_MATCH = "update_match"


class LineupSaveError(Exception):
    """Save failed; the transaction was rolled back"""

    def __init__(self, message: str, failed_step: Optional[str] = None):
        super().__init__(message)
        self.failed_step = failed_step


class SaveInProgressError(LineupSaveError):
    """Another save for the same match has not finished yet"""
    pass


class SaveWarning:
    """Advisory note returned with a successful save"""

    def __init__(self, code: str, message: str):
        self.code = code
        self.message = message

    def to_dict(self):
        return {"code": self.code, "message": self.message}


class SaveResult:
    """Outcome of a committed save"""

    def __init__(self, match_id: int, state: BoardState, aggregate: MatchAggregate):
        self.match_id = match_id
        self.state = state
        self.aggregate = aggregate
        self.aggregate_written = False
        self.lineup_ids: Dict[int, int] = {}  # court_number -> lineup id
        self.scores_saved = 0
        self.warnings: List[SaveWarning] = []


# ============================================================================
# Re-entrancy guard
# ============================================================================

_in_flight_lock = threading.Lock()
_in_flight: set = set()


def _claim(match_id: int) -> None:
    with _in_flight_lock:
        if match_id in _in_flight:
            raise SaveInProgressError(f"A save for match {match_id} is already in progress")
        _in_flight.add(match_id)


def _release(match_id: int) -> None:
    with _in_flight_lock:
        _in_flight.discard(match_id)


def collect_warnings(
    state: BoardState,
    sheet: ScoreSheet,
    index: Optional[RosterAvailabilityIndex],
    rating_cap: Optional[float],
) -> List[SaveWarning]:
    warnings = []
    if index is not None:
        warnings.extend(SaveWarning("RATING_LIMIT", message) for message in rating_warnings(state, index, rating_cap))
    complete = [slot.court_number for slot in state.courts if slot.is_complete]
    warnings.extend(SaveWarning("SCORE", message) for message in score_warnings(sheet, complete))
    return warnings


# ============================================================================
# Save
# ============================================================================


def save_lineup(
    session: Session,
    match_id: int,
    state: BoardState,
    sheet: ScoreSheet,
    index: Optional[RosterAvailabilityIndex] = None,
) -> SaveResult:
    """
    Persist the board and score sheet for a match in a single transaction.

    Args:
        session: Database session (committed on success, rolled back on failure)
        match_id: Match being saved
        state: Board to persist
        sheet: Score sheet; only sets of occupied courts are stored
        index: Roster index, used for rating-limit warnings only

    Returns:
        SaveResult with lineup ids assigned to the board

    Raises:
        SaveInProgressError: another save for this match is running
        LineupSaveError: match missing or any step failed (nothing committed)
    """
    _claim(match_id)
    try:
        return _save(session, match_id, state, sheet, index)
    finally:
        _release(match_id)


def _save(
    session: Session,
    match_id: int,
    state: BoardState,
    sheet: ScoreSheet,
    index: Optional[RosterAvailabilityIndex],
) -> SaveResult:
    failed_step = STEP_LOAD_MATCH
    try:
        match = lineup_repository.get_match(session, match_id)
        if match is None:
            raise LineupSaveError(f"Match {match_id} not found", failed_step=failed_step)

        # Step 1: lineups. Empty courts are skipped unless a lineup row already exists.
        failed_step = STEP_UPSERT_LINEUPS
        existing = {lineup.court_number: lineup for lineup in lineup_repository.get_lineups(session, match_id)}
        lineup_ids: Dict[int, int] = {}
        for slot in state.courts:
            if slot.is_empty and slot.court_number not in existing:
                continue
            lineup = lineup_repository.upsert_lineup(
                session,
                match_id=match_id,
                court_number=slot.court_number,
                seat_a_id=slot.seat_a,
                seat_b_id=slot.seat_b,
                is_published=True,
            )
            lineup_ids[slot.court_number] = lineup.id

        # Step 2: every score belonging to this match goes, including courts no longer on the board
        failed_step = STEP_DELETE_SCORES
        all_lineup_ids = sorted(set(lineup_ids.values()) | {lineup.id for lineup in existing.values()})
        lineup_repository.delete_set_scores(session, all_lineup_ids)

        # Step 3: recorded sets of occupied courts
        failed_step = STEP_INSERT_SCORES
        rows = []
        for slot in state.courts:
            if slot.is_empty:
                continue
            for entry in sheet.recorded_sets(slot.court_number):
                rows.append(
                    SetScore(
                        lineup_id=lineup_ids[slot.court_number],
                        set_number=entry.set_number,
                        home_games=entry.home_games,
                        away_games=entry.away_games,
                        tiebreak=entry.tiebreak,
                    )
                )
        lineup_repository.insert_set_scores(session, rows)

        # Step 4: aggregate, only when at least one complete court has scores
        failed_step = STEP_UPDATE_MATCH
        saved_state = state.with_lineup_ids(lineup_ids)
        aggregate = aggregate_board(saved_state, sheet)
        aggregate_written = has_scored_court(saved_state, sheet)
        if aggregate_written:
            lineup_repository.update_match_aggregate(session, match, aggregate.result, aggregate.summary)

        session.commit()
    except LineupSaveError:
        session.rollback()
        raise
    except Exception as e:
        session.rollback()
        logger.exception("Lineup save for match %s failed at step %s, transaction rolled back", match_id, failed_step)
        raise LineupSaveError(
            f"Lineup save failed at step {failed_step}: {str(e)}", failed_step=failed_step
        ) from e

    result = SaveResult(match_id=match_id, state=saved_state, aggregate=aggregate)
    result.aggregate_written = aggregate_written
    result.lineup_ids = lineup_ids
    result.scores_saved = len(rows)
    result.warnings = collect_warnings(saved_state, sheet, index, match.rating_cap)

    logger.info(
        "Saved lineup for match %s: %d lineups, %d set scores, result=%s (%s)",
        match_id,
        len(lineup_ids),
        len(rows),
        aggregate.result,
        aggregate.summary,
    )
    return result
