"""
Lineup & Score API Routes
Load the court board for a match, preview a result, save lineup + scores,
and read the persisted match result.
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlmodel import Session

from app.database import get_session
from app.services.availability_index import RosterAvailabilityIndex
from app.services.court_board import BoardError, combined_rating, is_over_rating_limit
from app.services.lineup_loader import LoadedBoard, board_from_submission, load_board
from app.services.lineup_notifier import get_lineup_notifier, notify_lineup_published
from app.services.lineup_save import LineupSaveError, SaveInProgressError, collect_warnings, save_lineup
from app.services.match_result import MatchAggregate, aggregate_board
from app.services.score_recorder import ScoreInputError, court_outcome, format_score_display

router = APIRouter()

# Raw game count, passed through untouched; score_recorder.parse_games decides what counts as entered
GameCount = Any


# ============================================================================
# Request/Response Models
# ============================================================================


class SetInput(BaseModel):
    set_number: int
    home_games: GameCount = None
    away_games: GameCount = None
    tiebreak: bool = False


class CourtInput(BaseModel):
    court_number: int
    seat_a_id: Optional[int] = None
    seat_b_id: Optional[int] = None
    sets: List[SetInput] = Field(default_factory=list)


class LineupSaveRequest(BaseModel):
    courts: List[CourtInput] = Field(default_factory=list)
    notify: bool = True


class MemberSummary(BaseModel):
    id: int
    full_name: str
    rating: float
    availability: str


class SetSummary(BaseModel):
    set_number: int
    home_games: Optional[int] = None
    away_games: Optional[int] = None
    tiebreak: bool = False


class CourtView(BaseModel):
    court_number: int
    lineup_id: Optional[int] = None
    seat_a: Optional[MemberSummary] = None
    seat_b: Optional[MemberSummary] = None
    complete: bool
    combined_rating: float
    over_rating_limit: bool
    sets: List[SetSummary]
    score_display: str
    sets_won_home: int
    sets_won_away: int
    winner: Optional[str] = None


class AggregateView(BaseModel):
    courts_won: int
    courts_lost: int
    result: str
    summary: str


class WarningView(BaseModel):
    code: str
    message: str


class BoardResponse(BaseModel):
    match_id: int
    league_format: str
    rating_cap: Optional[float] = None
    courts: List[CourtView]
    pool: Dict[str, List[MemberSummary]]
    aggregate: AggregateView
    warnings: List[WarningView]


class LineupSaveResponse(BaseModel):
    match_id: int
    lineup_ids: Dict[int, int]
    scores_saved: int
    aggregate: AggregateView
    aggregate_written: bool
    warnings: List[WarningView]


class MatchResultResponse(BaseModel):
    match_id: int
    match_result: Optional[str] = None
    score_summary: Optional[str] = None
    computed: AggregateView


# ============================================================================
# Helpers
# ============================================================================


def _member(index: RosterAvailabilityIndex, member_id: Optional[int]) -> Optional[MemberSummary]:
    entry = index.get(member_id) if member_id is not None else None
    if entry is None:
        return None
    return MemberSummary(id=entry.member_id, full_name=entry.full_name, rating=entry.rating, availability=entry.status)


def _aggregate_view(aggregate: MatchAggregate) -> AggregateView:
    return AggregateView(
        courts_won=aggregate.courts_won,
        courts_lost=aggregate.courts_lost,
        result=aggregate.result,
        summary=aggregate.summary,
    )


def _board_response(loaded: LoadedBoard) -> BoardResponse:
    match, index, state, sheet = loaded.match, loaded.index, loaded.state, loaded.sheet
    courts = []
    for slot in state.courts:
        outcome = court_outcome(sheet, slot.court_number)
        entries = sheet.sets_for(slot.court_number)
        courts.append(
            CourtView(
                court_number=slot.court_number,
                lineup_id=slot.lineup_id,
                seat_a=_member(index, slot.seat_a),
                seat_b=_member(index, slot.seat_b),
                complete=slot.is_complete,
                combined_rating=combined_rating(state, slot.court_number, index),
                over_rating_limit=is_over_rating_limit(state, slot.court_number, index, match.rating_cap),
                sets=[
                    SetSummary(
                        set_number=e.set_number,
                        home_games=e.home_games,
                        away_games=e.away_games,
                        tiebreak=e.tiebreak,
                    )
                    for e in entries
                ],
                score_display=format_score_display(entries),
                sets_won_home=outcome.sets_won_home,
                sets_won_away=outcome.sets_won_away,
                winner=outcome.winner.value if outcome.winner else None,
            )
        )

    pool = {
        status: [_member(index, entry.member_id) for entry in entries]
        for status, entries in index.group_by_status(state.pool).items()
    }
    warnings = collect_warnings(state, sheet, index, match.rating_cap)

    return BoardResponse(
        match_id=match.id,
        league_format=sheet.league_format,
        rating_cap=match.rating_cap,
        courts=courts,
        pool=pool,
        aggregate=_aggregate_view(aggregate_board(state, sheet)),
        warnings=[WarningView(**w.to_dict()) for w in warnings],
    )


def _load_or_404(session: Session, match_id: int) -> LoadedBoard:
    try:
        loaded = load_board(session, match_id)
    except ScoreInputError as e:
        raise HTTPException(status_code=422, detail=str(e))
    if loaded is None:
        raise HTTPException(status_code=404, detail="Match not found")
    return loaded


def _apply_or_422(loaded: LoadedBoard, request: LineupSaveRequest) -> LoadedBoard:
    try:
        return board_from_submission(loaded, request.courts)
    except (BoardError, ScoreInputError) as e:
        raise HTTPException(status_code=422, detail=str(e))


# ============================================================================
# Endpoints
# ============================================================================


@router.get("/matches/{match_id}/lineup", response_model=BoardResponse)
def get_lineup_board(match_id: int, session: Session = Depends(get_session)):
    """
    Get the lineup board for a match.

    Courts come pre-filled from saved lineups; the pool holds every other
    active roster member, grouped by availability. Rating-limit flags and
    score warnings are advisory.
    """
    return _board_response(_load_or_404(session, match_id))


@router.post("/matches/{match_id}/lineup/preview", response_model=BoardResponse)
def preview_lineup(match_id: int, request: LineupSaveRequest, session: Session = Depends(get_session)):
    """Apply a submitted lineup in memory and return the resulting board. Nothing is written."""
    loaded = _load_or_404(session, match_id)
    return _board_response(_apply_or_422(loaded, request))


@router.put("/matches/{match_id}/lineup", response_model=LineupSaveResponse)
def put_lineup(
    match_id: int,
    request: LineupSaveRequest,
    background_tasks: BackgroundTasks,
    session: Session = Depends(get_session),
):
    """
    Save lineup and scores for a match.

    All four write steps commit together or not at all. Over-limit courts
    are reported as warnings and still saved. When ``notify`` is set, the
    lineup-published trigger runs after the response; its failure does not
    affect the save.
    """
    loaded = _load_or_404(session, match_id)
    submitted = _apply_or_422(loaded, request)
    team_id = loaded.match.team_id

    try:
        result = save_lineup(session, match_id, submitted.state, submitted.sheet, submitted.index)
    except SaveInProgressError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except LineupSaveError as e:
        raise HTTPException(status_code=500, detail=str(e))

    if request.notify:
        background_tasks.add_task(notify_lineup_published, get_lineup_notifier(), match_id, team_id)

    return LineupSaveResponse(
        match_id=match_id,
        lineup_ids=result.lineup_ids,
        scores_saved=result.scores_saved,
        aggregate=_aggregate_view(result.aggregate),
        aggregate_written=result.aggregate_written,
        warnings=[WarningView(**w.to_dict()) for w in result.warnings],
    )


@router.get("/matches/{match_id}/result", response_model=MatchResultResponse)
def get_match_result(match_id: int, session: Session = Depends(get_session)):
    """Stored result fields next to the aggregate recomputed from saved lineups and scores."""
    loaded = _load_or_404(session, match_id)
    computed = aggregate_board(loaded.state, loaded.sheet)
    return MatchResultResponse(
        match_id=match_id,
        match_result=loaded.match.match_result,
        score_summary=loaded.match.score_summary,
        computed=_aggregate_view(computed),
    )
