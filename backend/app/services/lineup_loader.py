"""
Lineup board loading.

Builds the in-memory board (roster index, BoardState, ScoreSheet) for a match
from persisted rows, and turns a submitted lineup into a new board through
the same assign/record_set transitions the UI uses.
"""
from dataclasses import dataclass
from typing import Iterable, Optional

from sqlmodel import Session

from app.models.match import Match
from app.services import lineup_repository
from app.services.availability_index import RosterAvailabilityIndex
from app.services.court_board import BoardError, BoardState, Seat, assign, clear
from app.services.score_recorder import ScoreSheet, normalize_league_format, record_set


class DuplicateSeatError(BoardError):
    """Submitted lineup puts the same member in more than one seat"""
    pass


@dataclass
class LoadedBoard:
    match: Match
    index: RosterAvailabilityIndex
    state: BoardState
    sheet: ScoreSheet


def load_board(session: Session, match_id: int) -> Optional[LoadedBoard]:
    """Open the board for a match, pre-filled from saved lineups and scores.

    Returns None if the match does not exist.
    """
    match = lineup_repository.get_match(session, match_id)
    if match is None:
        return None

    roster = lineup_repository.get_roster(session, match.team_id)
    availability = lineup_repository.get_availability(session, match_id)
    index = RosterAvailabilityIndex.build(roster, availability)

    lineups = lineup_repository.get_lineups(session, match_id)
    state = BoardState.from_lineups(index.member_ids, match.court_count, lineups)

    set_scores = lineup_repository.get_set_scores(session, [lineup.id for lineup in lineups])
    sheet = ScoreSheet.from_set_scores(match.league_format, lineups, set_scores)

    return LoadedBoard(match=match, index=index, state=state, sheet=sheet)


def board_from_submission(loaded: LoadedBoard, courts: Iterable) -> LoadedBoard:
    """Replay a submitted lineup onto a cleared copy of the loaded board.

    ``courts`` items need ``court_number``, ``seat_a_id``, ``seat_b_id`` and
    ``sets`` (items with ``set_number``, ``home_games``, ``away_games``,
    ``tiebreak``). Courts left out of the submission end up empty.

    Raises:
        UnknownCourtError, UnknownMemberError, DuplicateSeatError,
        InvalidSetNumberError
    """
    courts = list(courts)
    state = clear(loaded.state)
    sheet = ScoreSheet(league_format=normalize_league_format(loaded.match.league_format))

    seated = set()
    for court in courts:
        state.court(court.court_number)
        for seat, member_id in ((Seat.A, court.seat_a_id), (Seat.B, court.seat_b_id)):
            if member_id is None:
                continue
            if member_id in seated:
                raise DuplicateSeatError(f"Member {member_id} is assigned to more than one seat")
            seated.add(member_id)
            state = assign(state, court.court_number, seat, member_id)

        for entry in court.sets or []:
            sheet = record_set(
                sheet,
                court.court_number,
                entry.set_number,
                entry.home_games,
                entry.away_games,
                entry.tiebreak,
            )

    return LoadedBoard(match=loaded.match, index=loaded.index, state=state, sheet=sheet)
