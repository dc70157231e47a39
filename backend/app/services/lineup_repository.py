"""
Persistence boundary for the lineup pipeline.

Read and write primitives over a SQLModel Session. Writes only add/flush;
committing is the caller's job so a whole save runs in one transaction.
"""
from datetime import date, datetime
from typing import Iterable, List, Optional, Sequence

from sqlmodel import Session, select

from app.models.availability import Availability
from app.models.lineup import Lineup
from app.models.match import Match
from app.models.roster_member import RosterMember
from app.models.set_score import SetScore
from app.models.team import Team


# ============================================================================
# Reads
# ============================================================================


def get_match(session: Session, match_id: int) -> Optional[Match]:
    return session.get(Match, match_id)


def get_team(session: Session, team_id: int) -> Optional[Team]:
    return session.get(Team, team_id)


def get_roster(session: Session, team_id: int) -> List[RosterMember]:
    """Active roster members for a team, ordered by name then id."""
    return list(
        session.exec(
            select(RosterMember)
            .where(RosterMember.team_id == team_id, RosterMember.is_active == True)  # noqa: E712
            .order_by(RosterMember.full_name, RosterMember.id)
        ).all()
    )


def get_availability(session: Session, match_id: int) -> List[Availability]:
    return list(session.exec(select(Availability).where(Availability.match_id == match_id)).all())


def get_lineups(session: Session, match_id: int) -> List[Lineup]:
    return list(
        session.exec(select(Lineup).where(Lineup.match_id == match_id).order_by(Lineup.court_number)).all()
    )


def get_set_scores(session: Session, lineup_ids: Sequence[int]) -> List[SetScore]:
    if not lineup_ids:
        return []
    return list(
        session.exec(
            select(SetScore)
            .where(SetScore.lineup_id.in_(list(lineup_ids)))
            .order_by(SetScore.lineup_id, SetScore.set_number)
        ).all()
    )


# ============================================================================
# Writes (no commit)
# ============================================================================


def create_match(
    session: Session,
    team_id: int,
    opponent_name: str,
    match_date: date,
    is_home: bool = True,
) -> Match:
    """Add a match carrying the team's league format, rating limit and court count.

    Raises:
        ValueError: team does not exist
    """
    team = get_team(session, team_id)
    if team is None:
        raise ValueError(f"Team {team_id} not found")

    match = Match(
        team_id=team.id,
        opponent_name=opponent_name,
        match_date=match_date,
        is_home=is_home,
        league_format=team.league_format,
        rating_cap=team.rating_limit,
        court_count=team.total_lines,
    )
    session.add(match)
    session.flush()
    return match


def upsert_lineup(
    session: Session,
    match_id: int,
    court_number: int,
    seat_a_id: Optional[int],
    seat_b_id: Optional[int],
    is_published: bool = True,
) -> Lineup:
    """Insert or update the lineup for (match, court). Returns it with an id assigned."""
    lineup = session.exec(
        select(Lineup).where(Lineup.match_id == match_id, Lineup.court_number == court_number)
    ).first()
    if lineup is None:
        lineup = Lineup(match_id=match_id, court_number=court_number)

    lineup.seat_a_id = seat_a_id
    lineup.seat_b_id = seat_b_id
    lineup.is_published = is_published
    lineup.updated_at = datetime.utcnow()
    session.add(lineup)
    session.flush()
    return lineup


def delete_set_scores(session: Session, lineup_ids: Sequence[int]) -> None:
    if not lineup_ids:
        return
    for score in get_set_scores(session, lineup_ids):
        session.delete(score)
    session.flush()


def insert_set_scores(session: Session, scores: Iterable[SetScore]) -> None:
    for score in scores:
        session.add(score)
    session.flush()


def update_match_aggregate(session: Session, match: Match, result: str, summary: str) -> Match:
    match.match_result = result
    match.score_summary = summary
    session.add(match)
    session.flush()
    return match
