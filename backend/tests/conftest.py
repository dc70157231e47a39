from datetime import date

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from app.database import get_session
from app.main import app

TEST_DATABASE_URL = "sqlite:///:memory:"

# ============================================================================
# Test Database Setup with StaticPool
# ============================================================================
# 1. sqlite:///:memory: with StaticPool so ALL sessions share the same DB
# 2. check_same_thread=False required for TestClient/threaded access
# 3. All models imported before create_all() (see session_fixture)
# 4. App dependency overridden to use test_engine (see client_fixture)
# 5. Tables created per test and dropped afterwards
test_engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


def override_get_session():
    """Override session to use test engine"""
    with Session(test_engine) as session:
        yield session


@pytest.fixture(name="session", scope="function")
def session_fixture():
    """Provide a test database session on fresh tables"""
    from app.models.availability import Availability  # noqa: F401
    from app.models.lineup import Lineup  # noqa: F401
    from app.models.match import Match  # noqa: F401
    from app.models.roster_member import RosterMember  # noqa: F401
    from app.models.set_score import SetScore  # noqa: F401
    from app.models.team import Team  # noqa: F401

    SQLModel.metadata.create_all(test_engine)

    with Session(test_engine) as session:
        yield session

    SQLModel.metadata.drop_all(test_engine)


@pytest.fixture(name="client")
def client_fixture(session: Session):
    """Provide a test client with overridden database session

    Override MUST be set BEFORE TestClient() and stay in place for the
    entire duration so the app never uses its own engine.
    """
    app.dependency_overrides[get_session] = override_get_session

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def make_match(session: Session):
    """Factory: team + active roster + match (+ optional availability).

    Returns a dict with match_id, team_id and member ids keyed by name.
    """
    from app.models.availability import Availability
    from app.models.roster_member import RosterMember
    from app.models.team import Team
    from app.services import lineup_repository

    def _make(
        players=(("Ana", 3.5), ("Bea", 3.5), ("Cat", 4.0), ("Dee", 4.0), ("Eve", 4.5), ("Fay", 4.5)),
        league_format="USTA",
        rating_cap=None,
        court_count=3,
        availability=None,
    ):
        team = Team(name="Net Results", league_format=league_format, rating_limit=rating_cap, total_lines=court_count)
        session.add(team)
        session.commit()
        session.refresh(team)

        members = {}
        for name, rating in players:
            member = RosterMember(team_id=team.id, full_name=name, ntrp_rating=rating)
            session.add(member)
            session.commit()
            session.refresh(member)
            members[name] = member.id

        match = lineup_repository.create_match(session, team.id, "Baseline Club", date(2026, 11, 7))
        session.commit()
        session.refresh(match)

        for name, status in (availability or {}).items():
            session.add(Availability(match_id=match.id, roster_member_id=members[name], status=status))
        session.commit()

        return {"match_id": match.id, "team_id": team.id, "members": members}

    return _make
