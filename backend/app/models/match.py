from datetime import date, datetime
from typing import TYPE_CHECKING, List, Optional

from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from app.models.lineup import Lineup
    from app.models.team import Team

DEFAULT_COURT_COUNT = 3


class Match(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    team_id: int = Field(foreign_key="team.id", index=True)
    opponent_name: str
    match_date: date
    is_home: bool = Field(default=True)

    # Copied from the team by lineup_repository.create_match; the board reads these
    league_format: str = Field(default="USTA")  # "CUP" | "USTA" | "FLEX"
    rating_cap: Optional[float] = Field(default=None)
    court_count: int = Field(default=DEFAULT_COURT_COUNT)

    # Aggregate written by the save protocol only
    match_result: Optional[str] = Field(default=None)  # win | loss | tie | pending
    score_summary: Optional[str] = Field(default=None)  # "2-1"

    created_at: datetime = Field(default_factory=datetime.utcnow)

    # Relationships
    team: "Team" = Relationship(back_populates="matches")
    lineups: List["Lineup"] = Relationship(back_populates="match")
