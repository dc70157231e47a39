from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from app.models.match import Match
    from app.models.roster_member import RosterMember


class Team(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    league_format: str = Field(default="USTA")  # "CUP" | "USTA" | "FLEX"
    rating_limit: Optional[float] = Field(default=None)  # Max combined NTRP per court (advisory)
    total_lines: int = Field(default=3)  # Courts played per match
    created_at: datetime = Field(default_factory=datetime.utcnow)

    # Relationships
    roster: List["RosterMember"] = Relationship(back_populates="team")
    matches: List["Match"] = Relationship(back_populates="team")
