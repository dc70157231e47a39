from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from app.models.match import Match
    from app.models.set_score import SetScore


class Lineup(SQLModel, table=True):
    __table_args__ = (SAUniqueConstraint("match_id", "court_number", name="uq_lineup_match_court"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    match_id: int = Field(foreign_key="match.id", index=True)
    court_number: int  # 1..K
    seat_a_id: Optional[int] = Field(default=None, foreign_key="roster_member.id")
    seat_b_id: Optional[int] = Field(default=None, foreign_key="roster_member.id")
    is_published: bool = Field(default=False)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    # Relationships
    match: "Match" = Relationship(back_populates="lineups")
    set_scores: List["SetScore"] = Relationship(back_populates="lineup")
