from typing import TYPE_CHECKING, Optional

from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from app.models.lineup import Lineup


class SetScore(SQLModel, table=True):
    """Games won per side in one set. CUP lineups carry a single set of total games."""

    __tablename__ = "set_score"
    __table_args__ = (SAUniqueConstraint("lineup_id", "set_number", name="uq_set_score_lineup_set"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    lineup_id: int = Field(foreign_key="lineup.id", index=True)
    set_number: int
    home_games: int
    away_games: int
    tiebreak: bool = Field(default=False)

    lineup: "Lineup" = Relationship(back_populates="set_scores")
