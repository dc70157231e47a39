from datetime import datetime
from typing import Optional

from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Field, SQLModel


class Availability(SQLModel, table=True):
    """A roster member's response for one match."""

    __table_args__ = (
        SAUniqueConstraint("match_id", "roster_member_id", name="uq_availability_match_member"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    match_id: int = Field(foreign_key="match.id", index=True)
    roster_member_id: int = Field(foreign_key="roster_member.id")
    status: str  # available | maybe | late | unavailable
    updated_at: datetime = Field(default_factory=datetime.utcnow)
