from app.models.availability import Availability
from app.models.lineup import Lineup
from app.models.match import Match
from app.models.roster_member import RosterMember
from app.models.set_score import SetScore
from app.models.team import Team

__all__ = [
    "Team",
    "RosterMember",
    "Availability",
    "Match",
    "Lineup",
    "SetScore",
]
