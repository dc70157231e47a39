"""
Roster availability index: read-only join of roster members to their
availability response for a single match.

Used by the lineup board to group the unassigned pool for display and to
look up ratings. Never mutates anything.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

NO_RESPONSE = "no_response"

# Pool display order: most useful players first
STATUS_ORDER = ("available", "late", "maybe", "unavailable", NO_RESPONSE)


@dataclass(frozen=True)
class RosterEntry:
    member_id: int
    full_name: str
    rating: float
    status: str


class RosterAvailabilityIndex:
    """Lookup of roster entries by member id, in roster order."""

    def __init__(self, entries: Iterable[RosterEntry]):
        self._entries: Dict[int, RosterEntry] = {}
        for entry in entries:
            self._entries[entry.member_id] = entry

    @classmethod
    def build(cls, members, availability) -> "RosterAvailabilityIndex":
        """Join RosterMember rows with Availability rows for one match.

        Members without an availability row report ``no_response``; statuses
        outside the known set are kept as reported.
        """
        status_by_member = {a.roster_member_id: a.status for a in availability}
        return cls(
            RosterEntry(
                member_id=m.id,
                full_name=m.full_name,
                rating=m.ntrp_rating or 0.0,
                status=status_by_member.get(m.id, NO_RESPONSE),
            )
            for m in members
        )

    def __contains__(self, member_id: int) -> bool:
        return member_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def member_ids(self) -> List[int]:
        return list(self._entries)

    def get(self, member_id: int) -> Optional[RosterEntry]:
        return self._entries.get(member_id)

    def status_for(self, member_id: int) -> str:
        entry = self._entries.get(member_id)
        return entry.status if entry else NO_RESPONSE

    def rating_for(self, member_id: Optional[int]) -> float:
        if member_id is None:
            return 0.0
        entry = self._entries.get(member_id)
        return entry.rating if entry else 0.0

    def group_by_status(self, member_ids: Iterable[int]) -> Dict[str, List[RosterEntry]]:
        """Group the given members by availability, keeping input order inside each group.

        Every status in STATUS_ORDER is present as a key (possibly empty);
        unrecognised statuses follow in first-seen order.
        """
        groups: Dict[str, List[RosterEntry]] = {status: [] for status in STATUS_ORDER}
        for member_id in member_ids:
            entry = self._entries.get(member_id)
            if entry is None:
                continue
            groups.setdefault(entry.status, []).append(entry)
        return groups
