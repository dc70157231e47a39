"""
Court Assignment Board: partition of roster members between the unassigned
pool and court seats.

The board is an immutable BoardState plus pure transitions:

1. **assign**: put a member in a seat; a displaced occupant goes back to the pool
2. **unassign**: empty a seat; the occupant goes back to the pool
3. **clear**: return every seated member to the pool

Invariants held by every transition:
- A member occupies at most one seat across all courts
- The pool never contains a seated member, and never contains a member twice

CourtAssignmentBoard wraps a BoardState for the two UI gestures (drag a
member onto a seat, or select a seat then pick a member). Both end in the
same assign() call.

Rating limits are advisory: over-limit courts are flagged, never rejected.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple

from app.services.availability_index import RosterAvailabilityIndex, RosterEntry


class Seat(str, Enum):
    A = "a"
    B = "b"


class BoardError(Exception):
    """Base exception for lineup board errors"""
    pass


class UnknownMemberError(BoardError):
    """Member is neither in the pool nor seated on this board"""
    pass


class UnknownCourtError(BoardError):
    """Court number is not on this board"""
    pass


class NoSeatSelectedError(BoardError):
    """pick() called without a selected seat"""
    pass


@dataclass(frozen=True)
class CourtSlot:
    court_number: int
    seat_a: Optional[int] = None
    seat_b: Optional[int] = None
    lineup_id: Optional[int] = None  # Set once the court has been saved

    def occupant(self, seat: Seat) -> Optional[int]:
        return self.seat_a if Seat(seat) is Seat.A else self.seat_b

    def with_occupant(self, seat: Seat, member_id: Optional[int]) -> "CourtSlot":
        if Seat(seat) is Seat.A:
            return replace(self, seat_a=member_id)
        return replace(self, seat_b=member_id)

    @property
    def occupants(self) -> List[int]:
        return [m for m in (self.seat_a, self.seat_b) if m is not None]

    @property
    def is_complete(self) -> bool:
        return self.seat_a is not None and self.seat_b is not None

    @property
    def is_empty(self) -> bool:
        return self.seat_a is None and self.seat_b is None


@dataclass(frozen=True)
class BoardState:
    courts: Tuple[CourtSlot, ...]
    pool: Tuple[int, ...]

    @classmethod
    def empty(cls, member_ids: Iterable[int], court_count: int) -> "BoardState":
        return cls(
            courts=tuple(CourtSlot(court_number=n) for n in range(1, court_count + 1)),
            pool=tuple(member_ids),
        )

    @classmethod
    def from_lineups(cls, member_ids: Iterable[int], court_count: int, lineups) -> "BoardState":
        """Open the board pre-filled from persisted lineups.

        Seats pointing at members who are not in ``member_ids`` (inactive or
        removed from the roster) are left empty. Persisted courts numbered
        above ``court_count`` are kept so nothing saved disappears.
        """
        members = list(dict.fromkeys(member_ids))
        known = set(members)
        by_court = {lineup.court_number: lineup for lineup in lineups}
        numbers = sorted(set(range(1, court_count + 1)) | set(by_court))

        seated = set()
        courts = []
        for number in numbers:
            lineup = by_court.get(number)
            if lineup is None:
                courts.append(CourtSlot(court_number=number))
                continue
            seat_a = lineup.seat_a_id if lineup.seat_a_id in known and lineup.seat_a_id not in seated else None
            if seat_a is not None:
                seated.add(seat_a)
            seat_b = lineup.seat_b_id if lineup.seat_b_id in known and lineup.seat_b_id not in seated else None
            if seat_b is not None:
                seated.add(seat_b)
            courts.append(CourtSlot(court_number=number, seat_a=seat_a, seat_b=seat_b, lineup_id=lineup.id))

        return cls(courts=tuple(courts), pool=tuple(m for m in members if m not in seated))

    def court(self, court_number: int) -> CourtSlot:
        for slot in self.courts:
            if slot.court_number == court_number:
                return slot
        raise UnknownCourtError(f"Court {court_number} is not on this board")

    def seat_of(self, member_id: int) -> Optional[Tuple[int, Seat]]:
        for slot in self.courts:
            if slot.seat_a == member_id:
                return slot.court_number, Seat.A
            if slot.seat_b == member_id:
                return slot.court_number, Seat.B
        return None

    @property
    def seated_ids(self) -> List[int]:
        return [m for slot in self.courts for m in slot.occupants]

    def with_lineup_ids(self, lineup_ids: Dict[int, int]) -> "BoardState":
        """Attach persisted lineup ids, keyed by court number."""
        return replace(
            self,
            courts=tuple(
                replace(slot, lineup_id=lineup_ids.get(slot.court_number, slot.lineup_id)) for slot in self.courts
            ),
        )


# ============================================================================
# Transitions
# ============================================================================


def assign(state: BoardState, court_number: int, seat: Seat, member_id: int) -> BoardState:
    """Seat a member, displacing any current occupant back into the pool.

    The member is first taken from wherever it is (pool or another seat).

    Raises:
        UnknownCourtError: court_number is not on the board
        UnknownMemberError: member is neither pooled nor seated
    """
    seat = Seat(seat)
    target = state.court(court_number)
    if target.occupant(seat) == member_id:
        return state

    location = state.seat_of(member_id)
    if location is None and member_id not in state.pool:
        raise UnknownMemberError(f"Member {member_id} is not on this board")

    courts = {slot.court_number: slot for slot in state.courts}
    pool = list(state.pool)

    if location is None:
        pool.remove(member_id)
    else:
        from_court, from_seat = location
        courts[from_court] = courts[from_court].with_occupant(from_seat, None)

    displaced = courts[court_number].occupant(seat)
    if displaced is not None:
        pool.append(displaced)
    courts[court_number] = courts[court_number].with_occupant(seat, member_id)

    return BoardState(courts=tuple(courts[slot.court_number] for slot in state.courts), pool=tuple(pool))


def unassign(state: BoardState, court_number: int, seat: Seat) -> BoardState:
    """Empty a seat; its occupant (if any) rejoins the pool."""
    seat = Seat(seat)
    slot = state.court(court_number)
    occupant = slot.occupant(seat)
    if occupant is None:
        return state

    return BoardState(
        courts=tuple(
            s.with_occupant(seat, None) if s.court_number == court_number else s for s in state.courts
        ),
        pool=state.pool + (occupant,),
    )


def clear(state: BoardState) -> BoardState:
    """Return every seated member to the pool, court order first."""
    return BoardState(
        courts=tuple(replace(slot, seat_a=None, seat_b=None) for slot in state.courts),
        pool=state.pool + tuple(state.seated_ids),
    )


# ============================================================================
# Rating limit (advisory)
# ============================================================================


def combined_rating(state: BoardState, court_number: int, index: RosterAvailabilityIndex) -> float:
    slot = state.court(court_number)
    return sum(index.rating_for(m) for m in slot.occupants)


def is_over_rating_limit(
    state: BoardState,
    court_number: int,
    index: RosterAvailabilityIndex,
    rating_cap: Optional[float],
) -> bool:
    if rating_cap is None:
        return False
    return combined_rating(state, court_number, index) > rating_cap


def rating_warnings(
    state: BoardState,
    index: RosterAvailabilityIndex,
    rating_cap: Optional[float],
) -> List[str]:
    """Human-readable warning per over-limit court. Never blocks a save."""
    warnings = []
    for slot in state.courts:
        if is_over_rating_limit(state, slot.court_number, index, rating_cap):
            total = combined_rating(state, slot.court_number, index)
            warnings.append(f"Court {slot.court_number}: combined rating {total:.1f} exceeds limit {rating_cap:.1f}")
    return warnings


# ============================================================================
# Stateful wrapper for the two UI gestures
# ============================================================================


class CourtAssignmentBoard:
    """Holds the current BoardState and a pending seat selection.

    drag() and the select_seat()/pick() pair both go through assign(), so
    displacement behaves the same whichever gesture the captain uses.
    """

    def __init__(
        self,
        index: RosterAvailabilityIndex,
        court_count: int,
        rating_cap: Optional[float] = None,
        state: Optional[BoardState] = None,
    ):
        self.index = index
        self.rating_cap = rating_cap
        self._state = state if state is not None else BoardState.empty(index.member_ids, court_count)
        self._selection: Optional[Tuple[int, Seat]] = None

    @property
    def state(self) -> BoardState:
        return self._state

    @property
    def selection(self) -> Optional[Tuple[int, Seat]]:
        return self._selection

    @property
    def pool(self) -> Tuple[int, ...]:
        return self._state.pool

    def assign(self, court_number: int, seat: Seat, member_id: int) -> BoardState:
        self._state = assign(self._state, court_number, seat, member_id)
        return self._state

    def unassign(self, court_number: int, seat: Seat) -> BoardState:
        self._state = unassign(self._state, court_number, seat)
        return self._state

    def clear(self) -> BoardState:
        self._state = clear(self._state)
        self._selection = None
        return self._state

    def drag(self, member_id: int, court_number: int, seat: Seat) -> BoardState:
        return self.assign(court_number, seat, member_id)

    def select_seat(self, court_number: int, seat: Seat) -> None:
        self._state.court(court_number)
        self._selection = (court_number, Seat(seat))

    def pick(self, member_id: int) -> BoardState:
        """Fill the selected seat. The selection survives a failed pick."""
        if self._selection is None:
            raise NoSeatSelectedError("Select a seat before picking a member")
        court_number, seat = self._selection
        self.assign(court_number, seat, member_id)
        self._selection = None
        return self._state

    def cancel_selection(self) -> None:
        self._selection = None

    def combined_rating(self, court_number: int) -> float:
        return combined_rating(self._state, court_number, self.index)

    def is_over_rating_limit(self, court_number: int) -> bool:
        return is_over_rating_limit(self._state, court_number, self.index, self.rating_cap)

    def rating_warnings(self) -> List[str]:
        return rating_warnings(self._state, self.index, self.rating_cap)

    def grouped_pool(self) -> Dict[str, List[RosterEntry]]:
        return self.index.group_by_status(self._state.pool)
