"""Court assignment board: seat partition, displacement, gestures, rating limit."""
import random
from collections import Counter
from types import SimpleNamespace

import pytest

from app.services.availability_index import RosterAvailabilityIndex, RosterEntry
from app.services.court_board import (
    BoardState,
    CourtAssignmentBoard,
    NoSeatSelectedError,
    Seat,
    UnknownCourtError,
    UnknownMemberError,
    assign,
    clear,
    unassign,
)


def _index(ratings=None):
    ratings = ratings or {1: 3.5, 2: 3.5, 3: 4.0, 4: 4.0, 5: 4.5, 6: 4.5}
    return RosterAvailabilityIndex(
        RosterEntry(member_id=m, full_name=f"Player {m}", rating=r, status="available") for m, r in ratings.items()
    )


def _assert_partition(state: BoardState, members):
    seated = state.seated_ids
    assert len(seated) == len(set(seated)), "member in two seats"
    assert len(state.pool) == len(set(state.pool)), "member twice in pool"
    assert not set(seated) & set(state.pool), "member both seated and pooled"
    assert Counter(seated) + Counter(state.pool) == Counter(members)


# ---------------------------------------------------------------------------
# assign / unassign
# ---------------------------------------------------------------------------


class TestAssign:
    def test_assign_from_pool(self):
        state = BoardState.empty([1, 2, 3], court_count=2)
        state = assign(state, 1, Seat.A, 2)
        assert state.court(1).seat_a == 2
        assert state.pool == (1, 3)

    def test_displaced_occupant_returns_to_pool(self):
        state = BoardState.empty([1, 2, 3], court_count=2)
        state = assign(state, 1, Seat.A, 1)
        state = assign(state, 1, Seat.A, 2)
        assert state.court(1).seat_a == 2
        assert state.pool == (3, 1)
        assert state.pool.count(1) == 1

    def test_move_between_seats_empties_old_seat(self):
        state = BoardState.empty([1, 2, 3], court_count=2)
        state = assign(state, 1, Seat.A, 1)
        state = assign(state, 2, Seat.B, 1)
        assert state.court(1).seat_a is None
        assert state.court(2).seat_b == 1
        assert state.pool == (2, 3)

    def test_move_into_occupied_seat_displaces(self):
        state = BoardState.empty([1, 2, 3], court_count=2)
        state = assign(state, 1, Seat.A, 1)
        state = assign(state, 2, Seat.A, 2)
        state = assign(state, 2, Seat.A, 1)
        assert state.court(1).seat_a is None
        assert state.court(2).seat_a == 1
        assert state.pool == (3, 2)

    def test_same_seat_is_noop(self):
        state = assign(BoardState.empty([1, 2], court_count=1), 1, Seat.A, 1)
        assert assign(state, 1, Seat.A, 1) is state

    def test_seat_accepts_string(self):
        state = assign(BoardState.empty([1, 2], court_count=1), 1, "b", 2)
        assert state.court(1).seat_b == 2

    def test_unknown_member_raises_and_leaves_state(self):
        state = BoardState.empty([1, 2], court_count=1)
        with pytest.raises(UnknownMemberError):
            assign(state, 1, Seat.A, 99)
        assert state.pool == (1, 2)
        assert state.court(1).is_empty

    def test_unknown_court_raises(self):
        state = BoardState.empty([1, 2], court_count=1)
        with pytest.raises(UnknownCourtError):
            assign(state, 4, Seat.A, 1)

    def test_input_state_is_not_mutated(self):
        before = BoardState.empty([1, 2], court_count=1)
        after = assign(before, 1, Seat.A, 1)
        assert before.pool == (1, 2)
        assert before.court(1).seat_a is None
        assert after is not before


class TestUnassign:
    def test_unassign_returns_occupant(self):
        state = assign(BoardState.empty([1, 2], court_count=1), 1, Seat.B, 1)
        state = unassign(state, 1, Seat.B)
        assert state.court(1).seat_b is None
        assert state.pool == (2, 1)

    def test_unassign_empty_seat_is_noop(self):
        state = BoardState.empty([1, 2], court_count=1)
        assert unassign(state, 1, Seat.A) is state

    def test_assign_unassign_round_trip_keeps_pool_multiset(self):
        state = BoardState.empty([1, 2, 3, 4], court_count=2)
        state = assign(state, 2, Seat.A, 4)
        before = Counter(state.pool)
        state = assign(state, 1, Seat.B, 2)
        state = unassign(state, 1, Seat.B)
        assert Counter(state.pool) == before

    def test_clear_returns_everyone(self):
        state = BoardState.empty([1, 2, 3, 4], court_count=2)
        state = assign(state, 1, Seat.A, 1)
        state = assign(state, 2, Seat.B, 3)
        state = clear(state)
        assert state.seated_ids == []
        assert sorted(state.pool) == [1, 2, 3, 4]


class TestPartitionInvariant:
    def test_random_assignment_sequences(self):
        members = list(range(1, 9))
        rng = random.Random(20261019)
        for _ in range(200):
            state = BoardState.empty(members, court_count=3)
            for _ in range(40):
                court = rng.randint(1, 3)
                seat = rng.choice([Seat.A, Seat.B])
                if rng.random() < 0.7:
                    member = rng.choice(members)
                    previous = state.court(court).occupant(seat)
                    state = assign(state, court, seat, member)
                    if previous is not None and previous != member:
                        assert state.pool.count(previous) == 1
                else:
                    state = unassign(state, court, seat)
                _assert_partition(state, members)


# ---------------------------------------------------------------------------
# Loading from persisted lineups
# ---------------------------------------------------------------------------


class TestFromLineups:
    def test_prefills_and_pools_the_rest(self):
        lineups = [SimpleNamespace(id=10, court_number=2, seat_a_id=3, seat_b_id=1)]
        state = BoardState.from_lineups([1, 2, 3, 4], 3, lineups)
        assert state.court(2).seat_a == 3
        assert state.court(2).seat_b == 1
        assert state.court(2).lineup_id == 10
        assert state.pool == (2, 4)

    def test_inactive_member_seat_left_empty(self):
        lineups = [SimpleNamespace(id=10, court_number=1, seat_a_id=7, seat_b_id=2)]
        state = BoardState.from_lineups([1, 2], 2, lineups)
        assert state.court(1).seat_a is None
        assert state.court(1).seat_b == 2
        assert state.pool == (1,)

    def test_extra_persisted_court_is_kept(self):
        lineups = [SimpleNamespace(id=11, court_number=4, seat_a_id=1, seat_b_id=None)]
        state = BoardState.from_lineups([1, 2], 3, lineups)
        assert [slot.court_number for slot in state.courts] == [1, 2, 3, 4]
        assert state.court(4).seat_a == 1


# ---------------------------------------------------------------------------
# Gestures
# ---------------------------------------------------------------------------


class TestGestures:
    def test_drag_and_select_pick_give_same_state(self):
        dragged = CourtAssignmentBoard(_index(), court_count=3)
        picked = CourtAssignmentBoard(_index(), court_count=3)

        moves = [(1, Seat.A, 5), (1, Seat.B, 6), (2, Seat.A, 5), (1, Seat.A, 3)]
        for court, seat, member in moves:
            dragged.drag(member, court, seat)
            picked.select_seat(court, seat)
            picked.pick(member)

        assert dragged.state == picked.state

    def test_cancel_selection_has_no_side_effects(self):
        board = CourtAssignmentBoard(_index(), court_count=3)
        before = board.state
        board.select_seat(2, Seat.B)
        board.cancel_selection()
        assert board.selection is None
        assert board.state is before
        with pytest.raises(NoSeatSelectedError):
            board.pick(1)

    def test_failed_pick_keeps_selection(self):
        board = CourtAssignmentBoard(_index(), court_count=3)
        board.select_seat(1, Seat.A)
        with pytest.raises(UnknownMemberError):
            board.pick(42)
        assert board.selection == (1, Seat.A)
        board.pick(1)
        assert board.state.court(1).seat_a == 1
        assert board.selection is None

    def test_select_unknown_court(self):
        board = CourtAssignmentBoard(_index(), court_count=3)
        with pytest.raises(UnknownCourtError):
            board.select_seat(9, Seat.A)


# ---------------------------------------------------------------------------
# Rating limit
# ---------------------------------------------------------------------------


class TestRatingLimit:
    def test_combined_rating(self):
        board = CourtAssignmentBoard(_index(), court_count=2, rating_cap=8.0)
        assert board.combined_rating(1) == 0
        board.drag(3, 1, Seat.A)
        assert board.combined_rating(1) == 4.0
        board.drag(5, 1, Seat.B)
        assert board.combined_rating(1) == 8.5

    def test_two_four_point_fives_exceed_eight(self):
        board = CourtAssignmentBoard(_index(), court_count=2, rating_cap=8.0)
        board.drag(5, 1, Seat.A)
        board.drag(6, 1, Seat.B)
        assert board.is_over_rating_limit(1) is True
        assert board.is_over_rating_limit(2) is False
        assert board.rating_warnings() == ["Court 1: combined rating 9.0 exceeds limit 8.0"]

    def test_at_limit_is_not_over(self):
        board = CourtAssignmentBoard(_index(), court_count=1, rating_cap=8.0)
        board.drag(3, 1, Seat.A)
        board.drag(4, 1, Seat.B)
        assert board.is_over_rating_limit(1) is False

    def test_no_cap_never_flags(self):
        board = CourtAssignmentBoard(_index(), court_count=1)
        board.drag(5, 1, Seat.A)
        board.drag(6, 1, Seat.B)
        assert board.is_over_rating_limit(1) is False
        assert board.rating_warnings() == []

    def test_grouped_pool(self):
        index = RosterAvailabilityIndex(
            [
                RosterEntry(1, "Ana", 3.5, "maybe"),
                RosterEntry(2, "Bea", 3.5, "available"),
                RosterEntry(3, "Cat", 4.0, "available"),
            ]
        )
        board = CourtAssignmentBoard(index, court_count=1)
        board.drag(2, 1, Seat.A)
        groups = board.grouped_pool()
        assert [e.member_id for e in groups["available"]] == [3]
        assert [e.member_id for e in groups["maybe"]] == [1]
