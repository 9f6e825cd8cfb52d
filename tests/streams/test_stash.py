"""
Overflow Stash Tests

LIFO release order, goal gating and the insertion cadence.
"""

import pytest
from hypothesis import given, settings, strategies as st

from streamhub.contracts.base import DataAvailable
from streamhub.streams.stash import OverflowStash


class TestOrdering:

    def test_last_stacked_is_released_first(self):
        stash = OverflowStash(interval=1)
        stash.stack("a")
        stash.stack("b")
        stash.set_goal(2)

        assert stash.release() == "b"
        assert stash.release() == "a"
        assert stash.release() is None

    def test_released_entities_are_readable_output(self):
        stash = OverflowStash()
        signals = []
        stash.subscribe(signals.append)
        stash.stack("a")
        stash.set_goal(1)

        stash.release()

        assert signals == [DataAvailable(count=1)]
        assert stash.read() == "a"
        assert stash.read() is None


class TestGoal:

    def test_zero_goal_blocks_until_raised_again(self):
        stash = OverflowStash(interval=1)
        stash.stack("a")
        stash.stack("b")
        stash.set_goal(0)

        assert stash.release() is None
        assert stash.note_insertion() is None
        assert stash.stashed == 2

        stash.set_goal(1)

        assert stash.release() == "b"
        assert stash.release() is None
        assert stash.goal == 0

    def test_set_goal_zero_suppresses_pending_goal(self):
        stash = OverflowStash()
        stash.set_goal(5)
        stash.stack("a")
        stash.set_goal(0)

        assert stash.release() is None

    def test_empty_stash_does_not_consume_goal(self):
        stash = OverflowStash(interval=1)
        stash.set_goal(1)

        assert stash.note_insertion() is None
        assert stash.goal == 1

        stash.stack("a")
        assert stash.note_insertion() == "a"
        assert stash.goal == 0

    def test_negative_goal_rejected(self):
        with pytest.raises(ValueError):
            OverflowStash().set_goal(-1)

    def test_interval_must_be_positive(self):
        with pytest.raises(ValueError):
            OverflowStash(interval=0)


class TestCadence:

    def test_every_nth_insertion_releases_one(self):
        stash = OverflowStash(interval=3)
        for item in ("a", "b", "c"):
            stash.stack(item)
        stash.set_goal(10)

        released = [stash.note_insertion() for _ in range(9)]

        assert released == [None, None, "c", None, None, "b", None, None, "a"]

    def test_counter_resets_even_without_release(self):
        stash = OverflowStash(interval=2)
        stash.note_insertion()
        stash.note_insertion()
        stash.stack("a")
        stash.set_goal(1)

        assert stash.note_insertion() is None
        assert stash.note_insertion() == "a"


class TestAutoGoal:

    def test_interval_grants_one_release(self):
        stash = OverflowStash(interval=2, auto_goal=True)
        stash.stack("a")
        stash.stack("b")

        released = [stash.note_insertion() for _ in range(6)]

        assert released == [None, "b", None, "a", None, None]
        assert stash.goal == 0
        assert stash.goal_since_reset == 2

    def test_zero_goal_is_overridden_only_at_the_interval(self):
        stash = OverflowStash(interval=3, auto_goal=True)
        stash.stack("a")
        stash.set_goal(0)

        assert stash.release() is None
        assert stash.note_insertion() is None
        assert stash.note_insertion() is None
        assert stash.note_insertion() == "a"

    def test_no_grant_while_a_release_is_being_delivered(self):
        stash = OverflowStash(interval=1, auto_goal=True)
        nested = []

        def reenter(signal):
            # The owner re-inserts the released entity, advancing the cadence
            nested.append(stash.note_insertion())

        stash.stack("a")
        stash.stack("b")
        stash.subscribe(reenter)

        assert stash.note_insertion() == "b"
        assert nested == [None]
        assert stash.stashed == 1


operations = st.lists(
    st.one_of(
        st.just(("stack",)),
        st.just(("release",)),
        st.just(("insert",)),
        st.tuples(st.just("goal"), st.integers(min_value=0, max_value=4)),
    ),
    max_size=60,
)


@settings(max_examples=200, deadline=None)
@given(ops=operations, interval=st.integers(min_value=1, max_value=4))
def test_releases_never_exceed_goal_granted_since_reset(ops, interval):
    stash = OverflowStash(interval=interval)
    stacked = []
    released_since_reset = 0
    granted_since_reset = 0

    for i, op in enumerate(ops):
        if op[0] == "stack":
            stash.stack(i)
            stacked.append(i)
        elif op[0] == "goal":
            stash.set_goal(op[1])
            if op[1] == 0:
                released_since_reset = 0
                granted_since_reset = 0
            else:
                granted_since_reset += op[1]
        else:
            expected = stacked[-1] if stacked else None
            result = stash.release() if op[0] == "release" else stash.note_insertion()
            if result is not None:
                # Always the most recently stacked survivor
                assert result == expected
                stacked.pop()
                released_since_reset += 1

        assert released_since_reset <= granted_since_reset
        assert stash.released_since_reset == released_since_reset
