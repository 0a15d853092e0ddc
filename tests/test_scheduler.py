"""
Unit tests for the earliest-wake cache.
"""

from scheduler import NO_PENDING, SchedulerState


class TestSchedulerState:

    def test_starts_with_nothing_pending(self):
        state = SchedulerState()
        assert state.earliest_wake == NO_PENDING
        assert not state.pending

    def test_from_store_empty(self, store):
        assert SchedulerState.from_store(store).earliest_wake == NO_PENDING

    def test_from_store_uses_minimum(self, store):
        store.insert(500, "a", "x")
        store.insert(300, "b", "y")
        assert SchedulerState.from_store(store).earliest_wake == 300

    def test_lower_is_non_increasing(self):
        state = SchedulerState()
        seen = []
        for due in (900, 700, 800, 100, 100):
            state.lower(due)
            seen.append(state.earliest_wake)
        assert seen == [900, 700, 700, 100, 100]

    def test_refresh_can_raise_to_ground_truth(self, store):
        state = SchedulerState(earliest_wake=10)
        store.insert(1_000, "a", "x")
        state.refresh(store)
        assert state.earliest_wake == 1_000

    def test_refresh_empty_store_resets_sentinel(self, store):
        state = SchedulerState(earliest_wake=10)
        state.refresh(store)
        assert state.earliest_wake == NO_PENDING

    def test_is_due_inclusive(self):
        state = SchedulerState(earliest_wake=100)
        assert not state.is_due(99)
        assert state.is_due(100)
        assert state.is_due(101)

    def test_sentinel_never_due(self):
        assert not SchedulerState().is_due(2**62)
