"""Tests for the index-stable task registry."""

import pytest

from countdown.clock import MAX_MS, MIN_MS
from countdown.errors import CountdownError, ValidationError
from countdown.registry import REMOVED, Active, Removed, TaskRegistry


def noop(count):
    pass


class TestAdd:
    def test_indices_are_sequential(self):
        registry = TaskRegistry()

        assert registry.add(1000, noop) == 0
        assert registry.add(2000, noop) == 1
        assert len(registry) == 2

    def test_non_callable_is_rejected(self):
        registry = TaskRegistry()
        registry.add(1000, noop)

        with pytest.raises(ValidationError):
            registry.add(2000, "not a function")  # type: ignore[arg-type]

        assert len(registry) == 1

    def test_validation_error_is_type_error(self):
        registry = TaskRegistry()
        with pytest.raises(TypeError):
            registry.add(1000, None)  # type: ignore[arg-type]
        with pytest.raises(CountdownError):
            registry.add(1000, 42)  # type: ignore[arg-type]

    def test_insertion_order_is_iteration_order(self):
        registry = TaskRegistry()
        for target in (3000, 1000, 2000):
            registry.add(target, noop)

        assert [task.target_time for task in registry] == [3000, 1000, 2000]
        assert [task.index for task in registry] == [0, 1, 2]

    @pytest.mark.parametrize("target", [MAX_MS + 1, MIN_MS - 1, 10**18])
    def test_out_of_range_target_is_rejected(self, target):
        registry = TaskRegistry()

        with pytest.raises(ValidationError):
            registry.add(target, noop)

        assert len(registry) == 0

    def test_range_bounds_are_accepted(self):
        registry = TaskRegistry()
        assert registry.add(MIN_MS, noop) == 0
        assert registry.add(MAX_MS, noop) == 1


class TestRemove:
    def test_keeps_slot_and_target(self):
        registry = TaskRegistry()
        registry.add(1000, noop)
        index = registry.add(2000, noop)

        registry.remove(index)

        task = registry.get(index)
        assert len(registry) == 2
        assert task.target_time == 2000
        assert isinstance(task.slot, Removed)
        assert task.slot is REMOVED
        assert not task.is_active
        assert registry.active_count == 1

    def test_removed_slot_is_not_reused(self):
        registry = TaskRegistry()
        first = registry.add(1000, noop)
        registry.remove(first)

        assert registry.add(2000, noop) == 1

    def test_unknown_index(self):
        registry = TaskRegistry()
        with pytest.raises(IndexError):
            registry.remove(0)


class TestShift:
    def test_replaces_target_and_callback(self):
        registry = TaskRegistry()
        index = registry.add(1000, noop)

        def other(count):
            pass

        registry.shift(index, 5000, other)

        task = registry.get(index)
        assert task.target_time == 5000
        assert task.slot == Active(other)

    def test_reactivates_removed_slot(self):
        registry = TaskRegistry()
        index = registry.add(1000, noop)
        registry.remove(index)

        registry.shift(index, 3000, noop)

        assert registry.get(index).is_active
        assert registry.active_count == 1

    def test_non_callable_leaves_slot_untouched(self):
        registry = TaskRegistry()
        index = registry.add(1000, noop)

        with pytest.raises(ValidationError):
            registry.shift(index, 9000, object())  # type: ignore[arg-type]

        task = registry.get(index)
        assert task.target_time == 1000
        assert task.slot == Active(noop)

    def test_negative_index_is_rejected(self):
        registry = TaskRegistry()
        registry.add(1000, noop)
        with pytest.raises(IndexError):
            registry.shift(-1, 1000, noop)

    def test_out_of_range_target_leaves_slot_untouched(self):
        registry = TaskRegistry()
        index = registry.add(1000, noop)

        with pytest.raises(ValidationError):
            registry.shift(index, MAX_MS + 1, noop)

        assert registry.get(index).target_time == 1000
