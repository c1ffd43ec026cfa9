"""Tests for the reactive state primitives."""

import pytest

from pocketplan.reactive import Computed, Signal


class TestSignal:
    """Tests for mutable signals."""

    def test_set_notifies_listeners(self):
        signal = Signal(1)
        seen = []
        signal.subscribe(lambda: seen.append(signal()))

        signal.set(2)

        assert seen == [2]

    def test_equal_value_does_not_notify(self):
        signal = Signal([1, 2])
        seen = []
        signal.subscribe(lambda: seen.append(True))

        signal.set([1, 2])

        assert seen == []

    def test_unsubscribe(self):
        """Test that the returned function removes the listener."""
        signal = Signal(0)
        seen = []
        unsubscribe = signal.subscribe(lambda: seen.append(True))

        unsubscribe()
        signal.set(5)

        assert seen == []

    def test_update_applies_function(self):
        signal = Signal(10)
        signal.update(lambda v: v + 5)
        assert signal() == 15

    def test_readonly_has_no_set(self):
        signal = Signal("a")
        view = signal.readonly()
        assert view() == "a"
        assert not hasattr(view, "set")


class TestComputed:
    """Tests for derived values."""

    def test_requires_an_input(self):
        with pytest.raises(ValueError):
            Computed(lambda: 1)

    def test_recomputes_only_after_change(self):
        """Test that reads between changes reuse the cached value."""
        source = Signal(2)
        runs = []

        def square():
            runs.append(True)
            return source() ** 2

        squared = Computed(square, source)

        assert squared() == 4
        assert squared() == 4
        assert len(runs) == 1

        source.set(3)

        assert squared() == 9
        assert len(runs) == 2

    def test_reader_sees_value_after_set_returns(self):
        """Test that a derived value is never older than the last mutation."""
        items = Signal([1, 2, 3])
        total = Computed(lambda: sum(items()), items)
        assert total() == 6

        items.set([1, 2, 3, 4])

        assert total() == 10

    def test_chained_computed_propagates(self):
        base = Signal(1)
        doubled = Computed(lambda: base() * 2, base)
        plus_one = Computed(lambda: doubled() + 1, doubled)
        notified = []
        plus_one.subscribe(lambda: notified.append(True))

        base.set(5)

        assert notified == [True]
        assert plus_one() == 11

    def test_multiple_inputs(self):
        a = Signal(1)
        b = Signal(10)
        total = Computed(lambda: a() + b(), a, b)

        b.set(20)

        assert total() == 21
