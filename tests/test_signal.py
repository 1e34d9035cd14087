"""Tests for Signal."""

import pytest

from finegrain import NoRuntimeError, Signal, create_effect, create_root, create_signal


class TestSignal:
    def test_get_set(self):
        def setup(dispose):
            s = create_signal(42)
            assert s.get() == 42
            s.set(100)
            assert s.get() == 100

        create_root(setup)

    def test_peek_needs_no_runtime(self):
        s = Signal(5)
        assert s.peek() == 5
        s.set(6)  # no observers, no runtime required
        assert s.peek() == 6

    def test_get_without_runtime_fails(self):
        s = create_signal(1)
        with pytest.raises(NoRuntimeError):
            s.get()

    def test_dedup(self):
        """Setting an equal value does not re-run observers."""
        log = []

        def setup(dispose):
            s = create_signal(42)
            create_effect(lambda: log.append(s.get()))
            return s

        s = create_root(setup)
        assert log == [42]
        s.set(42)
        assert log == [42]

    def test_notifies_observers(self):
        log = []

        def setup(dispose):
            s = create_signal("hello")
            create_effect(lambda: log.append(s.get()))
            return s

        s = create_root(setup)
        s.set("world")
        assert log == ["hello", "world"]

    def test_custom_comparator(self):
        log = []

        def setup(dispose):
            s = create_signal("hello", equals=lambda a, b: a.lower() == b.lower())
            create_effect(lambda: log.append(s.get()))
            return s

        s = create_root(setup)
        s.set("HELLO")
        assert log == ["hello"]
        assert s.peek() == "hello"
        s.set("bye")
        assert log == ["hello", "bye"]

    def test_comparator_error_propagates(self):
        def boom(a, b):
            raise ValueError("cannot compare")

        s = Signal(1, equals=boom)
        with pytest.raises(ValueError, match="cannot compare"):
            s.set(2)
        assert s.peek() == 1

    def test_update(self):
        log = []

        def setup(dispose):
            s = create_signal(1)
            create_effect(lambda: log.append(s.get()))
            return s

        s = create_root(setup)
        s.update(lambda v: v + 10)
        assert log == [1, 11]

    def test_repeated_reads_run_once(self, assert_edges_consistent):
        """Reading twice records two edges but still runs the observer once."""
        log = []

        def setup(dispose):
            s = create_signal(1)
            create_effect(lambda: log.append(s.get() + s.get()))
            return s

        s = create_root(setup)
        assert len(s.observers) == 2
        assert_edges_consistent(s)
        s.set(2)
        assert log == [2, 4]
        assert len(s.observers) == 2
        assert_edges_consistent(s)

    def test_repr(self):
        assert "Signal(5)" in repr(Signal(5))
