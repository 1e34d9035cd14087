"""Shared fixtures: every test starts with no active runtime."""

import pytest

from finegrain import get_backend, set_backend


@pytest.fixture(autouse=True)
def isolated_runtime():
    backend = get_backend()
    previous = backend.get_runtime()
    backend.set_runtime(None)
    yield
    set_backend(backend)
    backend.set_runtime(previous)


def _assert_edges_consistent(signal):
    """Every observer entry of signal points back at the matching source slot."""
    for i in range(len(signal.observers)):
        observer = signal.observers[i]
        back = signal.observer_slots[i]
        assert observer.sources[back] is signal
        assert observer.source_slots[back] == i


@pytest.fixture
def assert_edges_consistent():
    return _assert_edges_consistent
