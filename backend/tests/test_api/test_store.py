"""Tests for the in-memory session store."""

from __future__ import annotations

import pytest

from bubbleset.api.store import SessionStore


def test_eviction_drops_least_recently_used():
    store = SessionStore(max_sessions=2)
    first, _ = store.create()
    second, _ = store.create()
    store.get(first)
    third, _ = store.create()
    assert len(store) == 2
    assert store.get(first) is not None
    assert store.get(third) is not None
    with pytest.raises(KeyError):
        store.get(second)


def test_delete():
    store = SessionStore()
    session_id, _ = store.create()
    assert store.delete(session_id)
    assert not store.delete(session_id)
    with pytest.raises(KeyError):
        store.get(session_id)
