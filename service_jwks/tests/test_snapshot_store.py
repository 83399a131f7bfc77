"""
Unit tests for SnapshotStore.
"""

import json
import threading

import pytest

from service_jwks.app.models import JWK, render_jwks
from service_jwks.app.snapshot.store import EMPTY_SNAPSHOT, SnapshotStore


def _keys(prefix: str, count: int):
    return [JWK(kty="RSA", kid=f"{prefix}-{i}", n="n", e="AQAB") for i in range(count)]


class TestSnapshotStore:
    """Test cases for SnapshotStore."""

    @pytest.fixture
    def store(self):
        """Fresh store per test."""
        return SnapshotStore()

    def test_initial_snapshot_is_empty(self, store):
        """Before any publish the store serves an empty key set."""
        snapshot = store.get()

        assert snapshot is EMPTY_SNAPSHOT
        assert snapshot.keys == ()
        assert snapshot.body == b'{"keys":[]}'
        assert snapshot.generation == 0
        assert snapshot.published_at is None

    def test_set_replaces_snapshot(self, store):
        """set() publishes a new complete snapshot."""
        published = store.set(_keys("a", 2))

        assert store.get() is published
        assert [key.kid for key in published.keys] == ["a-0", "a-1"]
        assert published.body == render_jwks(published.keys)
        assert published.generation == 1
        assert published.published_at is not None

    def test_generation_increases(self, store):
        """Each publish bumps the generation."""
        store.set(_keys("a", 1))
        store.set(())

        assert store.get().generation == 2
        assert store.get().keys == ()

    def test_published_keys_detached_from_input(self, store):
        """Mutating the caller's list after publish does not change the snapshot."""
        keys = _keys("a", 1)
        snapshot = store.set(keys)
        keys.append(JWK(kid="late"))

        assert len(snapshot.keys) == 1
        assert len(store.get().keys) == 1

    def test_stores_are_isolated(self):
        """Separate stores do not share state."""
        first, second = SnapshotStore(), SnapshotStore()
        first.set(_keys("a", 1))

        assert second.get().keys == ()

    def test_concurrent_readers_see_whole_snapshots(self, store):
        """Readers racing a writer only ever see fully published snapshots."""
        errors = []
        stop = threading.Event()

        def reader():
            while not stop.is_set():
                snapshot = store.get()
                prefixes = {key.kid.split("-")[0] for key in snapshot.keys}
                if snapshot.generation == 0:
                    expected = set()
                else:
                    expected = {f"g{snapshot.generation}"}
                if prefixes != expected or len(snapshot.keys) not in (0, 50):
                    errors.append(("keys", snapshot.generation, prefixes))
                if json.loads(snapshot.body) != {"keys": [key.to_dict() for key in snapshot.keys]}:
                    errors.append(("body", snapshot.generation))

        readers = [threading.Thread(target=reader) for _ in range(4)]
        for thread in readers:
            thread.start()

        for generation in range(1, 201):
            store.set(_keys(f"g{generation}", 50))

        stop.set()
        for thread in readers:
            thread.join()

        assert errors == []
        assert store.get().generation == 200
