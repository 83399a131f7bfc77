"""
Holder for the currently published aggregate key set.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Iterable, Optional

from ..models import KeySet, JWK, render_jwks


@dataclass(frozen=True)
class Snapshot:
    """An immutable, fully merged aggregate ready to be served."""

    keys: KeySet
    body: bytes
    generation: int
    published_at: Optional[float]


EMPTY_SNAPSHOT = Snapshot(keys=(), body=render_jwks(()), generation=0, published_at=None)


class SnapshotStore:
    """Single-writer, many-reader cell for the published snapshot.

    Readers take no lock: `get()` is a single attribute load, so it always
    returns a snapshot that was published whole. The writer builds the new
    snapshot (including its serialized body) before entering the lock and
    holds the lock only for the reference swap.
    """

    def __init__(self) -> None:
        self._snapshot = EMPTY_SNAPSHOT
        self._write_lock = threading.Lock()

    def get(self) -> Snapshot:
        return self._snapshot

    def set(self, keys: Iterable[JWK]) -> Snapshot:
        keys = tuple(keys)
        body = render_jwks(keys)
        published_at = time.time()
        with self._write_lock:
            snapshot = Snapshot(
                keys=keys,
                body=body,
                generation=self._snapshot.generation + 1,
                published_at=published_at,
            )
            self._snapshot = snapshot
        return snapshot
