from .store import EMPTY_SNAPSHOT, Snapshot, SnapshotStore

__all__ = ["EMPTY_SNAPSHOT", "Snapshot", "SnapshotStore"]
