from .snapshot_store import SnapshotStore

__all__ = ["SnapshotStore"]
