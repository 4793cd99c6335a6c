"""Snapshot file storage."""

from marketsnap.storage.snapshot import SnapshotWriter, dumps


__all__ = [
    "SnapshotWriter",
    "dumps",
]
