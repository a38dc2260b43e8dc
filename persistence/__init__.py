"""Persistence helpers for the compounding machine screener."""

from .snapshot_cache import InMemorySnapshotCache, SnapshotCache, SnapshotStore

__all__ = ["InMemorySnapshotCache", "SnapshotCache", "SnapshotStore"]
