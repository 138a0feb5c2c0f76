"""Persistent and in-memory stores."""

from .snapshots import SnapshotStore
from .ttl_cache import TTLCache

__all__ = ["SnapshotStore", "TTLCache"]
