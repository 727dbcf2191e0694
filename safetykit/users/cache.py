"""Bounded, thread-safe cache of user snapshots.

Backed by :class:`cachetools.LRUCache`; a single lock guards both the table
and its recency order. The cache never fetches anything itself: callers use
it look-aside (see :class:`~safetykit.users.directory.UserDirectory`).
"""

from __future__ import annotations

import threading

from cachetools import LRUCache

from safetykit.users.models import UserSnapshot

DEFAULT_CAPACITY = 50


class UserRecordCache:
    """Maps user id to snapshot, evicting the least recently used entry."""

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError(f"cache capacity must be at least 1, got {capacity}")
        self._users: LRUCache = LRUCache(maxsize=capacity)
        self._lock = threading.Lock()

    @property
    def capacity(self) -> int:
        return int(self._users.maxsize)

    def __len__(self) -> int:
        with self._lock:
            return len(self._users)

    def get(self, user_id: str) -> tuple[UserSnapshot | None, bool]:
        """Return ``(snapshot, True)`` on a hit and mark it most recently used."""
        with self._lock:
            try:
                return self._users[user_id], True
            except KeyError:
                return None, False

    def put(self, user_id: str, user: UserSnapshot) -> None:
        """Insert or replace; evicts the least recently used entry when full."""
        with self._lock:
            self._users[user_id] = user

    def remove(self, user_id: str) -> None:
        with self._lock:
            self._users.pop(user_id, None)

    def clear(self) -> None:
        with self._lock:
            self._users.clear()
