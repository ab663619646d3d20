"""
Per-key mutual exclusion for activation records.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator

from tornade_license.common.exceptions import StoreUnavailable


class _LockEntry:
    __slots__ = ("lock", "users")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.users = 0


class KeyedLocks:
    """Lazily created locks, one per key.

    An entry lives only while some thread holds or waits on it, so the map
    stays as small as the set of keys currently being activated. Different
    keys never share a lock.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._entries: dict[str, _LockEntry] = {}

    def __len__(self) -> int:
        with self._guard:
            return len(self._entries)

    @contextmanager
    def hold(self, key: str, timeout: float) -> Iterator[None]:
        """Hold the lock for ``key``; raise ``StoreUnavailable`` after ``timeout`` seconds."""
        with self._guard:
            entry = self._entries.get(key)
            if entry is None:
                entry = self._entries[key] = _LockEntry()
            entry.users += 1

        acquired = entry.lock.acquire(timeout=max(timeout, 0))
        try:
            if not acquired:
                msg = f"timed out after {timeout}s waiting for activation record"
                raise StoreUnavailable(msg)
            yield
        finally:
            if acquired:
                entry.lock.release()
            with self._guard:
                entry.users -= 1
                if entry.users == 0:
                    self._entries.pop(key, None)
