"""Per-key lock registry used to serialize mutations on one pair."""

import threading
from collections.abc import Hashable, Iterator
from contextlib import contextmanager
from typing import Dict, Optional


class _Entry:
    __slots__ = ("lock", "holders")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.holders = 0


class KeyedLock:
    """
    Mutual exclusion per key.

    Callers on the same key run one at a time; callers on different keys
    never block each other beyond the short registry bookkeeping. Entries
    are dropped once no caller holds or waits on them.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._entries: Dict[Hashable, _Entry] = {}

    @contextmanager
    def hold(self, key: Hashable, timeout: Optional[float] = None) -> Iterator[None]:
        """
        Hold the lock for `key` for the duration of the block.

        Raises:
            TimeoutError: If the lock could not be acquired within `timeout` seconds.
        """
        with self._guard:
            entry = self._entries.get(key)
            if entry is None:
                entry = self._entries[key] = _Entry()
            entry.holders += 1

        acquired = entry.lock.acquire(timeout=-1 if timeout is None else timeout)
        try:
            if not acquired:
                raise TimeoutError(f"Timed out waiting for lock on {key!r}")
            yield
        finally:
            if acquired:
                entry.lock.release()
            with self._guard:
                entry.holders -= 1
                if entry.holders == 0:
                    self._entries.pop(key, None)

    def __len__(self) -> int:
        with self._guard:
            return len(self._entries)
