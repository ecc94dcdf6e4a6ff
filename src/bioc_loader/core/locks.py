# src/bioc_loader/core/locks.py
import threading
from contextlib import contextmanager
from typing import Dict, Hashable, List


class KeyedLock:
    """
    One mutex per key, created on first use and dropped once no thread holds or waits on it.
    Workers holding different keys never block each other.
    """
    def __init__(self):
        self._guard = threading.Lock()
        # key -> [lock, number of holders and waiters]
        self._entries: Dict[Hashable, List] = {}

    @contextmanager
    def hold(self, key: Hashable):
        with self._guard:
            entry = self._entries.get(key)
            if entry is None:
                entry = [threading.Lock(), 0]
                self._entries[key] = entry
            entry[1] += 1

        try:
            with entry[0]:
                yield
        finally:
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._entries[key]

    def __len__(self) -> int:
        with self._guard:
            return len(self._entries)
