from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Dict, Hashable, Iterator


class _KeyedEntry:
    __slots__ = ("lock", "users")

    def __init__(self):
        self.lock = threading.Lock()
        # Threads holding or waiting on ``lock``
        self.users = 0


_registry_guard = threading.Lock()
_locks: Dict[Hashable, _KeyedEntry] = {}


def _acquire_entry(key: Hashable) -> _KeyedEntry:
    with _registry_guard:
        entry = _locks.get(key)
        if entry is None:
            entry = _locks[key] = _KeyedEntry()
        entry.users += 1
        return entry


def _release_entry(key: Hashable, entry: _KeyedEntry) -> None:
    with _registry_guard:
        entry.users -= 1
        if entry.users == 0 and _locks.get(key) is entry:
            del _locks[key]


@contextmanager
def keyed_lock(key: Hashable) -> Iterator[None]:
    """Process-wide mutual exclusion for one key (e.g. a center-day).

    The registry only holds keys that some thread currently holds or waits on.
    """

    entry = _acquire_entry(key)
    try:
        with entry.lock:
            yield
    finally:
        _release_entry(key, entry)
