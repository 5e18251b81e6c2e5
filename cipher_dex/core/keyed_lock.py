"""Per-key mutual exclusion for pools and wallet balances."""

from contextlib import contextmanager
from threading import Lock
from typing import Dict, Hashable, Iterator, List


class _Entry:
    __slots__ = ('lock', 'users')

    def __init__(self):
        self.lock = Lock()
        self.users = 0


class KeyedLock:
    """
    A lazily created ``threading.Lock`` per key.

    ``hold(*keys)`` acquires several keys in sorted order so that two
    callers locking overlapping sets cannot deadlock. An entry lives only
    while some caller holds or waits on it, so the table stays as small as
    the set of keys in use. Locks are process-local: separate worker
    processes sharing one database are not serialized against each other.
    """

    def __init__(self):
        self._entries: Dict[Hashable, _Entry] = {}
        self._registry_lock = Lock()

    def __len__(self) -> int:
        with self._registry_lock:
            return len(self._entries)

    def _checkout(self, key: Hashable) -> Lock:
        with self._registry_lock:
            entry = self._entries.get(key)
            if entry is None:
                entry = self._entries[key] = _Entry()
            entry.users += 1
            return entry.lock

    def _checkin(self, key: Hashable) -> None:
        with self._registry_lock:
            entry = self._entries[key]
            entry.users -= 1
            if entry.users == 0:
                del self._entries[key]

    @contextmanager
    def hold(self, *keys: Hashable) -> Iterator[None]:
        ordered = sorted(set(keys), key=repr)
        checked_out: List[Hashable] = []
        acquired: List[Lock] = []
        try:
            for key in ordered:
                lock = self._checkout(key)
                checked_out.append(key)
                lock.acquire()
                acquired.append(lock)
            yield
        finally:
            for lock in reversed(acquired):
                lock.release()
            for key in reversed(checked_out):
                self._checkin(key)
