"""In-memory keyed locks for serializing read-modify-write sequences."""

import logging
import threading
from contextlib import contextmanager
from typing import Dict, Hashable, Iterator

logger = logging.getLogger(__name__)


class KeyedLock:
    """Per-key mutual exclusion within one process.

    Endpoints run in FastAPI's threadpool, so two requests on the same key
    (e.g. a ``(user_id, post_id)`` like toggle) can interleave. Holding the
    lock for the key serializes them; different keys never block each other.
    """

    def __init__(self):
        self._locks: Dict[Hashable, threading.Lock] = {}
        self._refs: Dict[Hashable, int] = {}
        self._guard = threading.Lock()

    @contextmanager
    def hold(self, key: Hashable) -> Iterator[None]:
        """Acquire the lock for ``key`` for the duration of the block."""
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._locks[key] = lock
            self._refs[key] = self._refs.get(key, 0) + 1

        lock.acquire()
        try:
            yield
        finally:
            lock.release()
            with self._guard:
                self._refs[key] -= 1
                # Drop idle locks so the registry does not grow unbounded
                if self._refs[key] == 0:
                    del self._refs[key]
                    del self._locks[key]

    def active_keys(self) -> int:
        """Number of keys currently held or waited on."""
        with self._guard:
            return len(self._locks)


# Singleton instance used by like toggles
like_locks = KeyedLock()
