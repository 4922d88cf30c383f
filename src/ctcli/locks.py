"""Per-key locks for serialising changes to the same remote object.

Independent operations may run on separate threads against one shared
:class:`~ctcli.client.Client`. Most can run in any order, but some
appliance objects (a cloud key and its rotation schedule, say) reject
concurrent modification. :class:`KeyedLock` hands out one
:class:`threading.Lock` per key so callers can serialise just those
operations::

    locks = KeyedLock()
    with locks.hold(key_id):
        client.update_data(key_id, "api/v1/cckm/aws/keys", payload)
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator


class KeyedLock:
    """A registry of locks, created on first use and kept for the registry's life.

    Entries are never removed: a lock dropped while another thread waits
    on it would let a third thread take a fresh lock for the same key.
    One registry is meant to live as long as the client it guards, and
    holds one small lock per key touched in that time.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}

    def lock(self, key: str) -> None:
        """Block until the lock for *key* is held. Pair with :meth:`unlock`."""
        self._get(key).acquire()

    def unlock(self, key: str) -> None:
        """Release the lock for *key*.

        Raises:
            RuntimeError: If the lock for *key* is not held.
        """
        self._get(key).release()

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        """Hold the lock for *key* for the duration of a ``with`` block."""
        self.lock(key)
        try:
            yield
        finally:
            self.unlock(key)

    def __contains__(self, key: str) -> bool:
        with self._guard:
            return key in self._locks

    def _get(self, key: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            return lock
