"""In-process implementation of the expiry-aware key/value store

Used for isolated tests and single-process local runs. Expiry is logical:
an entry past its deadline is treated as absent on every read and purged
lazily the next time its key is touched.

All operations go through one lock. The lock is acquired with the same
bounded timeout a network store would use, so a wedged caller surfaces as
StoreUnavailableError instead of blocking other requests forever.

Example:
    >>> from datetime import timedelta
    >>> store = InMemoryKeyStore()
    >>> store.put('greeting', 'hello', timedelta(seconds=30)).get('greeting')
    'hello'
"""

import threading
import time
from collections.abc import Callable
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import timedelta

from beartype import beartype

from linkshortener.constants import Store
from linkshortener.exceptions import StoreUnavailableError
from linkshortener.store.base import KeyStoreBase, ttl_milliseconds
from linkshortener.store.key_schema import KeySchema


@dataclass
class _Entry:
    value: str
    expires_at: float  # absolute deadline, in clock seconds


class InMemoryKeyStore(KeyStoreBase):
    """Thread-safe in-memory key/value store with TTLs

    Args:
        prefix (str | None):
            Namespace prefix for all keys, e.g. 'app:env'.
        timeout (float):
            Seconds to wait for the store lock before raising StoreUnavailableError.
        clock (Callable[[], float] | None):
            Source of the current time in seconds. Defaults to time.time.
    """

    def __init__(
        self,
        prefix: str | None = None,
        timeout: float = Store.TIMEOUT_SECONDS,
        clock: Callable[[], float] | None = None,
    ):
        self.keys = KeySchema(prefix=prefix)
        self._entries: dict[str, _Entry] = {}
        self._lock = threading.Lock()
        self._timeout = timeout
        self._clock = clock

    def _now(self) -> float:
        return self._clock() if self._clock is not None else time.time()

    @contextmanager
    def _locked(self):
        if not self._lock.acquire(timeout=self._timeout):
            raise StoreUnavailableError(f'Timed out after {self._timeout}s waiting for the in-memory store lock.')
        try:
            yield
        finally:
            self._lock.release()

    def _live(self, key: str) -> _Entry | None:
        """Return the live entry for key, purging it if expired (lock must be held)"""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.expires_at <= self._now():
            del self._entries[key]
            return None
        return entry

    def _deadline(self, ttl: timedelta) -> float:
        return self._now() + ttl_milliseconds(ttl) / 1000

    @beartype
    def put(self, key: str, value: str | int, ttl: timedelta) -> 'InMemoryKeyStore':
        deadline = self._deadline(ttl)
        with self._locked():
            self._entries[key] = _Entry(value=str(value), expires_at=deadline)
        return self

    @beartype
    def get(self, key: str) -> str | None:
        with self._locked():
            entry = self._live(key)
            return None if entry is None else entry.value

    @beartype
    def decrement(self, key: str) -> int | None:
        with self._locked():
            entry = self._live(key)
            if entry is None:
                return None
            current = int(entry.value)
            if current <= 0:
                return -1
            entry.value = str(current - 1)
            return current - 1

    @beartype
    def set_if_absent(self, key: str, value: str | int, ttl: timedelta) -> bool:
        deadline = self._deadline(ttl)
        with self._locked():
            if self._live(key) is not None:
                return False
            self._entries[key] = _Entry(value=str(value), expires_at=deadline)
            return True

    @beartype
    def ttl(self, key: str) -> timedelta | None:
        with self._locked():
            entry = self._live(key)
            if entry is None:
                return None
            return timedelta(seconds=entry.expires_at - self._now())

    def __len__(self) -> int:
        with self._locked():
            now = self._now()
            return sum(1 for entry in self._entries.values() if entry.expires_at > now)
