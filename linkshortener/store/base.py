"""Abstract base class for expiry-aware key/value stores.

This class establishes a consistent contract for all store implementations,
regardless of the backing medium (e.g., Redis, process memory).

Responsibilities:
    - Provide TTL-bound put/get of string values.
    - Provide the two atomic primitives the core relies on: saturating
      decrement-and-read, and insert-only-if-absent.
    - Standardize error handling: any failure to reach the backing medium
      within its timeout surfaces as StoreUnavailableError.

Example:
    Typical usage with a backend-specific implementation:

        >>> from datetime import timedelta
        >>> from linkshortener.store import InMemoryKeyStore

        >>> store = InMemoryKeyStore(prefix='linkshortener:dev')
        >>> key = store.keys.link_url_key('a1b2c3')

        >>> store.set_if_absent(key, 'https://example.com/blog/article-123', timedelta(hours=24))
        True
        >>> store.set_if_absent(key, 'https://example.com/other', timedelta(hours=24))
        False
        >>> store.get(key)
        'https://example.com/blog/article-123'

NOTE:
    - Records expire automatically. The store does not provide an interface
      to manually delete entries.
"""

from abc import ABC, abstractmethod
from datetime import timedelta


class KeyStoreBase(ABC):
    """Interface for expiry-aware key/value stores.

    Attributes:
        keys (KeySchema):
            Helper generating namespaced keys for this store.

    Methods:
        put(key: str, value: str | int, ttl: timedelta) -> KeyStoreBase:
            Store a value, overwriting any previous one and resetting its TTL.

        get(key: str) -> str | None:
            Retrieve a live value. None if missing or expired.

        decrement(key: str) -> int | None:
            Atomically decrement an integer value, saturating at zero.

        set_if_absent(key: str, value: str | int, ttl: timedelta) -> bool:
            Atomically insert a value only if no live value exists.

        ttl(key: str) -> timedelta | None:
            Remaining lifetime of a live key.

    All methods raise StoreUnavailableError on connectivity issues or timeouts.

    Subclassing:
        Backend-specific implementations (e.g., RedisKeyStore or
        InMemoryKeyStore) must extend this class and implement all
        abstract methods.
    """

    @abstractmethod
    def put(self, key: str, value: str | int, ttl: timedelta) -> 'KeyStoreBase':
        """Store a value under key with a time-to-live.

        Args:
            key (str):
                Store key (usually produced by `self.keys`).
            value (str | int):
                Value to store. Integers are stored in their decimal form.
            ttl (timedelta):
                Positive lifetime of the value.

        Returns:
            KeyStoreBase: self (for method chaining)

        Raises:
            ValueError:
                If ttl is not positive.
            StoreUnavailableError:
                If the backing medium can't be reached in time.
        """
        pass

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Retrieve a live value.

        Args:
            key (str):
                Store key.

        Returns:
            str | None: The stored value, or None if missing or expired.

        Raises:
            StoreUnavailableError:
                If the backing medium can't be reached in time.
        """
        pass

    @abstractmethod
    def decrement(self, key: str) -> int | None:
        """Atomically decrement an integer value and return the result.

        NOTE: the value never goes below zero. If the stored value is already 0,
              nothing is written and -1 is returned, which lets callers detect
              "would go below zero" in a single round trip.

        Args:
            key (str):
                Store key holding an integer.

        Returns:
            int | None:
                The decremented value, -1 if the value was already 0,
                or None if the key is missing or expired.

        Raises:
            StoreUnavailableError:
                If the backing medium can't be reached in time.
        """
        pass

    @abstractmethod
    def set_if_absent(self, key: str, value: str | int, ttl: timedelta) -> bool:
        """Atomically insert a value only if the key holds no live value.

        Args:
            key (str):
                Store key.
            value (str | int):
                Value to store.
            ttl (timedelta):
                Positive lifetime of the value.

        Returns:
            bool: True if the value was inserted, False if the key was already live.

        Raises:
            ValueError:
                If ttl is not positive.
            StoreUnavailableError:
                If the backing medium can't be reached in time.
        """
        pass

    @abstractmethod
    def ttl(self, key: str) -> timedelta | None:
        """Return the remaining lifetime of a live key.

        Args:
            key (str):
                Store key.

        Returns:
            timedelta | None: Remaining lifetime, or None if the key is missing or expired.

        Raises:
            StoreUnavailableError:
                If the backing medium can't be reached in time.
        """
        pass


def ttl_milliseconds(ttl: timedelta) -> int:
    """Convert a positive TTL to whole milliseconds (at least 1)"""
    if ttl <= timedelta(0):
        raise ValueError(f'TTL must be positive (given value: {ttl}).')
    return max(1, int(ttl.total_seconds() * 1000))
