"""Redis implementation of the expiry-aware key/value store

This module provides a Redis-based implementation of KeyStoreBase used for
both short URL records and per-client rate limit counters.

Responsibilities:
    - Store and retrieve TTL-bound values;
    - Insert values only when a key is not live (SET NX), so racing claims on
      the same shortcode can't both win;
    - Decrement counters atomically without going below zero (Lua script);
    - Report Redis connectivity issues and timeouts as StoreUnavailableError.

Classes:
    RedisKeyStore:
        Store backed by a Redis datastore.

Example:
    >>> from datetime import timedelta
    >>> from linkshortener.store.redis import RedisKeyStore

    >>> store = RedisKeyStore(prefix="app:dev")
    >>> key = store.keys.rate_limit_key('203.0.113.7')
    >>> store.set_if_absent(key, 9, timedelta(minutes=30))
    True
    >>> store.decrement(key)
    8
    >>> store.ttl(key)
    datetime.timedelta(seconds=1799, microseconds=990000)
"""

from datetime import timedelta

from beartype import beartype

from linkshortener.store.base import KeyStoreBase, ttl_milliseconds
from linkshortener.store.redis.mixins import RedisClientMixin
from linkshortener.store.redis.helpers import handle_redis_connection_error


# KEYS[1]: counter key
# Returns nil when the key is missing, -1 when the counter is already at 0
# (left untouched), the decremented value otherwise.
DECREMENT_SCRIPT = """
local current = redis.call('GET', KEYS[1])
if not current then
    return false
end
if tonumber(current) <= 0 then
    return -1
end
return redis.call('DECR', KEYS[1])
"""


class RedisKeyStore(RedisClientMixin, KeyStoreBase):
    """Redis-based key/value store with TTLs

    Attributes (see RedisClientMixin):
        redis (redis.Redis):
            Redis client used to communicate with the Redis datastore.
        keys (KeySchema):
            Key schema helper for generating namespaced keys.

    Methods:
        put(key, value, ttl) -> RedisKeyStore:       SET <key> <value> PX <ttl>
        get(key) -> str | None:                      GET <key>
        decrement(key) -> int | None:                EVALSHA <saturating decrement>
        set_if_absent(key, value, ttl) -> bool:      SET <key> <value> NX PX <ttl>
        ttl(key) -> timedelta | None:                PTTL <key>

    NOTE:
        Every command is a single round trip and atomic on the Redis side, so
        no client-side locking is needed. Expiry is enforced by Redis itself.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._decrement_script = self.redis.register_script(DECREMENT_SCRIPT)

    @handle_redis_connection_error
    @beartype
    def put(self, key: str, value: str | int, ttl: timedelta) -> 'RedisKeyStore':
        self.redis.set(key, value, px=ttl_milliseconds(ttl))
        return self

    @handle_redis_connection_error
    @beartype
    def get(self, key: str) -> str | None:
        return self.redis.get(key)

    @handle_redis_connection_error
    @beartype
    def decrement(self, key: str) -> int | None:
        result = self._decrement_script(keys=[key])
        return None if result is None else int(result)

    @handle_redis_connection_error
    @beartype
    def set_if_absent(self, key: str, value: str | int, ttl: timedelta) -> bool:
        # SET ... NX replies OK on insert and nil when the key is live
        return bool(self.redis.set(key, value, nx=True, px=ttl_milliseconds(ttl)))

    @handle_redis_connection_error
    @beartype
    def ttl(self, key: str) -> timedelta | None:
        remaining_ms = self.redis.pttl(key)
        # -2: key doesn't exist, -1: key exists without expiry
        if remaining_ms is None or remaining_ms < 0:
            return None
        return timedelta(milliseconds=remaining_ms)
