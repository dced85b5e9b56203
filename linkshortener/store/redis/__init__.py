from linkshortener.store.redis.mixins import RedisClientMixin
from linkshortener.store.redis.redis_key_store import RedisKeyStore


__all__ = [
    'RedisClientMixin',
    'RedisKeyStore',
]
