from linkshortener.store.key_schema import KeySchema
from linkshortener.store.base import KeyStoreBase
from linkshortener.store.memory import InMemoryKeyStore
from linkshortener.store.redis import RedisKeyStore


__all__ = [
    'KeySchema',
    'KeyStoreBase',
    'InMemoryKeyStore',
    'RedisKeyStore',
]
