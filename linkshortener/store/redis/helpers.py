import functools
from typing import TypeVar, Any
from collections.abc import Callable

import redis

from linkshortener.exceptions import StoreUnavailableError


__all__ = ['handle_redis_connection_error', 'describe_redis']

F = TypeVar('F', bound=Callable[..., Any])


def describe_redis(client: redis.Redis) -> str:
    """Return '<host>:<port>/<db>' for the client's connection pool"""
    info = client.connection_pool.connection_kwargs
    return f"{info.get('host')}:{info.get('port')}/{info.get('db')}"


def handle_redis_connection_error(method: F) -> F:
    """Wrap Redis-interacting store methods to handle connectivity errors

    Both refused/dropped connections and socket timeouts are reported as
    StoreUnavailableError, so a degraded Redis never hangs a request past
    the client's configured timeout.

    Args:
        method (Callable[..., Any]):
            Store method performing Redis operations which may raise
            redis.exceptions.ConnectionError or redis.exceptions.TimeoutError.

    Returns:
        Callable[..., Any]:
            Wrapped method which raises StoreUnavailableError on connectivity issues with Redis.

    Example:
        >>> @handle_redis_connection_error
        ... def get(self, key):
        ...     return self.redis.get(key)
    """

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except redis.exceptions.TimeoutError as e:
            raise StoreUnavailableError(f'Timed out talking to Redis at {describe_redis(self.redis)}.') from e
        except redis.exceptions.ConnectionError as e:
            raise StoreUnavailableError(f"Can't connect to Redis at {describe_redis(self.redis)}.") from e

    return wrapper
