"""Shared Redis connection handling for Redis-backed key/value stores.

RedisClientMixin owns three things every Redis store needs before its first
command: a client whose socket reads and connects are bounded by the store
timeout, a KeySchema for namespaced keys, and a PING on construction so a
misconfigured or unreachable Redis fails fast with StoreUnavailableError
instead of on the first request.

Example:
    >>> class RedisKeyStore(RedisClientMixin, KeyStoreBase):
    ...     pass
    ...
    >>> store = RedisKeyStore(redis_host='redis.internal', redis_timeout=0.1, prefix='linkshortener:prod')
    >>> store.keys.link_url_key('Kp7fWq3')
    'linkshortener:prod:links:Kp7fWq3:url'
"""

import logging
from typing import Optional

import redis

from linkshortener.constants import Store
from linkshortener.exceptions import StoreUnavailableError
from linkshortener.store.key_schema import KeySchema
from linkshortener.store.redis.helpers import describe_redis


logger = logging.getLogger(__name__)


class RedisClientMixin:
    """Set up `self.redis` and `self.keys`, then healthcheck the connection.

    Args:
        redis_host, redis_port, redis_db:
            Where Redis lives. Defaults to localhost:6379/0. Port and db may be
            given as strings (e.g. straight from a settings document).
        redis_decode_responses (Optional[bool]):
            Return str instead of bytes. Stores rely on this; defaults to True.
        redis_username, redis_password (Optional[str]):
            ACL credentials, if Redis requires them.
        redis_timeout (Optional[float]):
            Socket connect and read timeout in seconds. Defaults to 0.25.
        redis_client (Optional[redis.Redis]):
            Ready-made client; all connection parameters above are ignored.
        prefix (Optional[str]):
            Key namespace, e.g. 'linkshortener:prod'.

    Raises:
        StoreUnavailableError:
            If Redis doesn't answer PING within the timeout.
    """

    def __init__(
        self,
        redis_host: Optional[str] = 'localhost',
        redis_port: Optional[int] = 6379,
        redis_db: Optional[int] = 0,
        redis_decode_responses: Optional[bool] = True,
        redis_username: Optional[str] = None,
        redis_password: Optional[str] = None,
        redis_timeout: Optional[float] = Store.TIMEOUT_SECONDS,
        redis_client: Optional[redis.Redis] = None,
        prefix: Optional[str] = None,
    ):
        if redis_client is None:
            redis_client = self._connect(
                host=redis_host,
                port=int(redis_port),
                db=int(redis_db),
                decode_responses=redis_decode_responses,
                username=redis_username,
                password=redis_password,
                timeout=redis_timeout,
            )
        self.redis = redis_client
        self.keys = KeySchema(prefix=prefix)
        self._healthcheck()

    @staticmethod
    def _connect(*, timeout: Optional[float], **connection) -> redis.Redis:
        # Connection setup is lazy: nothing goes over the wire before the first command
        return redis.Redis(**connection, socket_timeout=timeout, socket_connect_timeout=timeout)

    def _healthcheck(self, raise_error: bool = True) -> bool:
        """PING Redis

        Returns:
            bool: True on PONG. False on failure when raise_error=False.

        Raises:
            StoreUnavailableError:
                On connection errors or timeouts when raise_error=True.
        """
        try:
            self.redis.ping()
        except (redis.exceptions.ConnectionError, redis.exceptions.TimeoutError) as e:
            logger.warning('Redis healthcheck failed.', extra={'redis': describe_redis(self.redis), 'error': str(e)})
            if raise_error:
                raise StoreUnavailableError(
                    f"Can't connect to Redis at {describe_redis(self.redis)}. Check the provided configuration parameters."
                ) from e
            return False
        return True
