"""Unit tests for the RedisKeyStore

Test coverage includes:

1. Initialization
   - Ensures the saturating decrement script is registered once.

2. put / get
   - Validates SET ... PX and GET are issued with the right arguments.
   - Ensures non-positive TTLs raise ValueError before reaching Redis.

3. decrement
   - Ensures the script result is passed through (value, -1 or None).

4. set_if_absent
   - Validates SET ... NX PX is issued and its reply mapped to a bool.

5. ttl
   - Ensures PTTL is converted to a timedelta, and -1/-2 map to None.

6. Connectivity issues
   - Confirms Redis connection errors and timeouts raise StoreUnavailableError.
   - Ensures invalid parameter types raise type errors.
"""

from datetime import timedelta

import pytest
import redis
from beartype.roar import BeartypeCallHintParamViolation

from linkshortener.exceptions import StoreUnavailableError
from linkshortener.store.redis import RedisKeyStore
from linkshortener.store.redis.redis_key_store import DECREMENT_SCRIPT


# -------------------------------
# Fixtures
# -------------------------------


@pytest.fixture
def store(redis_client, app_prefix):
    return RedisKeyStore(redis_client=redis_client, prefix=app_prefix)


@pytest.fixture
def decrement_script(redis_client):
    return redis_client.register_script.return_value


# -------------------------------
# 1. Initialization
# -------------------------------


def test_register_decrement_script(store, redis_client):
    redis_client.register_script.assert_called_once_with(DECREMENT_SCRIPT)
    assert store.keys.prefix == 'testapp:test'


# -------------------------------
# 2. put / get
# -------------------------------


def test_put(store, redis_client):
    """Ensure put() overwrites with a millisecond TTL and returns the store."""
    result = store.put('testapp:test:links:abc123:url', 'https://example.com', timedelta(seconds=30))

    assert result is store
    redis_client.set.assert_called_once_with('testapp:test:links:abc123:url', 'https://example.com', px=30_000)


@pytest.mark.parametrize('ttl', [timedelta(0), timedelta(seconds=-5)])
def test_put_with_non_positive_ttl(store, redis_client, ttl):
    with pytest.raises(ValueError):
        store.put('key', 'value', ttl)
    redis_client.set.assert_not_called()


def test_get(store, redis_client):
    redis_client.get.return_value = 'https://example.com'

    assert store.get('testapp:test:links:abc123:url') == 'https://example.com'
    redis_client.get.assert_called_once_with('testapp:test:links:abc123:url')


def test_get_missing_key(store, redis_client):
    redis_client.get.return_value = None
    assert store.get('testapp:test:links:missing:url') is None


# -------------------------------
# 3. decrement
# -------------------------------


@pytest.mark.parametrize('reply, expected', [(4, 4), (0, 0), (-1, -1), (None, None)])
def test_decrement(store, decrement_script, reply, expected):
    decrement_script.return_value = reply

    assert store.decrement('testapp:test:rates:abcd') == expected
    decrement_script.assert_called_once_with(keys=['testapp:test:rates:abcd'])


# -------------------------------
# 4. set_if_absent
# -------------------------------


def test_set_if_absent_inserts(store, redis_client):
    redis_client.set.return_value = True

    assert store.set_if_absent('testapp:test:rates:abcd', 9, timedelta(minutes=30)) is True
    redis_client.set.assert_called_once_with('testapp:test:rates:abcd', 9, nx=True, px=1_800_000)


def test_set_if_absent_with_live_key(store, redis_client):
    """Ensure a nil reply to SET NX is reported as False."""
    redis_client.set.return_value = None
    assert store.set_if_absent('testapp:test:rates:abcd', 9, timedelta(minutes=30)) is False


# -------------------------------
# 5. ttl
# -------------------------------


def test_ttl(store, redis_client):
    redis_client.pttl.return_value = 1_500
    assert store.ttl('key') == timedelta(milliseconds=1_500)


@pytest.mark.parametrize('reply', [-1, -2])
def test_ttl_without_expiry_or_key(store, redis_client, reply):
    redis_client.pttl.return_value = reply
    assert store.ttl('key') is None


# -------------------------------
# 6. Connectivity issues
# -------------------------------


@pytest.mark.parametrize(
    'call',
    [
        lambda s: s.get('key'),
        lambda s: s.put('key', 'value', timedelta(seconds=1)),
        lambda s: s.set_if_absent('key', 'value', timedelta(seconds=1)),
        lambda s: s.ttl('key'),
    ],
)
def test_redis_connection_error(store, redis_client, call):
    redis_client.get.side_effect = redis.exceptions.ConnectionError('Connection error')
    redis_client.set.side_effect = redis.exceptions.ConnectionError('Connection error')
    redis_client.pttl.side_effect = redis.exceptions.ConnectionError('Connection error')

    with pytest.raises(StoreUnavailableError, match="Can't connect to Redis at redis:6379/0."):
        call(store)


def test_redis_timeout(store, decrement_script):
    decrement_script.side_effect = redis.exceptions.TimeoutError('Timeout reading from socket')

    with pytest.raises(StoreUnavailableError, match='Timed out talking to Redis at redis:6379/0.'):
        store.decrement('key')


def test_invalid_parameter_types(store):
    with pytest.raises((TypeError, BeartypeCallHintParamViolation)):
        store.get(123)
    with pytest.raises((TypeError, BeartypeCallHintParamViolation)):
        store.put('key', 'value', 30)
