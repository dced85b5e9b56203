"""Key layout shared by every key/value store backend

    <prefix>:links:<shortcode>:url      -> original URL, TTL = link expiry
    <prefix>:rates:<xxh64(client id)>   -> remaining quota, TTL = rate limit window

The prefix is optional and usually '<app name>:<app env>' (see
`linkshortener.utils.config.app_prefix`).
"""

import functools
from collections.abc import Callable

import xxhash


__all__ = ['KeySchema']  # hide internal decorator prefix_key from imports


def prefix_key(func: Callable) -> Callable:
    @functools.wraps(func)
    def wrapper(self, *args, **kwargs) -> str:
        key = func(self, *args, **kwargs)
        return key if self.prefix is None else f'{self.prefix}:{key}'

    return wrapper


class KeySchema:
    """Build namespaced keys for short URL and rate limit records.

    Client identifiers (usually IP addresses) go through xxh64, which keeps
    raw addresses out of the store and key lengths fixed.
    """

    def __init__(self, prefix: str | None = None):
        if prefix is not None and not isinstance(prefix, str):
            raise TypeError(f'Prefix must be of type string (given type: {type(prefix)}).')
        self.prefix = prefix

    @prefix_key
    def link_url_key(self, short_code: str) -> str:
        return f'links:{short_code}:url'

    @prefix_key
    def rate_limit_key(self, client_id: str) -> str:
        return f'rates:{xxhash.xxh64_hexdigest(client_id)}'
