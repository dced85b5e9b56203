"""Per-client request quotas

Each client gets `max_quota` shortening requests per window. The counter
lives in the key/value store under the client's rate limit key and expires
with the window, which is what resets the quota.

NOTE: The first request of a window creates the counter with SET NX already
      decremented (max_quota - 1). Later requests use the store's saturating
      decrement, so concurrent requests from the same client can never push
      the counter below zero or be double-counted:

      (request 1): RateLimiter.check():
                   -> SET <app>:rates:<client> <quota - 1> NX PX <window>  => OK
      (request 2): RateLimiter.check():
                   -> SET <app>:rates:<client> <quota - 1> NX PX <window>  => nil
                   -> DECR (saturating) <app>:rates:<client>               => quota - 2

      A rejected request (counter already 0) doesn't write anything.
"""

import logging
from datetime import timedelta

from beartype import beartype

from linkshortener.constants import DefaultQuota, TTL
from linkshortener.exceptions import StoreUnavailableError
from linkshortener.models import RateDecision
from linkshortener.store.base import KeyStoreBase


logger = logging.getLogger(__name__)

# Times a window is re-opened when the counter expires between SET NX and DECR
_MAX_WINDOW_ATTEMPTS = 3


class RateLimiter:
    """Fixed-window rate limiter backed by a KeyStoreBase.

    Args:
        store (KeyStoreBase):
            Store holding the per-client counters.
        max_quota (int):
            Requests allowed per window. Defaults to 10.
        window (timedelta):
            Window length. Defaults to 30 minutes.
    """

    def __init__(
        self,
        store: KeyStoreBase,
        max_quota: int = DefaultQuota.SHORTEN_REQUESTS,
        window: timedelta = timedelta(seconds=TTL.RATE_LIMIT_WINDOW),
    ):
        if max_quota < 1:
            raise ValueError(f'max_quota must be at least 1 (given value: {max_quota}).')
        if window <= timedelta(0):
            raise ValueError(f'window must be positive (given value: {window}).')

        self.store = store
        self.max_quota = max_quota
        self.window = window

    @beartype
    def check(self, client_id: str) -> RateDecision:
        """Consume one unit of the client's quota if any is left

        Args:
            client_id (str):
                Client identifier (e.g. the caller's IP address).

        Returns:
            RateDecision:
                allowed=True with the quota left after this request, or
                allowed=False with remaining=0 when the quota is exhausted.
                reset_in is the time until the window resets.

        Raises:
            StoreUnavailableError:
                If the store can't be reached.

        Example:
            >>> limiter = RateLimiter(store, max_quota=2)
            >>> limiter.check('203.0.113.7').remaining
            1
            >>> limiter.check('203.0.113.7').remaining
            0
            >>> limiter.check('203.0.113.7').allowed
            False
        """
        key = self.store.keys.rate_limit_key(client_id)

        for _ in range(_MAX_WINDOW_ATTEMPTS):
            # First request in the window: open it with this request already counted
            if self.store.set_if_absent(key, self.max_quota - 1, self.window):
                return RateDecision(allowed=True, remaining=self.max_quota - 1, reset_in=self.window)

            remaining = self.store.decrement(key)
            if remaining is None:
                # Window expired between SET NX and DECR; open a fresh one
                continue

            reset_in = self.store.ttl(key) or timedelta(0)
            if remaining < 0:
                return RateDecision(allowed=False, remaining=0, reset_in=reset_in)
            return RateDecision(allowed=True, remaining=remaining, reset_in=reset_in)

        raise StoreUnavailableError(f'Rate limit record for client kept vanishing after {_MAX_WINDOW_ATTEMPTS} attempts.')
