from dataclasses import dataclass
from datetime import timedelta
from typing import Any


@dataclass(frozen=True)
class ShortenRequest:
    """Represent an already-parsed request to shorten a URL.

    Attributes:
        original_url (str):
            The long URL to shorten. May lack a scheme; the service
            normalizes it before validation and storage.
        custom_short_code (str | None):
            Caller-chosen shortcode. None or '' means "generate one".
        expiry (timedelta | None):
            Requested lifetime of the short URL. None means the caller
            omitted it; None and zero both fall back to the configured default.

    Example:
        >>> ShortenRequest(original_url='example.com/page')
        ShortenRequest(original_url='example.com/page', custom_short_code=None, expiry=None)
    """

    original_url: str
    custom_short_code: str | None = None
    expiry: timedelta | None = None

    def __post_init__(self):
        if not self.original_url:
            raise ValueError('original_url must be a non-empty string.')
        if self.expiry is not None and self.expiry < timedelta(0):
            raise ValueError(f'expiry must not be negative (given value: {self.expiry}).')

    def resolve_expiry(self, default: timedelta) -> timedelta:
        """Return the requested expiry, or `default` when omitted or zero"""
        if self.expiry is None or self.expiry == timedelta(0):
            return default
        return self.expiry


# fmt: off
@dataclass(frozen=True)
class ShortenResponse:
    short_url: str              # Full short link (base URL + shortcode)
    short_code: str             # Shortcode the URL is stored under
    original_url: str           # Normalized target URL
    expiry: timedelta           # TTL of the stored record at creation
    rate_remaining: int         # Quota left for the caller in this window
    rate_reset: timedelta       # Time until the caller's quota window resets

    def to_dict(self) -> dict[str, Any]:
        """Wire representation with durations in whole seconds"""
        return {
            'short_url': self.short_url,
            'short_code': self.short_code,
            'original_url': self.original_url,
            'expiry': int(self.expiry.total_seconds()),
            'rate_limit': self.rate_remaining,
            'rate_limit_reset': int(self.rate_reset.total_seconds()),
        }


@dataclass(frozen=True)
class RateDecision:
    allowed: bool               # Whether the request may proceed
    remaining: int              # Quota left after this request (0 when rejected)
    reset_in: timedelta         # Time until the quota window resets
# fmt: on
