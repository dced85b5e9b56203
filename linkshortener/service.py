"""Shortening and resolution of URLs

ShorteningService ties the rate limiter, URL predicates, shortcode generator
and key/value store together. It is transport-agnostic: callers hand it an
already-parsed ShortenRequest and a client identifier and get either a
ShortenResponse or one of the errors in `linkshortener.exceptions`.

Stages of `shorten()`, in strict order (each failure ends the request):
    - Step 1: Check and consume the client's rate limit quota  -> RateRejectedError
    - Step 2: Normalize the URL (default to https://)
    - Step 3: Validate URL syntax                               -> InvalidURLError
    - Step 4: Refuse links to the shortener's own domain        -> DomainBlockedError
    - Step 5: Issue a shortcode and store the record            -> CodeTakenError,
                                                                   GenerationExhaustedError
    - Step 6: Build the response with remaining quota

Any stage touching the store may raise StoreUnavailableError.

Example:
    >>> from linkshortener.models import ShortenRequest
    >>> from linkshortener.store import InMemoryKeyStore
    >>> from linkshortener.utils.config import ShortenerConfig

    >>> service = ShorteningService(InMemoryKeyStore(), ShortenerConfig(domain='myshortener.com'))
    >>> response = service.shorten(ShortenRequest(original_url='example.com/page'), client_id='203.0.113.7')
    >>> response.original_url
    'https://example.com/page'
    >>> service.resolve(response.short_code)
    'https://example.com/page'
"""

import functools
import logging
from collections.abc import Callable

from beartype import beartype

from linkshortener import events
from linkshortener.exceptions import (
    CodeTakenError,
    DomainBlockedError,
    GenerationExhaustedError,
    InvalidURLError,
    NotFoundError,
    RateRejectedError,
    StoreUnavailableError,
)
from linkshortener.generator import TokenGenerator
from linkshortener.models import ShortenRequest, ShortenResponse
from linkshortener.rate_limiter import RateLimiter
from linkshortener.store.base import KeyStoreBase
from linkshortener.utils.config import ShortenerConfig
from linkshortener.utils.helpers import build_short_url
from linkshortener.validators import enforce_https, is_blocked_domain, is_valid_url


logger = logging.getLogger(__name__)


class ShorteningService:
    """Orchestrate URL shortening and resolution over a KeyStoreBase.

    Args:
        store (KeyStoreBase):
            Store holding short URL records and rate limit counters.
        config (ShortenerConfig):
            Policy constants (domain, default expiry, quotas, shortcode policy).
        url_validator (Callable[[str], bool] | None):
            URL-syntax predicate. Defaults to validators.is_valid_url.
        domain_blocker (Callable[[str], bool] | None):
            Predicate rejecting self-referential URLs. Defaults to
            validators.is_blocked_domain bound to config.domain.
        generator (TokenGenerator | None):
            Shortcode generator. Defaults to one built from config.
        rate_limiter (RateLimiter | None):
            Rate limiter. Defaults to one built from config over store.
    """

    def __init__(
        self,
        store: KeyStoreBase,
        config: ShortenerConfig,
        *,
        url_validator: Callable[[str], bool] | None = None,
        domain_blocker: Callable[[str], bool] | None = None,
        generator: TokenGenerator | None = None,
        rate_limiter: RateLimiter | None = None,
    ):
        self.store = store
        self.config = config
        self.is_valid_url = url_validator or is_valid_url
        self.is_blocked_domain = domain_blocker or functools.partial(is_blocked_domain, domain=config.domain)
        self.generator = generator or TokenGenerator(
            length=config.shortcode_length,
            alphabet=config.shortcode_alphabet,
            max_attempts=config.shortcode_max_attempts,
        )
        self.rate_limiter = rate_limiter or RateLimiter(
            store,
            max_quota=config.rate_limit_quota,
            window=config.rate_limit_window,
        )

    @beartype
    def shorten(self, request: ShortenRequest, client_id: str) -> ShortenResponse:
        """Shorten request.original_url on behalf of client_id

        Args:
            request (ShortenRequest):
                Parsed shortening request.
            client_id (str):
                Identifier the rate limit is tracked under (e.g. caller IP).

        Returns:
            ShortenResponse: the stored short URL and the caller's remaining quota.

        Raises:
            RateRejectedError:
                If the client's quota for the current window is exhausted.
            InvalidURLError:
                If the normalized URL fails the URL-syntax predicate.
            DomainBlockedError:
                If the URL targets the shortener's own domain.
            CodeTakenError:
                If the requested custom shortcode is live.
            GenerationExhaustedError:
                If no free random shortcode was found.
            StoreUnavailableError:
                If the store can't be reached.
        """
        # 1- Check the client's rate limit before anything is written
        try:
            decision = self.rate_limiter.check(client_id)
        except StoreUnavailableError:
            logger.exception('Store unavailable during rate limit check.', extra={'event': events.STORE_UNAVAILABLE})
            raise
        if not decision.allowed:
            reset_in = int(decision.reset_in.total_seconds())
            logger.info(
                'Rate limit exceeded for client.',
                extra={'event': events.RATE_REJECTED, 'client_id': client_id, 'reset_in': reset_in},
            )
            raise RateRejectedError(
                f'Rate limit exceeded. Try again in {reset_in} seconds.',
                reset_in=decision.reset_in,
            )

        # 2- Normalize the URL (default scheme)
        original_url = enforce_https(request.original_url)

        # 3- Validate URL syntax
        if not self.is_valid_url(original_url):
            logger.info('Rejected invalid URL.', extra={'event': events.INVALID_URL, 'url': original_url})
            raise InvalidURLError(f'Invalid URL: {original_url}')

        # 4- Refuse shortening links to ourselves
        if self.is_blocked_domain(original_url):
            logger.info('Rejected URL targeting own domain.', extra={'event': events.DOMAIN_BLOCKED, 'url': original_url})
            raise DomainBlockedError(f"URLs pointing at {self.config.domain} can't be shortened.")

        # 5- Issue shortcode and store the record
        expiry = request.resolve_expiry(self.config.default_expiry)
        try:
            shortcode = self.generator.issue(self.store, original_url, expiry, custom_code=request.custom_short_code)
        except CodeTakenError:
            logger.info(
                'Custom shortcode already in use.',
                extra={'event': events.CODE_TAKEN, 'shortcode': request.custom_short_code},
            )
            raise
        except GenerationExhaustedError:
            logger.warning(
                'Exhausted shortcode generation attempts.',
                extra={'event': events.GENERATION_EXHAUSTED, 'max_attempts': self.generator.max_attempts},
            )
            raise
        except StoreUnavailableError:
            logger.exception('Store unavailable while storing short URL.', extra={'event': events.STORE_UNAVAILABLE})
            raise

        # 6- Build response
        response = ShortenResponse(
            short_url=build_short_url(self.config.base_url, shortcode),
            short_code=shortcode,
            original_url=original_url,
            expiry=expiry,
            rate_remaining=decision.remaining,
            rate_reset=decision.reset_in,
        )
        logger.info(
            'Shortened URL.',
            extra={
                'event': events.SHORTEN_SUCCESS,
                'shortcode': shortcode,
                'expiry': int(expiry.total_seconds()),
                'rate_remaining': decision.remaining,
            },
        )
        return response

    @beartype
    def resolve(self, code: str) -> str:
        """Return the original URL stored under code

        Raises:
            NotFoundError:
                If code is unknown or expired.
            StoreUnavailableError:
                If the store can't be reached.
        """
        try:
            original_url = self.store.get(self.store.keys.link_url_key(code))
        except StoreUnavailableError:
            logger.exception('Store unavailable while resolving short URL.', extra={'event': events.STORE_UNAVAILABLE})
            raise

        if original_url is None:
            logger.info('Short URL not found.', extra={'event': events.SHORT_URL_NOT_FOUND, 'shortcode': code})
            raise NotFoundError(f"Short URL with code '{code}' not found.")

        logger.debug('Resolved short URL.', extra={'event': events.RESOLVE_SUCCESS, 'shortcode': code})
        return original_url
