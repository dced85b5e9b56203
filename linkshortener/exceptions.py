"""Exceptions raised by the shortening core.

Every error a request can end with maps to one class below. The transport
layer turns them into status codes using `error_code` (and `retryable` for
retry-after guidance).

Classes:
    ShortenerError:
        Base class for all application-specific errors.

    BadRequestError:
        Malformed input, rejected before reaching the core.

    InvalidURLError, DomainBlockedError, RateRejectedError, CodeTakenError:
        Request defects detected by the core stages.

    GenerationExhaustedError:
        No free random shortcode found within the retry budget.

    StoreUnavailableError:
        The backing key/value medium timed out or is unreachable.

    NotFoundError:
        Unknown or expired shortcode.

    ConfigurationError, MissingEnvironmentVariableError, BadConfigurationError:
        Process configuration problems.

Example:
    >>> from linkshortener.exceptions import CodeTakenError
    >>> raise CodeTakenError("Short code 'abc123' is already in use.")
    Traceback (most recent call last):
        ...
    linkshortener.exceptions.CodeTakenError: Short code 'abc123' is already in use.
"""

from datetime import timedelta


class ShortenerError(Exception):
    """Base exception for all application-specific errors."""

    error_code = 'app:shortener_error'
    retryable = False


class BadRequestError(ShortenerError):
    """Raised when a request payload is malformed."""

    error_code = 'request:bad_request'


class InvalidURLError(ShortenerError):
    """Raised when the target URL fails the URL-syntax predicate."""

    error_code = 'request:invalid_url'


class DomainBlockedError(ShortenerError):
    """Raised when the target URL points at the shortener's own domain."""

    error_code = 'request:domain_blocked'


class RateRejectedError(ShortenerError):
    """Raised when a client has exhausted its quota for the current window."""

    error_code = 'request:rate_rejected'

    def __init__(self, message: str = '', reset_in: timedelta = timedelta(0)):
        super().__init__(message)
        self.reset_in = reset_in


class CodeTakenError(ShortenerError):
    """Raised when a caller-supplied shortcode is already live."""

    error_code = 'request:code_taken'


class GenerationExhaustedError(ShortenerError):
    """Raised when random generation can't find a free shortcode."""

    error_code = 'operational:generation_exhausted'


class StoreUnavailableError(ShortenerError):
    """Raised when the backing store can't be reached in time.

    e.g. connection refused, socket timeouts, lock contention, etc.
    """

    error_code = 'infra:store_unavailable'
    retryable = True


class NotFoundError(ShortenerError):
    """Raised when a shortcode is unknown or expired."""

    error_code = 'request:not_found'


class ConfigurationError(ShortenerError):
    """Base exception for all configuration errors."""

    error_code = 'config:configuration_error'


class MissingEnvironmentVariableError(ConfigurationError):
    """Raised when a required environment variable is missing."""

    error_code = 'config:missing_environment_variable_error'


class BadConfigurationError(ConfigurationError):
    """Raised when the application is configured with invalid parameters."""

    error_code = 'config:bad_configuration_error'
