"""Helper utilities for the shortening service and its Lambda adapters.

Functions:
    build_short_url(base_url: str, shortcode: str) -> str
        Join the public base URL and a shortcode
    require_environment(*names: str) -> Callable
        Decorator: Ensure required environment variables are present
    guarantee_500_response(func: Callable) -> Callable
        Decorator: Turn unexpected handler exceptions into a logged HTTP 500

Example:
    >>> from linkshortener.utils.helpers import build_short_url
    >>> build_short_url('https://myshortener.com/', 'Kp7fWq3')
    'https://myshortener.com/Kp7fWq3'
"""

import os
import logging
import functools
from typing import Any
from collections.abc import Callable

from linkshortener.constants import UNKNOWN_INTERNAL_SERVER_ERROR
from linkshortener.exceptions import MissingEnvironmentVariableError
from linkshortener.lambdas.responses import response_500


logger = logging.getLogger(__name__)


def build_short_url(base_url: str, shortcode: str) -> str:
    return f'{base_url.rstrip("/")}/{shortcode}'


def require_environment(*names: str) -> Callable:
    """Decorator ensuring required environment variables are present.

    Args:
        *names (str):
            Names of required environment variables.

    Raises:
        MissingEnvironmentVariableError:
            If any required environment variable is missing or empty.

    Example:
        >>> @require_environment('APPCONFIG_APP_ID', 'APPCONFIG_ENV_ID')
        ... def my_function():
        ...     pass
        >>> my_function()
        MissingEnvironmentVariableError: Missing required environment variables: 'APPCONFIG_APP_ID', 'APPCONFIG_ENV_ID'
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            missing = [name for name in names if not os.environ.get(name)]
            if missing:
                missing_list = ', '.join(f"'{name}'" for name in missing)
                raise MissingEnvironmentVariableError(f'Missing required environment variables: {missing_list}')
            return func(*args, **kwargs)

        return wrapper

    return decorator


def guarantee_500_response(func: Callable[..., dict[str, Any]]) -> Callable[..., dict[str, Any]]:
    """Decorator: respond with HTTP 500 when a Lambda handler raises unexpectedly

    The exception is logged with its traceback before the response is built.
    """

    @functools.wraps(func)
    def wrapper(*args, **kwargs) -> dict[str, Any]:
        try:
            return func(*args, **kwargs)
        except Exception:
            logger.exception(
                'Unhandled exception in Lambda handler. Responding with 500.',
                extra={'event': UNKNOWN_INTERNAL_SERVER_ERROR},
            )
            return response_500()

    return wrapper
