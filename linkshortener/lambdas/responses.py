"""API Gateway (Lambda proxy) response builders shared by the handlers.

`error_response()` is the single place where error kinds from
`linkshortener.exceptions` are mapped to HTTP status codes.
"""

import json
import math
from typing import Any

from linkshortener.constants import UNKNOWN_INTERNAL_SERVER_ERROR
from linkshortener.exceptions import (
    BadRequestError,
    CodeTakenError,
    DomainBlockedError,
    GenerationExhaustedError,
    InvalidURLError,
    NotFoundError,
    RateRejectedError,
    ShortenerError,
    StoreUnavailableError,
)
from linkshortener.types import LambdaResponse


# fmt: off
STATUS_CODES: dict[type[ShortenerError], int] = {
    BadRequestError: 400,
    InvalidURLError: 400,
    DomainBlockedError: 403,
    NotFoundError: 404,
    CodeTakenError: 409,
    RateRejectedError: 429,
    GenerationExhaustedError: 503,
    StoreUnavailableError: 503,
}
# fmt: on

# Seconds a client should wait before retrying after StoreUnavailableError
STORE_RETRY_AFTER = 1


def _response(status_code: int, body: dict[str, Any], headers: dict[str, str] | None = None) -> LambdaResponse:
    return {
        'statusCode': status_code,
        'headers': {'Content-Type': 'application/json', **(headers or {})},
        'body': json.dumps(body),
    }


def response_200(body: dict[str, Any], headers: dict[str, str] | None = None) -> LambdaResponse:
    return _response(200, body, headers)


def response_302(*, location: str) -> LambdaResponse:
    return {
        'statusCode': 302,
        'headers': {'Location': location},
        'body': json.dumps({}),  # no body needed for redirects
    }


def response_500(message: str | None = None) -> LambdaResponse:
    """Body: {"message": "Internal Server Error[ (<message>)]", "errorCode": UNKNOWN_INTERNAL_SERVER_ERROR}"""
    base = 'Internal Server Error'
    body = {'message': base if not message else f'{base} ({message})', 'errorCode': UNKNOWN_INTERNAL_SERVER_ERROR}
    return _response(500, body)


def error_response(error: ShortenerError) -> LambdaResponse:
    """Map a core error to its HTTP response

    Body: {"message": <str(error)>, "errorCode": <error.error_code>}
    429 and retryable 503 responses carry a Retry-After header (seconds).
    """
    status_code = next((code for cls, code in STATUS_CODES.items() if isinstance(error, cls)), 500)

    headers = {}
    if isinstance(error, RateRejectedError):
        headers['Retry-After'] = str(max(1, math.ceil(error.reset_in.total_seconds())))
    elif error.retryable:
        headers['Retry-After'] = str(STORE_RETRY_AFTER)

    return _response(status_code, {'message': str(error), 'errorCode': error.error_code}, headers)
