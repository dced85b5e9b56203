import base64
import binascii
import json
import logging
from datetime import timedelta

from linkshortener.constants import TTL
from linkshortener.exceptions import BadRequestError, ConfigurationError, ShortenerError
from linkshortener.lambdas.responses import error_response, response_200, response_500
from linkshortener.lambdas.shorten_url.constants import (
    BAD_REQUEST_BODY,
    CONFIG_LOAD_FAILED,
    MISSING_CLIENT_ID,
    SHORTEN_REJECTED,
)
from linkshortener.models import ShortenRequest
from linkshortener.service import ShorteningService
from linkshortener.store.redis import RedisKeyStore
from linkshortener.types import LambdaContext, LambdaEvent, LambdaResponse
from linkshortener.utils import app_prefix, guarantee_500_response, load_config
from linkshortener.validators import is_valid_custom_code


logger = logging.getLogger(__name__)


def client_id_from_event(event: LambdaEvent) -> str | None:
    """Return the caller's IP address from an API Gateway event

    Looks at the REST API (v1) and HTTP API (v2) source IP fields first,
    then at the first X-Forwarded-For entry.
    """
    request_context = event.get('requestContext') or {}
    source_ip = (request_context.get('identity') or {}).get('sourceIp') or (request_context.get('http') or {}).get('sourceIp')
    if source_ip:
        return source_ip

    headers = {k.lower(): v for k, v in (event.get('headers') or {}).items()}
    forwarded_for = headers.get('x-forwarded-for', '')
    return forwarded_for.split(',')[0].strip() or None


def parse_shorten_request(event: LambdaEvent) -> ShortenRequest:
    """Parse the JSON body {"url", "short", "expiry"} into a ShortenRequest

    `expiry` is in seconds; omitted or 0 means the configured default.

    Raises:
        BadRequestError:
            If the body is not a JSON object, `url` is missing, `short` is not
            a valid shortcode, or `expiry` is not an integer in
            [0, TTL.MAX_EXPIRY].
    """
    body = event.get('body') or '{}'
    try:
        if event.get('isBase64Encoded'):
            body = base64.b64decode(body).decode('utf-8')
        payload = json.loads(body)
    except (binascii.Error, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise BadRequestError('invalid JSON body') from e
    if not isinstance(payload, dict):
        raise BadRequestError('JSON body must be an object')

    url = payload.get('url')
    if not isinstance(url, str) or not url.strip():
        raise BadRequestError("missing 'url' in JSON body")

    # Only null or "" count as "no custom shortcode"
    short = payload.get('short')
    if short == '':
        short = None
    if short is not None and not (isinstance(short, str) and is_valid_custom_code(short)):
        raise BadRequestError("'short' must be 1-32 characters of letters, digits, '-' or '_'")

    expiry = payload.get('expiry')
    valid_expiry = isinstance(expiry, int) and not isinstance(expiry, bool) and 0 <= expiry <= TTL.MAX_EXPIRY
    if expiry is not None and not valid_expiry:
        raise BadRequestError(f"'expiry' must be an integer number of seconds between 0 and {TTL.MAX_EXPIRY}")

    return ShortenRequest(
        original_url=url.strip(),
        custom_short_code=short,
        expiry=None if expiry is None else timedelta(seconds=expiry),
    )


@guarantee_500_response
def lambda_handler(event: LambdaEvent, context: LambdaContext) -> LambdaResponse:
    """Handle incoming API Gateway requests to shorten URLs

    This Lambda handler follows this procedure to shorten URLs:
    - Step 1: Load the application's config
    - Step 2: Identify the client (source IP) for rate limiting
    - Step 3: Parse the request body
    - Step 4: Shorten the URL (rate check, validation, shortcode issuance, storage)
    - Step 5: Respond with the short URL and remaining quota

    HTTP responses:
        200: Successful URL shortening
            body: ShortenResponse.to_dict()
            headers: X-RateLimit-Remaining, X-RateLimit-Reset
        400: Bad client request (malformed body, invalid URL, missing client identity)
        403: URL targets the shortener's own domain
        409: Custom shortcode already in use
        429: Rate limit exceeded (Retry-After header)
        500: Internal server error
        503: Store unavailable or shortcode space congested (Retry-After header when retryable)

    Example:
        >>> event = {
        ...     'body': '{"url": "example.com/page"}',
        ...     'requestContext': {'identity': {'sourceIp': '203.0.113.7'}},
        ... }
        >>> response = lambda_handler(event, None)
        >>> response['statusCode']
        200
        >>> json.loads(response['body'])['original_url']
        'https://example.com/page'
    """
    # 1- Get application's config
    try:
        config = load_config()
    except (ConfigurationError, FileNotFoundError):
        logger.exception('Failed to load configuration. Responding with 500.', extra={'event': CONFIG_LOAD_FAILED})
        return response_500()

    # 2- Identify the client
    client_id = client_id_from_event(event)
    if client_id is None:
        logger.info('Missing client source IP. Responding with 400.', extra={'event': MISSING_CLIENT_ID})
        return error_response(BadRequestError('missing client source IP'))

    # 3- Parse request body
    try:
        request = parse_shorten_request(event)
    except BadRequestError as error:
        logger.info('Malformed request body. Responding with 400.', extra={'event': BAD_REQUEST_BODY, 'reason': str(error)})
        return error_response(error)

    # 4- Shorten the URL
    try:
        store = RedisKeyStore(**config.redis_kwargs(), prefix=app_prefix())
        service = ShorteningService(store, config)
        response = service.shorten(request, client_id)
    except ShortenerError as error:
        logger.info(
            'Shortening request rejected.',
            extra={'event': SHORTEN_REJECTED, 'error': error.__class__.__name__, 'errorCode': error.error_code},
        )
        return error_response(error)

    # 5- Respond with the short URL
    return response_200(
        response.to_dict(),
        headers={
            'X-RateLimit-Remaining': str(response.rate_remaining),
            'X-RateLimit-Reset': str(int(response.rate_reset.total_seconds())),
        },
    )
