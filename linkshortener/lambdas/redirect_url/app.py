import logging

from linkshortener.exceptions import BadRequestError, ConfigurationError, ShortenerError
from linkshortener.lambdas.redirect_url.constants import (
    CONFIG_LOAD_FAILED,
    MISSING_SHORTCODE,
    REDIRECT_FAILED,
    REDIRECT_SUCCESS,
)
from linkshortener.lambdas.responses import error_response, response_302, response_500
from linkshortener.service import ShorteningService
from linkshortener.store.redis import RedisKeyStore
from linkshortener.types import LambdaContext, LambdaEvent, LambdaResponse
from linkshortener.utils import app_prefix, guarantee_500_response, load_config


logger = logging.getLogger(__name__)


@guarantee_500_response
def lambda_handler(event: LambdaEvent, context: LambdaContext) -> LambdaResponse:
    """Handle incoming API Gateway requests to redirect short URLs

    This Lambda handler follows this procedure to redirect URLs:
    - Step 1: Load the application's config
    - Step 2: Extract shortcode from request path
    - Step 3: Resolve the shortcode to its original URL
    - Step 4: Redirect client to the original URL

    HTTP responses:
        302: Successful redirect
            headers:
                Location: original URL
        400: Missing shortcode in path parameters
        404: Unknown or expired shortcode
        500: Internal server error
        503: Store unavailable (Retry-After header)

    Example:
        >>> event = {'pathParameters': {'shortcode': 'Kp7fWq3'}}
        >>> response = lambda_handler(event, None)
        >>> response['statusCode']
        302
        >>> response['headers']['Location']
        'https://example.com/my-page'
    """
    # 1- Get application's config
    try:
        config = load_config()
    except (ConfigurationError, FileNotFoundError):
        logger.exception('Failed to load configuration. Responding with 500.', extra={'event': CONFIG_LOAD_FAILED})
        return response_500()

    # 2- Extract shortcode from request's path
    shortcode = (event.get('pathParameters') or {}).get('shortcode')
    if not shortcode:
        logger.info('Missing "shortcode" in path. Responding with 400.', extra={'event': MISSING_SHORTCODE})
        return error_response(BadRequestError("missing 'shortcode' in path"))

    # 3- Resolve the shortcode
    try:
        store = RedisKeyStore(**config.redis_kwargs(), prefix=app_prefix())
        original_url = ShorteningService(store, config).resolve(shortcode)
    except ShortenerError as error:
        logger.info(
            'Redirect failed.',
            extra={'event': REDIRECT_FAILED, 'shortcode': shortcode, 'errorCode': error.error_code},
        )
        return error_response(error)

    # 4- Redirect client to the original URL
    logger.info('Redirecting client to original URL. Responding with 302.', extra={'shortcode': shortcode, 'event': REDIRECT_SUCCESS})
    return response_302(location=original_url)
