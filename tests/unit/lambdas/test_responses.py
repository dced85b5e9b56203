import json
from datetime import timedelta

import pytest

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
from linkshortener.lambdas.responses import error_response, response_200, response_302, response_500


@pytest.mark.parametrize(
    'error, status_code',
    [
        (BadRequestError('bad'), 400),
        (InvalidURLError('bad'), 400),
        (DomainBlockedError('blocked'), 403),
        (NotFoundError('missing'), 404),
        (CodeTakenError('taken'), 409),
        (RateRejectedError('slow down', reset_in=timedelta(seconds=5)), 429),
        (GenerationExhaustedError('congested'), 503),
        (StoreUnavailableError('down'), 503),
        (ShortenerError('unknown'), 500),
    ],
)
def test_error_response_status_codes(error, status_code):
    response = error_response(error)
    body = json.loads(response['body'])

    assert response['statusCode'] == status_code
    assert body == {'message': str(error), 'errorCode': error.error_code}


@pytest.mark.parametrize(
    'reset_in, retry_after',
    [
        (timedelta(seconds=90), '90'),
        (timedelta(seconds=89, milliseconds=100), '90'),
        (timedelta(0), '1'),
    ],
)
def test_rate_rejected_retry_after(reset_in, retry_after):
    response = error_response(RateRejectedError('slow down', reset_in=reset_in))
    assert response['headers']['Retry-After'] == retry_after


def test_retry_after_only_when_retryable():
    assert error_response(StoreUnavailableError('down'))['headers']['Retry-After'] == '1'
    assert 'Retry-After' not in error_response(GenerationExhaustedError('congested'))['headers']
    assert 'Retry-After' not in error_response(CodeTakenError('taken'))['headers']


def test_success_responses():
    ok = response_200({'short_code': 'docs'}, headers={'X-RateLimit-Remaining': '9'})
    assert ok['statusCode'] == 200
    assert ok['headers'] == {'Content-Type': 'application/json', 'X-RateLimit-Remaining': '9'}
    assert json.loads(ok['body']) == {'short_code': 'docs'}

    redirect = response_302(location='https://example.com')
    assert redirect['statusCode'] == 302
    assert redirect['headers']['Location'] == 'https://example.com'


def test_response_500():
    assert json.loads(response_500()['body']) == {'message': 'Internal Server Error', 'errorCode': 'UNKNOWN_INTERNAL_SERVER_ERROR'}
    assert json.loads(response_500('config')['body']) == {
        'message': 'Internal Server Error (config)',
        'errorCode': 'UNKNOWN_INTERNAL_SERVER_ERROR',
    }
