from linkshortener.models import RateDecision, ShortenRequest, ShortenResponse
from linkshortener.generator import TokenGenerator
from linkshortener.rate_limiter import RateLimiter
from linkshortener.service import ShorteningService


__all__ = [
    'RateDecision',
    'ShortenRequest',
    'ShortenResponse',
    'TokenGenerator',
    'RateLimiter',
    'ShorteningService',
]
