import string
from enum import StrEnum


class TTL:
    """TTL durations in seconds."""

    # Default short URL lifetime when the request omits an expiry (24 hours)
    DEFAULT_EXPIRY = 86_400  # 60 * 60 * 24
    # Rate limit window per client (30 minutes)
    RATE_LIMIT_WINDOW = 1_800  # 60 * 30
    # Longest lifetime a request may ask for (1 year)
    MAX_EXPIRY = 31_536_000  # 60 * 60 * 24 * 365


class DefaultQuota:
    """Default quota values."""

    SHORTEN_REQUESTS = 10  # Shortening requests per client per rate limit window


class Shortcode:
    """Random shortcode generation defaults."""

    # Unambiguous alphabet: no 0/O/o, 1/I/l
    ALPHABET = ''.join(c for c in string.digits + string.ascii_uppercase + string.ascii_lowercase if c not in '01IOlo')
    LENGTH = 7  # 56 ** 7 ~ 2^40.6
    MAX_ATTEMPTS = 5
    MIN_ENTROPY_BITS = 36
    CUSTOM_PATTERN = r'^[A-Za-z0-9_-]{1,32}$'


class Store:
    """Backing store defaults."""

    TIMEOUT_SECONDS = 0.25  # bound on every call into the backing medium


class ENV:
    """Environment variable names."""

    class App(StrEnum):
        APP_ENV = 'APP_ENV'
        APP_NAME = 'APP_NAME'
        LOG_LEVEL = 'LOG_LEVEL'
        CONFIG_PATH = 'CONFIG_PATH'
        DOMAIN = 'SHORTENER_DOMAIN'

    class AppConfig(StrEnum):
        APP_ID = 'APPCONFIG_APP_ID'
        ENV_ID = 'APPCONFIG_ENV_ID'
        PROFILE_ID = 'APPCONFIG_PROFILE_ID'


# Section of the AppConfig / YAML document holding the shortener settings
CONFIG_SECTION = 'shortener'

# Error codes
UNKNOWN_INTERNAL_SERVER_ERROR = 'UNKNOWN_INTERNAL_SERVER_ERROR'
