"""Utility functions for application configuration management.

Configuration is loaded once per process (or Lambda invocation) into a frozen
ShortenerConfig. The settings document can come from:

    1. A local YAML file, given explicitly or via `CONFIG_PATH`;
    2. AWS AppConfig, when `APPCONFIG_APP_ID`, `APPCONFIG_ENV_ID` and
       `APPCONFIG_PROFILE_ID` are set;
    3. Built-in defaults otherwise.

`SHORTENER_DOMAIN`, when set, overrides the domain in every case.

The settings document follows this structure (durations in seconds):

    domain: myshortener.com
    default_expiry: 86400
    rate_limit:
      quota: 10
      window: 1800
    shortcode:
      length: 7
      max_attempts: 5
    store:
      timeout: 0.25
      redis:
        host: redis.internal
        port: 6379
        db: 0

The AppConfig document wraps it as `{"configs": {"shortener": {...}}}`.

Functions:
    app_env() -> str
        Return the current application environment (`APP_ENV`), 'local' by default.

    app_name() -> str | None
        Return the application name (`APP_NAME`), or None if not set.

    app_prefix() -> str | None
        Return the store key prefix, or None if `APP_NAME` is not set.

    load_config(path: str | Path | None = None) -> ShortenerConfig
        Load and validate the shortener configuration.

Example:
    >>> from linkshortener.utils.config import load_config
    >>> config = load_config('config/local.yml')
    >>> config.base_url
    'http://localhost:3000'
"""

import os
import json
import logging
from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path
from typing import Any

import boto3
import yaml
from botocore.exceptions import BotoCoreError, ClientError

from linkshortener.constants import CONFIG_SECTION, DefaultQuota, ENV, Shortcode, Store, TTL
from linkshortener.exceptions import BadConfigurationError, ConfigurationError
from linkshortener.utils.helpers import require_environment


logger = logging.getLogger(__name__)


def app_env() -> str:
    return os.environ.get(ENV.App.APP_ENV, 'local').lower()


def app_name() -> str | None:
    return os.environ.get(ENV.App.APP_NAME)


def app_prefix() -> str | None:
    """Return application prefix for store keys

    Returns:
        str: app prefix as <app name>:<app env>.
             None if APP_NAME is not set.

    Example:
        >>> os.environ['APP_NAME'] = 'linkshortener'
        >>> os.environ['APP_ENV'] = 'local'
        >>> app_prefix()
        'linkshortener:local'
    """
    return None if app_name() is None else f'{app_name()}:{app_env()}'


def _seconds(value: Any, name: str) -> timedelta:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise BadConfigurationError(f'{name} must be a positive number of seconds (given value: {value!r}).')
    return timedelta(seconds=value)


def _positive_int(value: Any, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise BadConfigurationError(f'{name} must be a positive integer (given value: {value!r}).')
    return value


def _section(document: dict[str, Any], name: str) -> dict[str, Any]:
    section = document.get(name) or {}
    if not isinstance(section, dict):
        raise BadConfigurationError(f'{name!r} must be a mapping (given type: {type(section).__name__}).')
    return section


@dataclass(frozen=True)
class ShortenerConfig:
    """Policy constants and connection settings of the shortening service.

    Attributes:
        domain (str):
            The shortener's own public domain, e.g. 'myshortener.com'.
            Used to build short URLs and to block self-referential links.
        default_expiry (timedelta):
            Lifetime of short URLs whose request omits an expiry.
        rate_limit_quota (int):
            Shortening requests allowed per client per window.
        rate_limit_window (timedelta):
            Length of the rate limit window.
        shortcode_length (int), shortcode_alphabet (str), shortcode_max_attempts (int):
            Random shortcode generation policy.
        store_timeout (float):
            Seconds after which a store call fails with StoreUnavailableError.
        redis (dict[str, Any]):
            Redis connection parameters (host, port, db, username, password).
    """

    domain: str = 'localhost:3000'
    default_expiry: timedelta = timedelta(seconds=TTL.DEFAULT_EXPIRY)
    rate_limit_quota: int = DefaultQuota.SHORTEN_REQUESTS
    rate_limit_window: timedelta = timedelta(seconds=TTL.RATE_LIMIT_WINDOW)
    shortcode_length: int = Shortcode.LENGTH
    shortcode_alphabet: str = Shortcode.ALPHABET
    shortcode_max_attempts: int = Shortcode.MAX_ATTEMPTS
    store_timeout: float = Store.TIMEOUT_SECONDS
    redis: dict[str, Any] = field(default_factory=dict)

    @property
    def base_url(self) -> str:
        host = self.domain.split(':', 1)[0]
        scheme = 'http' if host in {'localhost', '127.0.0.1'} else 'https'
        return f'{scheme}://{self.domain}'

    def redis_kwargs(self) -> dict[str, Any]:
        """Return keyword arguments for RedisKeyStore (redis_host, redis_port, ...)"""
        kwargs = {f'redis_{k}': v for k, v in self.redis.items()}
        kwargs['redis_timeout'] = self.store_timeout
        return kwargs

    @classmethod
    def from_dict(cls, document: dict[str, Any] | None) -> 'ShortenerConfig':
        """Build a config from a settings document, filling in defaults

        Raises:
            BadConfigurationError:
                If a value has the wrong type or is out of range.
        """
        document = document or {}
        if not isinstance(document, dict):
            raise BadConfigurationError(f'Configuration must be a mapping (given type: {type(document).__name__}).')

        defaults = cls()
        rate_limit = _section(document, 'rate_limit')
        shortcode = _section(document, 'shortcode')
        store = _section(document, 'store')
        redis_settings = _section(store, 'redis')

        domain = document.get('domain', defaults.domain)
        if not isinstance(domain, str) or not domain.strip():
            raise BadConfigurationError(f'domain must be a non-empty string (given value: {domain!r}).')

        alphabet = shortcode.get('alphabet', defaults.shortcode_alphabet)
        if not isinstance(alphabet, str) or len(alphabet) < 2:
            raise BadConfigurationError(f'shortcode.alphabet must hold at least 2 symbols (given value: {alphabet!r}).')

        timeout = store.get('timeout', defaults.store_timeout)
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
            raise BadConfigurationError(f'store.timeout must be a positive number (given value: {timeout!r}).')

        # fmt: off
        return cls(
            domain=domain.strip().lower(),
            default_expiry=_seconds(document.get('default_expiry', TTL.DEFAULT_EXPIRY), 'default_expiry'),
            rate_limit_quota=_positive_int(rate_limit.get('quota', defaults.rate_limit_quota), 'rate_limit.quota'),
            rate_limit_window=_seconds(rate_limit.get('window', TTL.RATE_LIMIT_WINDOW), 'rate_limit.window'),
            shortcode_length=_positive_int(shortcode.get('length', defaults.shortcode_length), 'shortcode.length'),
            shortcode_alphabet=alphabet,
            shortcode_max_attempts=_positive_int(shortcode.get('max_attempts', defaults.shortcode_max_attempts), 'shortcode.max_attempts'),
            store_timeout=float(timeout),
            redis=dict(redis_settings),
        )
        # fmt: on


def _load_yaml_config(path: Path) -> dict[str, Any]:
    logger.debug('Loading configuration from YAML file.', extra={'path': str(path)})
    with path.open(encoding='utf-8') as f:
        try:
            document = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise BadConfigurationError(f'Invalid YAML in configuration file {path}.') from e
    return document or {}


@require_environment(ENV.AppConfig.APP_ID, ENV.AppConfig.ENV_ID, ENV.AppConfig.PROFILE_ID)
def _load_appconfig() -> dict[str, Any]:
    """Fetch the shortener section of the latest AWS AppConfig document"""
    logger.debug('Trying to load configuration from AWS AppConfig.')

    appconfig = boto3.client('appconfigdata')

    try:
        # Start an AppConfig data session
        session_token = appconfig.start_configuration_session(
            ApplicationIdentifier=os.environ[ENV.AppConfig.APP_ID],
            EnvironmentIdentifier=os.environ[ENV.AppConfig.ENV_ID],
            ConfigurationProfileIdentifier=os.environ[ENV.AppConfig.PROFILE_ID],
        )['InitialConfigurationToken']

        # Fetch the configuration
        response = appconfig.get_latest_configuration(ConfigurationToken=session_token)
        content = response['Configuration'].read()
    except (BotoCoreError, ClientError) as e:
        raise ConfigurationError("Can't fetch configuration from AWS AppConfig.") from e

    try:
        config = json.loads(content.decode('utf-8'))
        section = config['configs'][CONFIG_SECTION]
    except (json.JSONDecodeError, KeyError, TypeError) as e:
        raise BadConfigurationError(f"AppConfig document has no 'configs.{CONFIG_SECTION}' section.") from e

    logger.debug('Loaded configuration from AWS AppConfig.', extra={'build': config.get('build')})
    return section


def load_config(path: str | Path | None = None) -> ShortenerConfig:
    """Load the shortener configuration

    Args:
        path (str | Path | None):
            YAML settings file. Defaults to `CONFIG_PATH` when set.

    Returns:
        ShortenerConfig: validated configuration.

    Raises:
        FileNotFoundError:
            If the YAML file doesn't exist.
        BadConfigurationError:
            If the document is malformed or holds invalid values.
        ConfigurationError:
            If AWS AppConfig can't be reached.
    """
    path = path or os.environ.get(ENV.App.CONFIG_PATH)
    if path:
        document = _load_yaml_config(Path(path))
    elif all(os.environ.get(name) for name in ENV.AppConfig):
        document = _load_appconfig()
    else:
        logger.debug('No configuration source set. Using defaults.')
        document = {}

    domain = os.environ.get(ENV.App.DOMAIN)
    if domain and isinstance(document, dict):
        document = {**document, 'domain': domain}

    return ShortenerConfig.from_dict(document)
