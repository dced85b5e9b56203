from linkshortener.utils.config import ShortenerConfig, app_env, app_name, app_prefix, load_config
from linkshortener.utils.helpers import build_short_url, guarantee_500_response, require_environment
from linkshortener.utils.logging import initialize_logging


__all__ = [
    'ShortenerConfig',
    'app_env',
    'app_name',
    'app_prefix',
    'load_config',
    'build_short_url',
    'guarantee_500_response',
    'require_environment',
    'initialize_logging',
]
