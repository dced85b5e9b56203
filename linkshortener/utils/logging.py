"""Structured JSON logging for the Lambda handlers

IMPORTANT: Call `initialize_logging()` in the lambda handler's `__init__.py` file
before any other logging is done.

Every record is written to stdout as one JSON line. Fields passed through
`extra={...}` are merged into the top level, so `extra={'event': 'RATE_REJECTED'}`
can be filtered on directly in CloudWatch Logs Insights:

{
    "timestamp": "2026-01-01T12:00:00.000Z",
    "level": "INFO",
    "logger": "linkshortener.service",
    "message": "Rate limit exceeded for client.",
    "event": "RATE_REJECTED",
    "reset_in": 1200
}

Records carrying exception info get an extra "exception" field holding the
formatted traceback.
"""

import os
import json
import logging
import logging.config
from datetime import datetime, UTC

from linkshortener.constants import ENV


# Attributes every LogRecord has; anything else came in through `extra`
_RECORD_ATTRS = frozenset(logging.LogRecord('', logging.NOTSET, '', 0, '', (), None).__dict__) | {'message', 'asctime'}


def _iso_timestamp(created: float) -> str:
    return datetime.fromtimestamp(created, tz=UTC).isoformat(timespec='milliseconds').replace('+00:00', 'Z')


class JsonFormatter(logging.Formatter):
    """Render a LogRecord and its `extra` fields as a single JSON object.

    Values that aren't JSON serializable (timedeltas, exceptions, ...) are
    rendered with str().
    """

    def format(self, record: logging.LogRecord) -> str:
        log = {
            'timestamp': _iso_timestamp(record.created),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }
        log.update((key, value) for key, value in record.__dict__.items() if key not in _RECORD_ATTRS)

        if record.exc_info:
            log['exception'] = self.formatException(record.exc_info)
        if record.stack_info:
            log['stack'] = self.formatStack(record.stack_info)
        return json.dumps(log, default=str)


def initialize_logging(level: str | None = None) -> None:
    """Route all logging to stdout as JSON lines

    Args:
        level (str | None):
            Root log level. Defaults to `LOG_LEVEL`, then INFO.
    """
    level = (level or os.getenv(ENV.App.LOG_LEVEL) or 'INFO').upper()

    # fmt: off
    logging.config.dictConfig({
        'version': 1,
        'disable_existing_loggers': False,
        'formatters': {'json': {'()': JsonFormatter}},
        'handlers': {
            'stdout': {'class': 'logging.StreamHandler', 'formatter': 'json', 'stream': 'ext://sys.stdout'},
        },
        'root': {'level': level, 'handlers': ['stdout']},
    })
    # fmt: on
