import json
import logging
import sys

import pytest

from linkshortener.utils.logging import JsonFormatter, initialize_logging


def make_record(**extra):
    record = logging.LogRecord(
        name='linkshortener.service',
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg='Shortened URL %s.',
        args=('Kp7fWq3',),
        exc_info=None,
    )
    record.created = 1_767_268_800.0  # 2026-01-01T12:00:00Z
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter():
    log = json.loads(JsonFormatter().format(make_record(event='SHORTEN_SUCCESS', shortcode='Kp7fWq3')))

    assert log == {
        'timestamp': '2026-01-01T12:00:00.000Z',
        'level': 'INFO',
        'logger': 'linkshortener.service',
        'message': 'Shortened URL Kp7fWq3.',
        'event': 'SHORTEN_SUCCESS',
        'shortcode': 'Kp7fWq3',
    }


def test_json_formatter_with_exception():
    try:
        raise RuntimeError('boom')
    except RuntimeError:
        record = make_record(exc_info=sys.exc_info())

    log = json.loads(JsonFormatter().format(record))

    assert 'RuntimeError: boom' in log['exception']


def test_json_formatter_with_unserializable_extra():
    log = json.loads(JsonFormatter().format(make_record(client=object())))
    assert log['client'].startswith('<object object')


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


def test_initialize_logging(monkeypatch, restore_root_logger):
    monkeypatch.setenv('LOG_LEVEL', 'debug')

    initialize_logging()

    assert restore_root_logger.level == logging.DEBUG
    assert any(isinstance(handler.formatter, JsonFormatter) for handler in restore_root_logger.handlers)
