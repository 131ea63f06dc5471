"""Tests for log masking."""

import logging

from common.logging_config import SensitiveDataFilter, setup_logging


def make_record(msg, args=None):
    return logging.LogRecord('proxy', logging.INFO, __file__, 1, msg, args, None)


def test_masks_client_secret_and_tokens():
    record = make_record("form client_secret=abc123&scope=x access_token: 'eyJhbGci'")
    SensitiveDataFilter().filter(record)

    assert 'abc123' not in record.msg
    assert 'eyJhbGci' not in record.msg
    assert 'scope=x' in record.msg


def test_masks_bearer_header():
    record = make_record("headers: Bearer eyJ0eXAi.payload.sig")
    SensitiveDataFilter().filter(record)

    assert record.msg == "headers: Bearer ***MASKED***"


def test_masks_tempauth_in_arguments():
    """Pre-authenticated URLs passed as arguments are masked too."""
    record = make_record("Redirect to %s", ('https://dl.example/f1?tempauth=v1.secret&ApiVersion=2.0',))
    SensitiveDataFilter().filter(record)

    assert record.getMessage() == 'Redirect to https://dl.example/f1?tempauth=***MASKED***&ApiVersion=2.0'


def test_setup_logging_configures_shared_namespace():
    logger = setup_logging('proxy', log_level='DEBUG')

    assert logger.name == 'proxy'
    assert logger.level == logging.DEBUG
    assert logging.getLogger('common').level == logging.DEBUG
    assert logger.propagate is False


def test_masks_password():
    record = make_record('{"password": "hunter2"}')
    SensitiveDataFilter().filter(record)

    assert 'hunter2' not in record.msg
