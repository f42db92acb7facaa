import io
import json
import logging

import pytest
import structlog

from cryptoscope.logging_config import setup_logging
from cryptoscope.middleware.logging_middleware import tool_name_from_path


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    structlog.contextvars.clear_contextvars()


def test_stdlib_records_render_as_json(restore_root_logger):
    stream = io.StringIO()
    setup_logging("INFO", log_format="json", stream=stream)
    structlog.contextvars.bind_contextvars(request_id="abc123")

    logging.getLogger("cryptoscope.providers.base").warning("coingecko rate limited")

    record = json.loads(stream.getvalue().strip().splitlines()[-1])
    assert record["event"] == "coingecko rate limited"
    assert record["level"] == "warning"
    assert record["logger"] == "cryptoscope.providers.base"
    assert record["request_id"] == "abc123"


def test_noisy_loggers_are_quieted(restore_root_logger):
    setup_logging("DEBUG", log_format="console", stream=io.StringIO())

    assert logging.getLogger().level == logging.DEBUG
    assert logging.getLogger("httpx").level == logging.WARNING


def test_tool_name_from_path():
    assert tool_name_from_path("/tools/get_crypto_price") == "get_crypto_price"
    assert tool_name_from_path("/tools/") is None
    assert tool_name_from_path("/healthz") is None
