"""Tests for the key=value log formatter and logger namespace."""

import io
import logging

import pytest

from intake.domain.model.order import OrderStatus
from intake.logging_config import (
    KeyValueFormatter,
    configure_logging,
    get_logger,
    reset_logging,
)


@pytest.fixture
def log_stream():
    stream = io.StringIO()
    reset_logging()
    configure_logging(level=logging.DEBUG, stream=stream)
    yield stream
    reset_logging()


class TestLogging:

    def test_names_are_namespaced(self):
        assert get_logger("custom").name == "intake.custom"
        assert get_logger("intake.domain.x").name == "intake.domain.x"

    def test_extra_fields_rendered_as_key_value(self, log_stream):
        get_logger("test").info(
            "Order status changed",
            extra={"order_number": "CV202503030001", "to_status": OrderStatus.CONFIRMED},
        )
        line = log_stream.getvalue().strip()
        assert "INFO intake.test: Order status changed" in line
        assert "order_number=CV202503030001" in line
        assert "to_status=confirmed" in line

    def test_values_with_spaces_are_quoted(self, log_stream):
        get_logger("test").warning("x", extra={"error": "gate locked"})
        assert 'error="gate locked"' in log_stream.getvalue()

    def test_configure_is_idempotent(self, log_stream):
        logger = logging.getLogger("intake")
        before = list(logger.handlers)

        configure_logging(level=logging.DEBUG, stream=log_stream)

        assert logger.handlers == before
        ours = [h for h in logger.handlers if isinstance(h.formatter, KeyValueFormatter)]
        assert len(ours) == 1
