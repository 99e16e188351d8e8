"""Tests for structured logging."""
import structlog

from counsel_booking.logging_config import (
    generate_request_id,
    get_logger,
    request_context,
    setup_structured_logging,
)


class TestStructuredLogging:
    """Test structured logging with request IDs."""

    def test_setup_configures_structlog(self):
        setup_structured_logging(log_level="INFO")
        logger = get_logger(__name__)

        assert hasattr(logger, "info")
        assert hasattr(logger, "warning")
        assert hasattr(logger, "error")

    def test_logger_methods_work(self):
        setup_structured_logging(log_level="DEBUG", json_output=False)
        logger = get_logger(__name__)

        logger.info("schedules_loaded", count=3)
        logger.warning("skipped_malformed_record", kind="schedule", id=9)

    def test_generate_request_id_format(self):
        request_id = generate_request_id()

        assert request_id.startswith("req-")
        assert len(request_id) == 16
        assert request_id != generate_request_id()

    def test_request_context_binds_id(self):
        with request_context("req-abc123"):
            assert structlog.contextvars.get_contextvars()["request_id"] == "req-abc123"

        assert "request_id" not in structlog.contextvars.get_contextvars()
