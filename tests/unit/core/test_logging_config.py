import json
import logging
import sys

import pytest

from entity_engine.core.logging_config import (
    ColoredFormatter,
    LogContext,
    StructuredFormatter,
    get_logger,
    setup_logging,
)


def _record(message: str = "hello", **attributes) -> logging.LogRecord:
    record = logging.LogRecord(
        name="entity_engine.test",
        level=logging.WARNING,
        pathname=__file__,
        lineno=10,
        msg=message,
        args=(),
        exc_info=None,
    )
    for key, value in attributes.items():
        setattr(record, key, value)
    return record


@pytest.mark.unit
class TestStructuredFormatter:

    def test_format_outputs_json(self):
        """Test records are rendered as one JSON object."""
        output = json.loads(StructuredFormatter().format(_record("loaded")))

        assert output["message"] == "loaded"
        assert output["level"] == "WARNING"
        assert output["logger"] == "entity_engine.test"
        assert "timestamp" in output

    def test_format_includes_context_and_extra_fields(self):
        """Test LogContext attributes and *_ctx fields end up in the JSON."""
        record = _record(operation="from_json_string", model_name="Product", extra_fields={"index": 3})

        output = json.loads(StructuredFormatter().format(record))

        assert output["operation"] == "from_json_string"
        assert output["model_name"] == "Product"
        assert output["index"] == 3

    def test_format_includes_exception(self):
        """Test exception details are serialized."""
        record = _record()
        try:
            raise ValueError("bad model")
        except ValueError:
            record.exc_info = sys.exc_info()

        output = json.loads(StructuredFormatter().format(record))

        assert output["exception"]["type"] == "ValueError"
        assert output["exception"]["message"] == "bad model"


@pytest.mark.unit
class TestColoredFormatter:

    def test_format_appends_extra_fields(self):
        """Test *_ctx fields are appended as key=value pairs."""
        formatter = ColoredFormatter(fmt="%(message)s")

        output = formatter.format(_record("skipped", extra_fields={"index": 2}))

        assert "skipped | index=2" in output
        assert output.startswith(ColoredFormatter.COLORS["WARNING"])


@pytest.mark.unit
class TestLoggingHelpers:

    def test_get_logger_context_methods(self, caplog):
        """Test *_ctx helpers attach their keyword arguments as extra_fields."""
        logger = get_logger("entity_engine.tests.ctx")

        with caplog.at_level(logging.DEBUG, logger="entity_engine.tests.ctx"):
            logger.warning_ctx("Failed to load view", index=1)
            logger.info_ctx("Metadata updated", model_ids=["Product"])

        assert caplog.records[0].levelno == logging.WARNING
        assert caplog.records[0].extra_fields == {"index": 1}
        assert caplog.records[1].extra_fields == {"model_ids": ["Product"]}

    def test_log_context_stamps_records_inside_block(self, caplog):
        """Test LogContext adds attributes only while the block is active."""
        logger = get_logger("entity_engine.tests.context")

        with caplog.at_level(logging.INFO, logger="entity_engine.tests.context"):
            with LogContext(operation="import", view_name="ProductGrid"):
                logger.info("inside")
            logger.info("outside")

        inside, outside = caplog.records
        assert inside.operation == "import"
        assert inside.view_name == "ProductGrid"
        assert not hasattr(outside, "operation")

    def test_setup_logging_installs_formatter(self):
        """Test setup_logging replaces root handlers with the chosen formatter."""
        root = logging.getLogger()
        previous_handlers = root.handlers[:]
        previous_level = root.level
        try:
            setup_logging("debug", json_logs=True)
            assert root.level == logging.DEBUG
            assert len(root.handlers) == 1
            assert isinstance(root.handlers[0].formatter, StructuredFormatter)

            setup_logging("info", json_logs=False)
            assert isinstance(root.handlers[0].formatter, ColoredFormatter)
        finally:
            for handler in root.handlers[:]:
                root.removeHandler(handler)
            for handler in previous_handlers:
                root.addHandler(handler)
            root.setLevel(previous_level)
