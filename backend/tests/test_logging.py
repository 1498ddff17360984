"""
Tests for logging configuration.
"""
import json
import logging
import pytest
from insight_engine.core.logging import (
    JSONFormatter,
    SessionIdFilter,
    TextFormatter,
    configure_logging,
    session_logger,
)


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord("insight_engine.test", logging.INFO, __file__, 10, "hello %s", ("world",), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.mark.unit
def test_json_formatter_includes_session_and_extras():
    """Test json formatter includes session and extras."""
    output = json.loads(JSONFormatter().format(_record(session_id="abc123", metric="run_full_analysis")))

    assert output["message"] == "hello world"
    assert output["level"] == "INFO"
    assert output["session_id"] == "abc123"
    assert output["metric"] == "run_full_analysis"


@pytest.mark.unit
def test_text_formatter_defaults_session_id():
    """Test text formatter defaults session id."""
    line = TextFormatter().format(_record())

    assert "[system]" in line
    assert line.endswith("hello world")


@pytest.mark.unit
def test_session_id_filter():
    """Test session id filter."""
    record = _record()
    assert SessionIdFilter().filter(record) is True
    assert record.session_id == "system"


@pytest.mark.unit
def test_session_logger_binds_id(caplog):
    """Test session logger binds id."""
    log = session_logger(logging.getLogger("insight_engine.test"), "sess-1")

    with caplog.at_level(logging.INFO, logger="insight_engine.test"):
        log.info("analysis started")

    assert caplog.records[-1].session_id == "sess-1"


@pytest.mark.unit
def test_configure_logging_json():
    """Test configure logging json."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    try:
        configure_logging(log_level="debug", log_format="json")

        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, JSONFormatter)
    finally:
        for handler in root.handlers[:]:
            root.removeHandler(handler)
        for handler in original_handlers:
            root.addHandler(handler)
        root.setLevel(original_level)
