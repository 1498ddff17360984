"""
Structured logging configuration.

Provides JSON logging for log shippers and a readable text format for
local runs. Every record carries the ``session_id`` of the analysis
session that produced it ("system" outside of a session).
"""
import sys
import logging
import json
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from insight_engine.core.config import get_settings

_RESERVED_ATTRS = frozenset((
    'name', 'msg', 'args', 'created', 'filename', 'funcName', 'levelname',
    'levelno', 'lineno', 'module', 'msecs', 'pathname', 'process',
    'processName', 'relativeCreated', 'stack_info', 'thread', 'threadName',
    'exc_info', 'exc_text', 'message', 'session_id', 'taskName',
))


class SessionIdFilter(logging.Filter):
    """Ensure session_id is present in log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "session_id"):
            record.session_id = "system"
        return True


class JSONFormatter(logging.Formatter):
    """
    Structured JSON log formatter.

    Outputs logs in JSON format with:
    - timestamp
    - level
    - message
    - module
    - session_id
    - extra fields
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "session_id": getattr(record, "session_id", "system"),
        }

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        # Add extra fields
        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS and not key.startswith('_'):
                log_data[key] = value

        return json.dumps(log_data, default=str)


class TextFormatter(logging.Formatter):
    """Readable text formatter for local runs."""

    def __init__(self):
        super().__init__(
            fmt='%(asctime)s - %(name)s - %(levelname)s - [%(session_id)s] - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

    def format(self, record: logging.LogRecord) -> str:
        if not hasattr(record, 'session_id'):
            record.session_id = 'system'
        return super().format(record)


def configure_logging(log_level: Optional[str] = None, log_format: Optional[str] = None) -> None:
    """
    Configure engine logging.

    Falls back to the LOG_LEVEL / LOG_FORMAT settings:
    - 'json': Structured JSON logging
    - 'text': Human-readable format (default)
    """
    settings = get_settings()
    log_format = (log_format or settings.log_format).lower()
    log_level = (log_level or settings.log_level).upper()

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level, logging.INFO))

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.addFilter(SessionIdFilter())

    if log_format == 'json':
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(TextFormatter())

    root_logger.addHandler(handler)

    # Reduce noise from third-party libraries
    logging.getLogger('PIL').setLevel(logging.WARNING)
    logging.getLogger('reportlab').setLevel(logging.WARNING)

    if log_format == 'json':
        root_logger.info("Structured JSON logging enabled")


def session_logger(logger: logging.Logger, session_id: str) -> logging.LoggerAdapter:
    """Bind a session id to every record emitted through ``logger``."""
    return logging.LoggerAdapter(logger, {"session_id": session_id})
