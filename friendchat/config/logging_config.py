"""
Logging setup for friendchat.

Every record carries a correlation id: the HTTP middleware puts the
request's X-Correlation-ID into correlation_id_var, and the filter below
copies it onto each record so LOG_FORMAT can reference %(correlation_id)s.
Live-sync callbacks run outside any request and log the placeholder.
"""
import logging
import sys
from contextvars import ContextVar
from logging.handlers import RotatingFileHandler
from pathlib import Path

from friendchat.config.settings import Config

NO_CORRELATION_ID = "NO Correlation ID"
PACKAGE_LOGGER = "friendchat"

# Handlers are installed once per process; later calls only adjust the level
_configured = False

correlation_id_var: ContextVar[str] = ContextVar(
    "correlation_id", default=NO_CORRELATION_ID
)


class CorrelationIdFilter(logging.Filter):
    def filter(self, record):
        record.correlation_id = correlation_id_var.get()
        return True


class SafeFormatter(logging.Formatter):
    """Formatter that tolerates records created before the filter ran."""

    def format(self, record):
        if not hasattr(record, "correlation_id"):
            record.correlation_id = NO_CORRELATION_ID
        return super().format(record)


def _attach(root: logging.Logger, handler: logging.Handler) -> None:
    handler.setFormatter(SafeFormatter(Config.LOG_FORMAT))
    handler.addFilter(CorrelationIdFilter())
    root.addHandler(handler)


def _package_level(level: str) -> int:
    return getattr(logging, level.upper(), logging.INFO)


def setup_logging(level: str = "INFO", log_file: str | None = None):
    global _configured
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(_package_level(level))
    if _configured:
        return logging.getLogger()
    _configured = True

    root = logging.getLogger()
    # Third-party libraries stay at WARNING; only friendchat logs below that
    root.setLevel(logging.WARNING)
    _attach(root, logging.StreamHandler(sys.stdout))

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        _attach(
            root,
            RotatingFileHandler(log_file, maxBytes=5 * 1024 * 1024, backupCount=3),
        )

    package_logger.info(f"Logging is set up: level={level}, log_file={log_file}")
    return root
