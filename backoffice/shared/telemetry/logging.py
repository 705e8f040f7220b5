"""Logging configuration for the back-office application"""
import logging
import sys

from backoffice.infrastructure.config.settings import get_settings


def setup_logging():
    """Configure application-wide logging"""
    settings = get_settings()
    log_level = logging.DEBUG if settings.debug else getattr(
        logging, settings.log_level.upper(), logging.INFO
    )

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - [%(trace_id)s] %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    for handler in logging.getLogger().handlers:
        handler.addFilter(TraceIdLogFilter())


class TraceIdLogFilter(logging.Filter):
    """Stamp every record with the trace id of the current request."""

    def filter(self, record: logging.LogRecord) -> bool:
        from backoffice.shared.context import get_current_trace_id

        record.trace_id = get_current_trace_id() or "-"
        return True


def get_logger(name: str) -> logging.Logger:
    """Get logger for module"""
    return logging.getLogger(name)
