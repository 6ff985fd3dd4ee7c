"""
Logging setup.

Uses the standard library logging module. Every record carries the id of
the HTTP request being served (or "-" outside a request) so log lines from
one request can be correlated.

Usage:
    logger = logging.getLogger(__name__)   # anywhere under daily_report.*
"""

import logging
import sys
from contextvars import ContextVar

# Set by RequestIDMiddleware for the duration of a request
request_id_var: ContextVar[str] = ContextVar("request_id", default="-")

LOG_FORMAT = "%(asctime)s %(levelname)s [%(request_id)s] %(name)s: %(message)s"

ROOT_LOGGER = "daily_report"


class RequestIdFilter(logging.Filter):
    """Attach the current request id to every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get()
        return True


def configure_logging(level: str = "INFO") -> logging.Logger:
    """
    Configure the package logger.

    Safe to call more than once (e.g. one app per test); the handler is
    installed only the first time, the level is updated every time.
    """
    log = logging.getLogger(ROOT_LOGGER)
    log.setLevel(level)

    if not any(getattr(h, "_daily_report", False) for h in log.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler.addFilter(RequestIdFilter())
        handler._daily_report = True
        log.addHandler(handler)

    return log
