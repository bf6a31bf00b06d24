"""Process-wide logging setup for the web app."""

import logging

from app.middleware.correlation_id import CorrelationIdFilter

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(correlation_id)s] %(message)s"


def configure_logging(level: int = logging.INFO) -> None:
    """
    Configure root logging once; attaches the correlation-id filter to the handler.
    Safe to call again (no duplicate handlers).
    """
    root = logging.getLogger()
    for handler in root.handlers:
        if getattr(handler, "_booking_backend", False):
            return

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.addFilter(CorrelationIdFilter())
    handler._booking_backend = True  # type: ignore[attr-defined]
    root.addHandler(handler)
    root.setLevel(level)
