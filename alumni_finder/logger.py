"""
Logger configuration.

Single stdout handler with a timestamped format, installed once at startup.
"""

import logging
import sys


def configure_logging(level: str = "INFO") -> None:
    """Configure the root logger with an ISO-style timestamp format."""
    # Remove any existing handlers to avoid duplicates on reload
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )

    root_logger.setLevel(level.upper())
    root_logger.addHandler(handler)

    # Reduce noise from verbose third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("hpack").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Return a module logger (usually called with __name__)."""
    return logging.getLogger(name)
