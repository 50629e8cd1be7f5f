"""
utils/logger.py
---------------
Logging for the web app. Every module logs through `get_logger(__name__)`.

All records go to stdout in one format at `LOG_LEVEL`. uvicorn is started
with `log_config=None`, and its loggers are stripped of their own handlers
here so server and access lines come out in the same format.
"""

import logging
import sys

from config import LOG_LEVEL

_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_SERVER_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")
_initialized = False


def _init_logging() -> None:
    """Configure the root logger once and route uvicorn's loggers into it."""
    global _initialized
    if _initialized:
        return
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(_LOG_FORMAT, _DATE_FORMAT))
    root = logging.getLogger()
    root.setLevel(getattr(logging, LOG_LEVEL, logging.INFO))
    root.addHandler(handler)

    for name in _SERVER_LOGGERS:
        server_logger = logging.getLogger(name)
        server_logger.handlers.clear()
        server_logger.propagate = True
    _initialized = True


def get_logger(name: str) -> logging.Logger:
    """Return the logger for `name`, setting up logging on first use."""
    _init_logging()
    return logging.getLogger(name)
