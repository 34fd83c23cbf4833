"""File logging for the receive and respond entrypoints."""

from __future__ import annotations

import logging
import time
from pathlib import Path

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

_HANDLER_NAME = "thaings-file"


def configure_logging(log_file: Path, level: str | int = logging.INFO) -> logging.Handler:
    """Send ``thaings.*`` records to ``log_file`` with UTC timestamps.

    Calling again replaces the previous handler.
    """

    log_file.parent.mkdir(parents=True, exist_ok=True)
    package_logger = logging.getLogger("thaings")
    for handler in list(package_logger.handlers):
        if handler.get_name() == _HANDLER_NAME:
            package_logger.removeHandler(handler)
            handler.close()

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)
    formatter.converter = time.gmtime

    handler = logging.FileHandler(str(log_file), encoding="utf-8")
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(formatter)
    package_logger.addHandler(handler)
    package_logger.setLevel(level)
    return handler
