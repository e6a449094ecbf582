"""
Logging setup.
"""

from __future__ import annotations

import logging
import os

LOG_FORMAT = "%(asctime)s - %(name)s - %(threadName)s - %(levelname)s - %(message)s"
VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def setup_logging(log_path: str, log_level: str) -> None:
    """Log to `log_path` and the console at `log_level`."""
    handlers = [logging.StreamHandler()]
    if log_path:
        log_dir = os.path.dirname(log_path)
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir)
        handlers.append(logging.FileHandler(log_path))

    logging.basicConfig(
        level=getattr(logging, log_level),
        format=LOG_FORMAT,
        handlers=handlers,
    )
    # uvicorn logs every MJPEG/poll request at INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
