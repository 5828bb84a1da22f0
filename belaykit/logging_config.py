"""
Root logging setup for programs that embed belaykit.

belaykit modules only create named loggers and never configure handlers.
Call `setup_logging()` once from your entry point, before the first run:

    from belaykit import setup_logging

    setup_logging()  # LOG_LEVEL, LOG_FILE, LOG_MAX_BYTES, LOG_BACKUP_COUNT

It does nothing when the root logger already has handlers.
"""

import logging
from logging.handlers import RotatingFileHandler
import os
from pathlib import Path


def setup_logging() -> None:
    """Configure root logging for applications embedding belaykit.

    The library itself only creates module loggers; call this from an entry
    point to get console output and, when LOG_FILE is set, a rotating file.
    """
    log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
    level = getattr(logging, log_level, logging.INFO)

    root_logger = logging.getLogger()
    if root_logger.handlers:
        return

    formatter = logging.Formatter(
        fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(level)
    stream_handler.setFormatter(formatter)
    root_logger.setLevel(level)
    root_logger.addHandler(stream_handler)

    log_file = os.environ.get("LOG_FILE")
    if not log_file:
        return
    Path(log_file).parent.mkdir(parents=True, exist_ok=True)
    max_bytes = int(os.environ.get("LOG_MAX_BYTES", str(5 * 1024 * 1024)))
    backup_count = int(os.environ.get("LOG_BACKUP_COUNT", "5"))
    file_handler = RotatingFileHandler(log_file, maxBytes=max_bytes, backupCount=backup_count)
    file_handler.setLevel(level)
    file_handler.setFormatter(formatter)
    root_logger.addHandler(file_handler)
