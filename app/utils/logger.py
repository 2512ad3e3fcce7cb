# app/utils/logger.py
"""
Logging setup for the alerts backend.
Console always; a rotating file under settings.LOG_DIR unless it is empty.
Chatty client libraries (websocket frames, HTTP requests to providers) are
held at WARNING so feed traffic does not drown the alert log.
"""

import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional

from app.config import settings

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.dirname(__file__)))
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

_configured = False


def resolve_level(name: str) -> int:
    """'debug' -> logging.DEBUG; unknown names fall back to INFO."""
    level = logging.getLevelName((name or "").upper())
    return level if isinstance(level, int) else logging.INFO


def log_file_path() -> Optional[str]:
    if not settings.LOG_DIR:
        return None
    log_dir = settings.LOG_DIR
    if not os.path.isabs(log_dir):
        log_dir = os.path.join(PROJECT_ROOT, log_dir)
    os.makedirs(log_dir, exist_ok=True)
    return os.path.join(log_dir, "citywatch.log")


def _configure_root_logger():
    global _configured
    if _configured:
        return
    _configured = True

    level = resolve_level(settings.LOG_LEVEL)
    fmt = logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    root = logging.getLogger()
    root.setLevel(level)

    console = logging.StreamHandler()
    console.setFormatter(fmt)
    root.addHandler(console)

    path = log_file_path()
    if path:
        file_handler = RotatingFileHandler(
            filename=path,
            maxBytes=settings.LOG_FILE_MAX_MB * 1024 * 1024,
            backupCount=settings.LOG_FILE_BACKUPS,
            encoding="utf-8",
        )
        file_handler.setFormatter(fmt)
        root.addHandler(file_handler)

    for name in settings.LOG_QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def get_logger(name: str) -> logging.Logger:
    """Get a named logger. Call this at the top of every module."""
    _configure_root_logger()
    return logging.getLogger(name)
