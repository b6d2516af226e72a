# app/utils/logger.py
"""
Logging setup for the dispatch backend.

Console + rotating file (LOG_DIR/LOG_FILE). Services tag their lines
([AUTOMATION], [ACTION], [NOTIFY], [SMS], [EMAIL], [MOVEMENT]) so one
truck's trail can be grepped out of dispatch.log. Chatty libraries listed
in QUIET_LOGGERS are held at WARNING regardless of LOG_LEVEL.
"""

import logging
import os
from logging.handlers import RotatingFileHandler

from app.config import settings

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def log_path() -> str:
    log_dir = settings.LOG_DIR or os.path.join(
        os.path.dirname(os.path.dirname(os.path.dirname(__file__))), "logs"
    )
    return os.path.join(log_dir, settings.LOG_FILE)


def build_handlers(level: str) -> list[logging.Handler]:
    path = log_path()
    os.makedirs(os.path.dirname(path), exist_ok=True)
    fmt = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    console = logging.StreamHandler()
    file_handler = RotatingFileHandler(
        filename=path,
        maxBytes=settings.LOG_MAX_BYTES,
        backupCount=settings.LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    for handler in (console, file_handler):
        handler.setLevel(level)
        handler.setFormatter(fmt)
    return [console, file_handler]


_configured = False


def configure_logging(force: bool = False):
    """Install handlers on the root logger once per process (or again with force=True)."""
    global _configured
    if _configured and not force:
        return
    _configured = True

    level = settings.LOG_LEVEL.upper()
    root = logging.getLogger()
    for handler in [h for h in root.handlers if getattr(h, "_dispatch", False)]:
        root.removeHandler(handler)
        handler.close()
    for handler in build_handlers(level):
        handler._dispatch = True
        root.addHandler(handler)
    root.setLevel(level)

    for name in settings.QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Named logger; configures logging on first use."""
    configure_logging()
    return logging.getLogger(name)
