# Overview: Log levels and optional rotating log files.

from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
MAX_BYTES = 5 * 1024 * 1024
BACKUP_COUNT = 5


def _file_handler(path: str, level: int) -> RotatingFileHandler:
    handler = RotatingFileHandler(path, maxBytes=MAX_BYTES, backupCount=BACKUP_COUNT, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    return handler


def configure_logging(app) -> None:
    """
    Set the level from LOG_LEVEL on app.logger.

    app.logger is the "smart_enterprise" logger, so module loggers
    (smart_enterprise.services.*, smart_enterprise.security) propagate to it
    and share Flask's console handler.

    When LOG_DIR is set, also write:
    - combined.log: everything at LOG_LEVEL and above
    - error.log: ERROR and above
    - security.log: the smart_enterprise.security logger (auth failures, rate limits)
    """
    level = logging.getLevelName(str(app.config.get("LOG_LEVEL", "INFO")).upper())
    if not isinstance(level, int):
        level = logging.INFO
    app.logger.setLevel(level)

    log_dir = app.config.get("LOG_DIR")
    if not log_dir:
        return

    os.makedirs(log_dir, exist_ok=True)
    app.logger.addHandler(_file_handler(os.path.join(log_dir, "combined.log"), level))
    app.logger.addHandler(_file_handler(os.path.join(log_dir, "error.log"), logging.ERROR))
    logging.getLogger("smart_enterprise.security").addHandler(
        _file_handler(os.path.join(log_dir, "security.log"), logging.INFO)
    )
