# shared/logging_setup.py
import logging
import logging.handlers
import os
import sys

from shared.config import LOG_BACKUP_COUNT, LOG_FILE, LOG_FORMAT, LOG_LEVEL, LOG_MAX_BYTES


def setup_logging():
    """Configure the root logger: console always, rotating file when LOG_FILE is set."""
    formatter = logging.Formatter(LOG_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    handlers = [console_handler]

    if LOG_FILE:
        try:
            log_dir = os.path.dirname(LOG_FILE)
            if log_dir:
                os.makedirs(log_dir, exist_ok=True)
            file_handler = logging.handlers.RotatingFileHandler(
                LOG_FILE,
                maxBytes=LOG_MAX_BYTES,
                backupCount=LOG_BACKUP_COUNT,
                encoding="utf-8",
            )
            file_handler.setFormatter(formatter)
            handlers.append(file_handler)
        except OSError as e:
            print(f"Warning: Could not setup file logging: {e}")

    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL, logging.INFO),
        handlers=handlers,
        force=True,
    )
    # SQLAlchemy echo is controlled by SQL_ECHO, keep its own logger quiet otherwise
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
