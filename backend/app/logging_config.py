"""
Logging Configuration
Console logging for every process, plus a rotating file when a log directory is set.
"""

import os
import sys
import logging
import logging.config
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
ACCESS_FORMAT = "%(asctime)s - access - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def build_logging_config(log_dir: Optional[str], log_level: str = "INFO") -> dict:
    """
    dictConfig for the app, uvicorn and SQLAlchemy loggers.

    Args:
        log_dir: Directory for app.log; None or "" logs to the console only.
        log_level: Level for the application loggers.
    """
    handlers = {
        "console": {
            "class": "logging.StreamHandler",
            "stream": sys.stdout,
            "formatter": "default",
            "level": log_level,
        },
        "access": {
            "class": "logging.StreamHandler",
            "stream": sys.stdout,
            "formatter": "access",
        },
    }
    targets = ["console"]

    if log_dir:
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "filename": os.path.join(log_dir, "app.log"),
            "maxBytes": 10 * 1024 * 1024,  # 10 MB
            "backupCount": 5,
            "formatter": "default",
            "level": log_level,
            "encoding": "utf8",
        }
        targets.append("file")

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {"format": LOG_FORMAT, "datefmt": DATE_FORMAT},
            "access": {"format": ACCESS_FORMAT, "datefmt": DATE_FORMAT},
        },
        "handlers": handlers,
        "loggers": {
            "": {"handlers": targets, "level": log_level},
            "app": {"handlers": targets, "level": log_level, "propagate": False},
            "uvicorn": {"handlers": targets, "level": "INFO", "propagate": False},
            "uvicorn.error": {"handlers": targets, "level": "INFO", "propagate": False},
            "uvicorn.access": {"handlers": ["access"], "level": "INFO", "propagate": False},
            # Engine echo is driven by DEBUG; keep the noise out otherwise
            "sqlalchemy.engine": {"level": "WARNING"},
        },
    }


def setup_logging(log_dir: Optional[str] = "logs", log_level: str = "INFO"):
    """Configure logging for the application."""
    if log_dir:
        Path(log_dir).mkdir(parents=True, exist_ok=True)

    logging.config.dictConfig(build_logging_config(log_dir, log_level.upper()))

    logger = logging.getLogger("app")
    if log_dir:
        logger.info(f"Logging initialized. Writing logs to {os.path.join(log_dir, 'app.log')}")
    else:
        logger.info("Logging initialized (console only)")
