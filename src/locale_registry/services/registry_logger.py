"""
Logging configuration for applications embedding the locale registry.

Registry modules log through ``logging.getLogger(__name__)``; this module
wires the root logger so those records share one timestamp format with the
host application's own logs.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path

from src.locale_registry.core.config import LoggingConfig

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class UnifiedFormatter(logging.Formatter):
    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        ct = datetime.fromtimestamp(record.created)
        return ct.strftime(LOG_DATE_FORMAT) + f".{int(record.msecs):03d}"


def setup_unified_logging(level: str = "INFO", log_file: str | None = None) -> None:
    """
    Configure the root logger with the unified format.

    Args:
        level: DEBUG, INFO, WARNING, or ERROR
        log_file: Optional file path for persistent logs
    """
    formatter = UnifiedFormatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)


def setup_logging_from_config(config: LoggingConfig) -> None:
    """Apply a LoggingConfig section."""
    setup_unified_logging(level=config.level, log_file=config.file)
