"""
Logging configuration and utilities.

All pipeline components log through the standard library; warnings about
skipped files and failed exports surface here, while progress lines and
reports go straight to the console stream.
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional, Dict
from datetime import datetime, timedelta


LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
FILE_LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'

# Component name -> logger name suffix
BUSINESS_LOGGERS: Dict[str, str] = {
    "feeder": "business.feeder",
    "dispatcher": "business.dispatcher",
    "report": "business.report",
    "status": "business.status",
}


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[str] = None,
    retention_days: int = 7
) -> None:
    """
    Set up logging for the application.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional log file path
        retention_days: Number of rotated daily log files to keep

    Raises:
        OSError: If the log file cannot be created
    """
    file_handler = None
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        cleanup_old_logs(log_path.parent, retention_days)

        # Opened before the root logger is touched so a bad path leaves it as it was
        file_handler = logging.handlers.TimedRotatingFileHandler(
            log_file,
            when='midnight',
            interval=1,
            backupCount=retention_days,
            encoding='utf-8'
        )
        file_handler.suffix = "%Y-%m-%d"
        file_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT))

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level.upper()))

    # Clear existing handlers
    root_logger.handlers.clear()

    # Console handler; stderr keeps stdout free for progress lines and JSON
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root_logger.addHandler(console_handler)

    if file_handler is not None:
        root_logger.addHandler(file_handler)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance.

    Args:
        name: Logger name (typically __name__)
    """
    return logging.getLogger(name)


def get_business_logger(component: str) -> logging.Logger:
    """
    Get the logger for one pipeline component.

    Unknown components get a logger under the same ``business.`` prefix.

    Args:
        component: Component name (e.g. 'feeder', 'dispatcher')
    """
    return logging.getLogger(BUSINESS_LOGGERS.get(component, f"business.{component}"))


def cleanup_old_logs(logs_dir: Path, retention_days: int = 7) -> int:
    """
    Delete log files older than the retention period.

    Args:
        logs_dir: Directory holding log files
        retention_days: Number of days to keep

    Returns:
        Number of deleted files
    """
    if not logs_dir.exists():
        return 0

    logger = get_logger(__name__)
    cleaned_count = 0
    cutoff_date = datetime.now() - timedelta(days=retention_days)

    for log_file in logs_dir.glob("*.log*"):
        if not log_file.is_file():
            continue
        file_mtime = datetime.fromtimestamp(log_file.stat().st_mtime)
        if file_mtime < cutoff_date:
            try:
                log_file.unlink()
            except OSError as e:
                logger.warning("Could not remove old log file %s: %s", log_file, e)
                continue
            cleaned_count += 1

    if cleaned_count > 0:
        logger.info("Removed %d expired log files from %s", cleaned_count, logs_dir)

    return cleaned_count
