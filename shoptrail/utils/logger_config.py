import logging
import logging.handlers
import os
from pathlib import Path

FILE_FORMAT = '%(asctime)s | %(name)-12s | %(levelname)-8s | %(message)s'
CONSOLE_FORMAT = '%(name)-12s %(levelname)-8s | %(message)s'

# Client libraries that log every request at INFO
QUIET_LOGGERS = {
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
    "hpack": logging.WARNING,
    "postgrest": logging.WARNING,
    "sentry_sdk": logging.ERROR,
}


def _console_handler(level: int) -> logging.Handler:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    handler.setLevel(level)
    return handler


def _file_handler(log_file: Path, level: int) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        log_file,
        maxBytes=int(os.getenv("LOG_MAX_BYTES", "10000000")),
        backupCount=int(os.getenv("LOG_BACKUP_COUNT", "5")),
        encoding='utf-8'
    )
    handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
    handler.setLevel(level)
    return handler


def setup_logging(
    log_level: str = None,
    log_dir: str = None,
    app_name: str = "shoptrail"
) -> Path:
    """
    Route the root logger to the console and to a rotating file under log_dir.

    Args:
        log_level (str): DEBUG, INFO, WARNING, ERROR or CRITICAL.
            Falls back to LOG_LEVEL, then INFO
        log_dir (str): Directory for the log file. Falls back to LOG_DIR, then "logs"
        app_name (str): Log file name stem

    Returns:
        Path of the active log file
    """
    log_level = (log_level or os.getenv("LOG_LEVEL", "INFO")).upper()
    level = getattr(logging, log_level, logging.INFO)

    log_path = Path(log_dir or os.getenv("LOG_DIR", "logs"))
    log_path.mkdir(parents=True, exist_ok=True)
    log_file = log_path / f"{app_name}.log"

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    root_logger.addHandler(_console_handler(level))
    root_logger.addHandler(_file_handler(log_file, level))

    for name, quiet_level in QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(quiet_level)

    root_logger.info(f"Logging to {log_file} at {log_level}")
    return log_file
