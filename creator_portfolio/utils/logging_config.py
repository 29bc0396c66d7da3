import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

PACKAGE_LOGGER = "creator_portfolio"

CONSOLE_FORMAT = "%(levelname)s: [%(name)s] %(message)s"
FILE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# Third-party loggers that log every HTTP request at INFO/DEBUG
NOISY_LOGGERS = ("urllib3",)


def setup_logging(
    log_file: str = None,
    level: str = "INFO",
    max_bytes: int = 5 * 1024 * 1024,
    backups: int = 3,
) -> logging.Logger:
    """Attach a stderr handler and an optional rotating file handler to the
    package logger.

    Repeated calls (the CLI group, then create_app) only update the level.
    """
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    if package_logger.handlers:
        return package_logger

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    package_logger.addHandler(stderr_handler)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        rotating = RotatingFileHandler(path, maxBytes=max_bytes, backupCount=backups)
        rotating.setFormatter(logging.Formatter(FILE_FORMAT))
        package_logger.addHandler(rotating)

    return package_logger
