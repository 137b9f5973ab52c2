"""Logging setup for the CLI and HTTP app.

Library modules log through loguru directly. configure_logging() installs a
single stderr sink and routes stdlib logging (boto3, uvicorn) into loguru so
everything ends up in one stream.
"""

import logging
import sys

from loguru import logger

NOISY_LOGGERS = ("boto3", "botocore", "s3transfer", "urllib3")

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> - "
    "<cyan>{name}</cyan> - <level>{level}</level> - {message}"
)


class InterceptHandler(logging.Handler):
    """Forward stdlib log records to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Walk back to the frame that issued the stdlib call
        frame, depth = logging.currentframe(), 2
        while frame is not None and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def configure_logging(log_level: str = "INFO") -> None:
    """Configure loguru and redirect stdlib logging into it.

    Args:
        log_level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    level = log_level.upper()

    logger.remove()
    logger.add(sys.stderr, level=level, format=LOG_FORMAT)

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)

    # Set third-party loggers to WARNING to reduce noise
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
