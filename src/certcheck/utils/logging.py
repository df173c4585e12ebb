"""Logging setup for the certcheck command line and library."""

import logging
import sys
from pathlib import Path
from typing import Literal

LOGGER_NAME = "certcheck"

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# pdfplumber's parser and the LLM SDKs log every page and request at INFO/DEBUG
NOISY_LOGGERS = ("pdfminer", "httpx", "httpcore", "openai", "anthropic")

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]


def setup_logging(
    level: LogLevel = "INFO",
    format_string: str | None = None,
    log_file: Path | None = None,
) -> logging.Logger:
    """Configure the ``certcheck`` logger tree.

    Messages go to stderr so command output on stdout stays clean. When
    ``log_file`` is given every record at ``level`` or above is also appended
    there. Third-party libraries are held at WARNING unless ``level`` is DEBUG.
    Calling this again replaces the handlers it installed earlier.

    Args:
        level: Logging level
        format_string: Custom format string (optional)
        log_file: Optional file to append log records to

    Returns:
        The configured ``certcheck`` logger
    """
    numeric_level = getattr(logging, level)
    formatter = logging.Formatter(format_string or DEFAULT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(numeric_level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    for handler in handlers:
        handler.setLevel(numeric_level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    library_level = logging.DEBUG if numeric_level <= logging.DEBUG else logging.WARNING
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(library_level)

    return logger


def get_logger(name: str = LOGGER_NAME) -> logging.Logger:
    """Get a logger under the ``certcheck`` tree, e.g. ``certcheck.storage.audit``."""
    if name != LOGGER_NAME and not name.startswith(f"{LOGGER_NAME}."):
        name = f"{LOGGER_NAME}.{name}"
    return logging.getLogger(name)
