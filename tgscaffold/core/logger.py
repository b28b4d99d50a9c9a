"""Logging for tgscaffold: Rich output on stderr, optional plain-text log file.

Handlers live on the `tgscaffold` package logger only. Module loggers obtained
through get_logger() propagate to it and inherit its level, so one
configure_logging() call controls the whole package.
"""
import logging
from pathlib import Path
from typing import Optional, Union

from rich.console import Console
from rich.logging import RichHandler

PACKAGE_LOGGER = "tgscaffold"
FILE_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"

# stdout is reserved for command output
console = Console(stderr=True)


def _package_logger() -> logging.Logger:
    logger = logging.getLogger(PACKAGE_LOGGER)
    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        handler = RichHandler(console=console, show_path=False)
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
    return logger


def configure_logging(verbose: bool = False, log_file: Optional[Union[str, Path]] = None) -> None:
    """Set the package log level and (re)attach the log file handler.

    Args:
        verbose: DEBUG instead of INFO
        log_file: Also write records to this file; a previous file handler is replaced

    Raises:
        OSError: If the log file cannot be opened
    """
    logger = _package_logger()
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)

    for handler in [h for h in logger.handlers if isinstance(h, logging.FileHandler)]:
        logger.removeHandler(handler)
        handler.close()

    if log_file:
        path = Path(log_file).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        logger.addHandler(file_handler)
        logger.debug(f"Logging to {path}")


def get_logger(name: str) -> logging.Logger:
    """Logger for a tgscaffold module (typically __name__)."""
    _package_logger()
    return logging.getLogger(name)
