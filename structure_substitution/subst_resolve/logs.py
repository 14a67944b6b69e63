"""
Logging setup for command-line runs.

Library modules only create module loggers; handlers are attached here,
by the CLI, under the package-wide logger names.
"""

import logging
from pathlib import Path
from typing import Optional

PACKAGE_LOGGERS = ("subst_core", "subst_recognize", "subst_identify", "subst_apply", "subst_resolve")


def setup_logger(name: str, log_file: Optional[Path] = None, level=logging.INFO) -> logging.Logger:
    """
    Setup a logger with a console handler and an optional file handler.

    Args:
        name: Logger name
        log_file: Path to log file (None = console only)
        level: Logging level

    Returns:
        Configured logger
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Clear any existing handlers
    logger.handlers = []

    formatter = logging.Formatter(
        "[%(asctime)s] %(levelname)s: %(message)s", datefmt="%Y-%m-%d %H:%M:%S"
    )

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file is not None:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode="w", encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def setup_package_logging(log_file: Optional[Path] = None, level=logging.INFO) -> None:
    """Attach handlers to every package logger; log_file is shared."""
    if log_file is not None:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        # First logger truncates, the rest append to the same file
        setup_logger(PACKAGE_LOGGERS[0], log_file, level)
        shared = logging.getLogger(PACKAGE_LOGGERS[0]).handlers
        for name in PACKAGE_LOGGERS[1:]:
            logger = logging.getLogger(name)
            logger.setLevel(level)
            logger.handlers = list(shared)
    else:
        for name in PACKAGE_LOGGERS:
            setup_logger(name, None, level)
