"""Logging setup for the repsheet command line"""

import logging
import sys
from pathlib import Path
from typing import Optional

from ..core.constants import DEFAULT_LOG_FORMAT, DEFAULT_LOG_LEVEL, NOISY_LOGGERS


def setup_logging(level: str = DEFAULT_LOG_LEVEL, log_file: Optional[str] = None,
                  verbose: bool = False) -> logging.Logger:
    """Configure the root logger with a console and an optional file handler"""
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG if verbose else getattr(logging, level.upper(), logging.INFO))

    # Remove existing handlers to avoid duplication
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    detailed_formatter = logging.Formatter(fmt=DEFAULT_LOG_FORMAT, datefmt='%Y-%m-%d %H:%M:%S')

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.DEBUG if verbose else logging.WARNING)
    console_handler.setFormatter(logging.Formatter(fmt='%(levelname)s - %(message)s'))
    root_logger.addHandler(console_handler)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode='a', encoding='utf-8')
        file_handler.setFormatter(detailed_formatter)
        root_logger.addHandler(file_handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return root_logger
