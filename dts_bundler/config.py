"""
Logging setup for dts-bundler.
"""

import os
import sys
import logging
import logging.handlers
from pathlib import Path

CONSOLE_FORMAT = '%(levelname)s: %(message)s'
FILE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(log_level: str = None, log_file: str = None):
    """Configure the root logger for a command line run.

    Console messages go to stderr; the log file also gets timestamps.

    Args:
        log_level: Logging level name; falls back to $LOG_LEVEL, then INFO
        log_file: Optional path of a rotating log file with timestamps
    """
    level = (log_level or os.environ.get('LOG_LEVEL', 'INFO')).upper()
    numeric_level = getattr(logging, level, logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    root_logger.addHandler(console_handler)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=10*1024*1024,  # 10MB
            backupCount=5,
            encoding='utf-8'
        )
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
        root_logger.addHandler(file_handler)

    logging.debug(f"Logging configured with level: {level}")
