"""
Logging setup for the meshdicer command-line tool.
"""
import logging
import sys
from pathlib import Path
from typing import Optional

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%H:%M:%S'


def setup_logging(level: int = logging.INFO, log_file: Optional[str] = None) -> logging.Logger:
    """
    Route records from every meshdicer module to stdout and an optional file.

    The console shows records at ``level`` and above. A log file records
    everything down to DEBUG, including the per-cell decomposition and
    clumping counts.

    Args:
        level: Console logging level (e.g. logging.INFO)
        log_file: Optional path of a log file, created along with its folder

    Returns:
        The 'meshdicer' package logger.
    """
    logger = logging.getLogger("meshdicer")
    logger.setLevel(logging.DEBUG if log_file else level)

    # Calling again (e.g. from tests) replaces the previous handlers
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)
        logger.debug("Writing log to %s", log_file)

    return logger
