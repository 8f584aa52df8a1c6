"""
Logging Configuration
Sets up the package logger used by the simulator and the CLI.
"""
import logging
import sys
from typing import Optional

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def make_formatter(tag: str = "") -> logging.Formatter:
    """Formatter for chargesim records, prefixed with the run ``tag`` if any."""
    fmt = f'%(asctime)s - [{tag}] %(name)s - %(levelname)s - %(message)s' if tag else LOG_FORMAT
    return logging.Formatter(fmt, datefmt='%H:%M:%S')


def setup_logging(level: int = logging.INFO, log_file: Optional[str] = None, tag: str = "") -> logging.Logger:
    """
    Configures the logger for the 'chargesim' namespace.

    Args:
        level: Logging level (e.g. logging.DEBUG, logging.INFO)
        log_file: Optional path to save logs to a file.
        tag: Run label (``SimulationConfig.tag``) shown in every record, so
            logs of several batch runs written to one file stay apart.

    Returns:
        The configured package logger.
    """
    logger = logging.getLogger("chargesim")
    logger.setLevel(level)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = make_formatter(tag)
    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode='a', encoding='utf-8'))
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.debug("Logging initialized (tag=%r).", tag)
    return logger
