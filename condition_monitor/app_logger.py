"""
Design (app_logger.py)
- Purpose: One place for log configuration. Modules log through
           logging.getLogger(__name__); main() calls configure_logging() once.
- Outputs: Handlers on the package logger: console + debug log file.
- Side effects: Opens the debug log file in append mode.
- Thread-safety: logging handlers are thread-safe; call configure_logging once at startup.
"""

import logging
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

logger = logging.getLogger("condition_monitor")


def configure_logging(log_file: Optional[Path] = None, level: int = logging.INFO) -> logging.Logger:
    """
    Purpose: Attach a console handler and (optionally) a debug file handler.
    Inputs: log_file (e.g. <data dir>/debug.log), level for the console handler.
    Outputs: The package logger.
    Notes: Calling again replaces previously attached handlers.
    """
    formatter = logging.Formatter(LOG_FORMAT)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(formatter)
    logger.addHandler(console)

    if log_file is not None:
        try:
            file_handler = logging.FileHandler(log_file, encoding="utf-8")
        except OSError as exc:
            logger.warning("Debug log %s unavailable: %s", log_file, exc)
        else:
            file_handler.setLevel(logging.DEBUG)  # capture everything
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)
    return logger
