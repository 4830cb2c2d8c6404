import logging
import os
import sys
from typing import List, Optional

from tqdm import tqdm

LOGGER_NAME = "translation_checker"

FILE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
CONSOLE_FORMAT = '%(levelname)s - %(message)s'


class TqdmLoggingHandler(logging.Handler):
    """Console handler writing through ``tqdm.write`` so the per-file progress bar stays intact."""

    def emit(self, record):
        try:
            tqdm.write(self.format(record), file=sys.stderr)
        except (KeyboardInterrupt, SystemExit):
            raise
        except Exception:
            self.handleError(record)


def _level(level_str: Optional[str], default: int = logging.INFO) -> int:
    if not level_str:
        return default
    return getattr(logging, level_str.upper(), default)


def _reset_handlers(logger: logging.Logger) -> None:
    # The CLI may configure the logger more than once per process
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def setup_logger(
        log_level_str: str,
        log_file_path: Optional[str] = None,
        log_to_console: bool = True,
        console_level_str: Optional[str] = None
) -> logging.Logger:
    """
    Configure the ``translation_checker`` logger that every module logs through.

    The log file, when one is configured, records everything at ``log_level_str``.
    The console may be held to a higher level (``--quiet`` shows warnings only)
    without thinning out the file.

    Args:
        log_level_str: Level for the log file, and for the console unless overridden.
        log_file_path: Log file path; its directory is created. None disables file logging.
        log_to_console: Whether to log to stderr.
        console_level_str: Separate console level, e.g. 'WARNING'.

    Returns:
        The configured logger.
    """
    logger = logging.getLogger(LOGGER_NAME)
    _reset_handlers(logger)
    logger.propagate = False

    file_level = _level(log_level_str)
    console_level = _level(console_level_str, file_level)
    handler_levels: List[int] = []

    if log_file_path:
        log_dir = os.path.dirname(log_file_path)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.FileHandler(log_file_path, encoding='utf-8')
        file_handler.setLevel(file_level)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        logger.addHandler(file_handler)
        handler_levels.append(file_level)

    if log_to_console:
        console_handler = TqdmLoggingHandler(console_level)
        console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
        logger.addHandler(console_handler)
        handler_levels.append(console_level)

    # Records below every handler's level are dropped at the logger
    logger.setLevel(min(handler_levels) if handler_levels else file_level)
    return logger
