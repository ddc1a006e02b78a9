"""Logging setup for the squadscore package and the scoring CLI."""

import logging
import sys
from datetime import datetime
from pathlib import Path

LOGGER_NAME = 'squadscore'
LOG_FORMAT = '%(asctime)s %(levelname)-7s %(name)s: %(message)s'
CONSOLE_FORMAT = '%(levelname)s: %(message)s'


def resolve_level(level: int | str) -> int:
    """Accept a logging level number or a name like 'debug'."""
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        raise ValueError(f'Unknown log level: {level!r}')
    return resolved


def log_file_path(log_dir: Path | str, competition_code: str | None = None) -> Path:
    """Timestamped log file, one per run, prefixed with the competition code."""
    prefix = competition_code or LOGGER_NAME
    return Path(log_dir) / f'{prefix}_{datetime.now().strftime("%Y%m%d_%H%M%S")}.log'


def setup_logging(
    level: int | str = logging.INFO,
    log_dir: Path | str | None = None,
    competition_code: str | None = None,
    quiet: bool = False,
) -> logging.Logger:
    """
    Configure the 'squadscore' logger for one scoring run.

    Console output goes to stderr so results printed on stdout stay
    clean. A file handler is added only when log_dir is given; file
    records carry timestamps and logger names.

    Args:
        level: Level number or name (e.g. 'debug')
        log_dir: Directory for a per-run log file, created if missing
        competition_code: Prefix for the log file name
        quiet: Only warnings and errors on the console

    Returns:
        The configured logger
    """
    level = resolve_level(level)
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    logger.handlers = []

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(max(level, logging.WARNING) if quiet else level)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    logger.addHandler(console_handler)

    if log_dir is not None:
        path = log_file_path(log_dir, competition_code)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path)
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
        logger.addHandler(file_handler)
        logger.debug(f'Logging to {path}')

    return logger
