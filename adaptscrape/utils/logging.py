"""File logging for adaptscrape runs."""

import logging
from datetime import datetime
from pathlib import Path

from adaptscrape.utils.files import get_logs_path

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
NOISY_LOGGERS = ('urllib3', 'httpx', 'httpcore')


def _numeric_level(level: str) -> int:
    name = level.upper()
    if name == 'ALL':
        return logging.NOTSET
    return getattr(logging, name, logging.DEBUG)


def setup_local_logging(level: str = 'DEBUG', logs_dir: Path | None = None) -> Path:
    """Send log records from every module to a fresh per-run file.

    Progress for humans goes through the rich console, so no stream handler
    is attached. Unknown level names fall back to DEBUG.

    Args:
        level: Logging level name, or 'ALL' for everything. Defaults to 'DEBUG'.
        logs_dir: Directory for the log file. Defaults to .adaptscrape/logs.

    Returns:
        Path to the run's log file

    """
    logs_dir = logs_dir or get_logs_path()
    logs_dir.mkdir(parents=True, exist_ok=True)
    log_file = logs_dir / f'run_{datetime.now():%Y%m%d_%H%M%S}.log'
    numeric_level = _numeric_level(level)

    handler = logging.FileHandler(log_file)
    handler.setLevel(numeric_level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.addHandler(handler)

    # HTTP client chatter drowns out pipeline logs at DEBUG
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))

    return log_file
