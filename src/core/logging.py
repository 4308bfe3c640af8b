"""
Logging configuration for the profile harvester.

One call to setup_logging() at process start wires a stdout handler and a
dated file handler onto the root logger; every module then asks for its own
logger through get_logger(__name__).
"""

import logging
import sys
from pathlib import Path
from typing import Optional
from datetime import datetime, timezone


DEFAULT_LOG_LEVEL = "INFO"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Client libraries that log every HTTP request at INFO
NOISY_LOGGERS = ("httpx", "httpcore", "hpack", "postgrest", "asyncio")


def setup_logging(
    level: str = DEFAULT_LOG_LEVEL,
    log_file: Optional[str] = None,
    console: bool = True,
    log_dir: Path = Path("logs"),
) -> logging.Logger:
    """
    Attach the run log handlers to the root logger.

    Any handlers left by an earlier call are dropped first, so calling this
    again (a resumed run in the same process) does not duplicate lines.
    Above DEBUG, HTTP and Supabase client loggers are held at WARNING.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path to log file (default: <log_dir>/harvest_YYYYMMDD.log)
        console: Whether to log to console (default: True)
        log_dir: Directory for the default dated log file

    Returns:
        Configured root logger

    Example:
        >>> logger = setup_logging(level="DEBUG")
        >>> logger.info("Harvester started")
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    # Remove existing handlers to avoid duplicates
    root_logger.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    if console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(numeric_level)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
    else:
        date_str = datetime.now(timezone.utc).strftime("%Y%m%d")
        log_path = Path(log_dir) / f"harvest_{date_str}.log"

    log_path.parent.mkdir(exist_ok=True, parents=True)

    file_handler = logging.FileHandler(log_path, encoding="utf-8")
    file_handler.setLevel(numeric_level)
    file_handler.setFormatter(formatter)
    root_logger.addHandler(file_handler)

    # Keep Supabase and Playwright chatter out of the run log unless debugging
    if numeric_level > logging.DEBUG:
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    root_logger.info(f"[Run] Logging at {level.upper()} to {log_path}")

    return root_logger


def get_logger(name: str) -> logging.Logger:
    """Module logger; messages carry a bracketed component tag such as [Ledger]."""
    return logging.getLogger(name)


def init_harvest_logging(
    verbose: bool = False,
    log_dir: Path = Path("logs"),
    level: str = DEFAULT_LOG_LEVEL,
) -> logging.Logger:
    """
    Start logging for a harvest run.

    The run log goes to <log_dir>/harvest_YYYYMMDD.log, so every run of one
    UTC day shares a file. verbose overrides the configured level with DEBUG.
    """
    return setup_logging(level="DEBUG" if verbose else level, log_dir=log_dir)
