"""Logging configuration for linear-tracker."""

import logging
import sys
from datetime import UTC, datetime
from pathlib import Path

LOGGER_NAME = "linear_tracker"

# httpx logs every request at INFO; the client already logs each operation
NOISY_LOGGERS = ("httpx", "httpcore")

_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _level_for(verbose: int) -> int:
    """Map the -v count to a level (file-only logging uses INFO)."""
    return logging.DEBUG if verbose >= 2 else logging.INFO


def setup_logging(verbose: int = 0, log_file: Path | None = None) -> None:
    """Configure logging based on verbosity level and optional file output.

    Calling this again replaces the handlers installed by a previous call,
    so repeated ``main()`` invocations in one process do not duplicate
    output.

    Args:
        verbose: Verbosity level (0=off, 1=INFO, 2+=DEBUG)
        log_file: Optional path to write logs to file
    """
    logger = logging.getLogger(LOGGER_NAME)

    # Drop handlers from an earlier call
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if verbose == 0 and log_file is None:
        return

    level = _level_for(verbose)
    logger.setLevel(level)
    formatter = logging.Formatter(_FORMAT, datefmt=_DATE_FORMAT)

    handlers: list[logging.Handler] = []
    if verbose > 0:
        handlers.append(logging.StreamHandler(sys.stderr))
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    # Transport library chatter only at -vv
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(level if verbose >= 2 else logging.WARNING)

    # Startup delimiter with timestamp
    timestamp = datetime.now(UTC).strftime("%Y-%m-%d %H:%M:%S UTC")
    logger.info("=" * 60)
    logger.info(
        "linear-tracker starting | %s | level=%s", timestamp, logging.getLevelName(level)
    )
    logger.info("=" * 60)
