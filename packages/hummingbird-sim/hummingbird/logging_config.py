"""
Logging setup shared by every Hummingbird module.

Importing this module configures the root handlers once. Outside of tests log
records go to a timestamped file under ``$HUMMINGBIRD_LOG_DIR`` (``./logs`` by
default); under pytest only warnings and errors reach stderr.
"""

import logging
import os
import sys
from datetime import UTC, datetime
from pathlib import Path

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
LOG_DIR_ENV_VAR = "HUMMINGBIRD_LOG_DIR"
LOG_LEVEL_NONE = "NONE"

# Environment variables may not be set yet at import time, so look at argv too
_is_testing = (
    "PYTEST_CURRENT_TEST" in os.environ
    or os.environ.get("TESTING") == "1"
    or "pytest" in sys.modules
    or (sys.argv and sys.argv[0].endswith("pytest"))
)


def _configure_file_logging() -> None:
    log_dir = Path(os.environ.get(LOG_DIR_ENV_VAR, Path.cwd() / "logs"))
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        log_file = log_dir / f"hummingbird_{datetime.now(UTC).strftime('%Y%m%d_%H%M%S')}.log"
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logging.basicConfig(format=LOG_FORMAT, handlers=[file_handler])
    except OSError as exc:
        logging.basicConfig(format=LOG_FORMAT, level=logging.WARNING)
        logging.getLogger(__name__).warning(
            "Failed to initialize file logging in %s: %s. Falling back to stderr logging.",
            log_dir,
            exc,
        )


if _is_testing:
    logging.basicConfig(format=LOG_FORMAT, level=logging.WARNING)
else:
    _configure_file_logging()

logger = logging.getLogger("hummingbird")


def set_log_level(level: str) -> None:
    """
    Set the level of the package logger and its file handlers.

    Parameters
    ----------
    level : str
        A standard level name, or ``"NONE"`` to silence the package.
    """
    level = level.upper()
    if level == LOG_LEVEL_NONE:
        logger.disabled = True
        return

    logger.disabled = False
    logger.setLevel(level)
    for handler in logging.getLogger().handlers:
        if isinstance(handler, logging.FileHandler):
            handler.setLevel(level)
