"""Loguru sinks for the relay process.

``setup_logger()`` runs once from ``main.py``; later calls do nothing.  Tests
never call it and keep Loguru's default stderr sink.
"""

import sys
from pathlib import Path
from typing import Optional

from loguru import logger

from gemrelay.settings import Settings
from gemrelay.settings import settings as default_settings

# file name -> minimum level
FILE_SINKS = {
    "app.log": "INFO",
    "debug.log": "DEBUG",
}

STDERR_FORMAT = "<green>{time:HH:mm:ss}</green> <level>{level: <8}</level> {message}"

_configured = False


def setup_logger(settings: Optional[Settings] = None, level: Optional[str] = None) -> None:
    global _configured
    if _configured:
        return

    settings = settings or default_settings
    level = (level or settings.LOG_LEVEL).upper()
    log_dir = Path(settings.LOG_DIR)
    log_dir.mkdir(parents=True, exist_ok=True)

    logger.remove()
    for filename, file_level in FILE_SINKS.items():
        logger.add(
            log_dir / filename,
            level=file_level,
            rotation=settings.LOG_ROTATION,
            retention=settings.LOG_RETENTION,
        )
    logger.add(sys.stderr, level=level, format=STDERR_FORMAT, colorize=True)

    _configured = True
    logger.info(f"Logging to {log_dir}/ (stderr level {level}, rotation {settings.LOG_ROTATION})")
