"""Loguru sink setup driven by the logging section of the configuration."""

from __future__ import annotations

import sys
from pathlib import Path

from loguru import logger

from robust_icp.config import LoggingConfig


def configure_logging(config: LoggingConfig) -> None:
    """Replace the default loguru sink with the configured one."""
    logger.remove()
    output = config.output.lower()
    if output == "stdout":
        logger.add(sys.stdout, level=config.level.upper())
    elif output == "stderr":
        logger.add(sys.stderr, level=config.level.upper())
    else:
        path = Path(config.output)
        path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(path, level=config.level.upper())
    logger.debug(f"Logging configured: level={config.level}, output={config.output}")
