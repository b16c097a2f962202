"""Loguru sinks for the engine.

Console output is colourised for humans. The optional file sink rotates,
compresses old files and can emit one JSON object per record so the
structured kwargs passed to ``logger.info(..., key=value)`` survive intact.
"""

import sys
from pathlib import Path

from loguru import logger

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> <level>{level: <8}</level> "
    "<cyan>{name}:{line}</cyan> {message} <dim>{extra}</dim>"
)
FILE_FORMAT = "{time:YYYY-MM-DDTHH:mm:ss.SSSZZ} {level: <8} {name}:{function}:{line} {message} {extra}"


def setup_logger(
    level: str = "INFO",
    log_file: str | None = None,
    *,
    serialize: bool = False,
    rotation: str = "10 MB",
    retention: str = "7 days",
) -> list[int]:
    """Replace every loguru sink with the engine's console and file sinks.

    Returns the ids of the installed sinks, console first.
    """
    logger.remove()
    sink_ids = [logger.add(sys.stderr, format=CONSOLE_FORMAT, level=level, colorize=True)]

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        sink_ids.append(
            logger.add(
                path,
                format=FILE_FORMAT,
                level=level,
                serialize=serialize,
                rotation=rotation,
                retention=retention,
                compression="zip",
                backtrace=True,
                diagnose=False,
            )
        )

    logger.info("Logger initialized with level={}", level, sinks=len(sink_ids), serialize=serialize)
    return sink_ids
