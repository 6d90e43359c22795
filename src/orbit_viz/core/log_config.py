"""Logging setup for the viewer and analysis scripts."""
from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_FILENAME = "orbit_viz.log"


def _rotating_handler(
    log_dir: Path, formatter: logging.Formatter, level: int
) -> logging.handlers.RotatingFileHandler:
    handler = logging.handlers.RotatingFileHandler(
        log_dir / LOG_FILENAME,
        maxBytes=5_000_000,  # 5MB
        backupCount=3,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def configure_logging(
    level: int | str = logging.INFO,
    log_dir: Optional[str | Path] = None,
) -> logging.Logger:
    """
    Configure the ``orbit_viz`` logger with a console handler.

    When ``log_dir`` is given, a rotating debug-level file log is added as well.
    Calling this again replaces the handlers installed by the previous call.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            raise ValueError("Unknown log level")

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    logger = logging.getLogger("orbit_viz")
    logger.setLevel(logging.DEBUG if log_dir is not None else level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(formatter)
    logger.addHandler(console)

    if log_dir is not None:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        logger.addHandler(_rotating_handler(log_dir, formatter, logging.DEBUG))

    logger.propagate = False
    logging.getLogger("PIL").setLevel(logging.WARNING)
    logging.getLogger("matplotlib").setLevel(logging.WARNING)
    return logger


__all__ = ["configure_logging"]
