"""
Tests for logging setup.

Verifies:
  - Console level from ints and names, unknown names rejected
  - A rotating file handler is added when a log directory is given
  - Repeated calls replace the previous handlers
"""

import logging
import logging.handlers

import pytest

from orbit_viz.core.log_config import LOG_FILENAME, configure_logging


@pytest.fixture(autouse=True)
def _restore_logger():
    yield
    logger = logging.getLogger("orbit_viz")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


def test_level_by_name():
    logger = configure_logging("debug")
    assert logger.name == "orbit_viz"
    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 1
    assert logger.handlers[0].level == logging.DEBUG


def test_unknown_level():
    with pytest.raises(ValueError):
        configure_logging("chatty")


def test_file_handler(tmp_path):
    logger = configure_logging(logging.WARNING, tmp_path / "logs")
    rotating = [h for h in logger.handlers if isinstance(h, logging.handlers.RotatingFileHandler)]
    assert len(rotating) == 1
    assert logger.level == logging.DEBUG
    logging.getLogger("orbit_viz.scene").debug("hello from the scene")
    rotating[0].flush()
    assert "hello from the scene" in (tmp_path / "logs" / LOG_FILENAME).read_text(encoding="utf-8")


def test_reconfigure_replaces_handlers(tmp_path):
    configure_logging("info", tmp_path)
    logger = configure_logging("info")
    assert len(logger.handlers) == 1
    assert not logger.propagate
