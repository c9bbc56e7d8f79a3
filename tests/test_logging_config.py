"""Tests for the logging setup."""

import logging
from logging.handlers import RotatingFileHandler

import pytest

from src.logging_config import setup_logging


@pytest.fixture
def restore_logging():
    """Put root and package handlers back after setup_logging() replaces them."""
    root = logging.getLogger()
    explorer = logging.getLogger("src.geo_explorer")
    saved = (list(root.handlers), root.level, list(explorer.handlers))
    yield
    for handler in explorer.handlers:
        handler.close()
    root.handlers[:] = saved[0]
    root.setLevel(saved[1])
    explorer.handlers[:] = saved[2]


def test_file_handler_for_package(tmp_path, restore_logging):
    setup_logging(log_dir=tmp_path)

    handlers = logging.getLogger("src.geo_explorer").handlers
    assert len(handlers) == 1
    assert isinstance(handlers[0], RotatingFileHandler)

    logging.getLogger("src.geo_explorer.navigation").debug("view changed")
    handlers[0].flush()
    assert "view changed" in (tmp_path / "geo_explorer.log").read_text(encoding="utf-8")


def test_repeat_setup_does_not_duplicate(tmp_path, restore_logging):
    setup_logging(log_dir=tmp_path)
    setup_logging(log_dir=tmp_path)

    assert len(logging.getLogger("src.geo_explorer").handlers) == 1
    assert len(logging.getLogger().handlers) == 1
