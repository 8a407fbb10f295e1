"""Shared fixtures for logging tests."""

import logging

import pytest


@pytest.fixture
def restore_root_logger():
    """Put the root logger's handlers and level back after a test."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield root
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        if handler not in handlers:
            handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)
