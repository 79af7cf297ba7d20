"""Shared fixtures for the tradepulse test suite."""

from __future__ import annotations

import logging
import os

import pytest


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch):
    """Keep developer env vars out of Settings."""
    for key in list(os.environ):
        if key.startswith("TRADEPULSE_"):
            monkeypatch.delenv(key)


@pytest.fixture(autouse=True)
def _drop_app_log_handler():
    """Remove the handler installed by ``setup_logging`` after each test.

    The CLI binds it to the runner's temporary stderr.
    """
    root = logging.getLogger()
    level = root.level
    yield
    root.setLevel(level)
    for handler in list(root.handlers):
        if handler.get_name() == "tradepulse":
            root.removeHandler(handler)
