"""Pytest configuration for all tests."""

import os

import pytest


@pytest.fixture
def clean_env(monkeypatch):
    """Keep the host's RELAY_* variables out of settings under test."""
    for key in list(os.environ):
        if key.startswith("RELAY_"):
            monkeypatch.delenv(key, raising=False)
    return monkeypatch
