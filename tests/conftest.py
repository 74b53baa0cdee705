"""Shared fixtures for the test suite."""

import pytest

from lift_scheduler.io.memory_store import MemoryDocumentStore


@pytest.fixture
def memory_store():
    return MemoryDocumentStore()


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """Keep ~/.lift-scheduler overrides of the developer machine out of tests."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    return home
