"""Pytest configuration for envschema tests

WHAT: Shared fixtures for environment-file and environment-mapping tests
WHY: configure() mutates the environment it is given; tests pass their own
    dicts, and the few that touch os.environ get it restored afterwards.
"""

import os

import pytest


@pytest.fixture(autouse=True)
def _no_envschema_options(monkeypatch):
    """ConfigOptions reads ENVSCHEMA_* from os.environ; keep defaults predictable."""
    monkeypatch.delenv("ENVSCHEMA_BASE_DIR", raising=False)
    monkeypatch.delenv("ENVSCHEMA_SHOW_ENVIRONMENT_FILES", raising=False)


@pytest.fixture
def restore_os_environ():
    """Snapshot os.environ and put it back, including keys loaded from files."""
    saved = dict(os.environ)
    yield os.environ
    os.environ.clear()
    os.environ.update(saved)


@pytest.fixture
def env_dir(tmp_path):
    """Directory for environment files. Returns a writer: write(name, text)."""

    def write(name: str, text: str):
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path

    write.path = tmp_path
    return write
