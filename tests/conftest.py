"""Shared test fixtures and configuration.

Provides infrastructure to isolate tests from real filesystem/API state.
"""

from __future__ import annotations

import logging

import pytest

from taskboard_cli.config import ENV_API_TOKEN, ENV_API_URL, ConfigManager

from .fakes import FakeTaskSource, make_tasks


def _clear_app_handlers() -> None:
    app_logger = logging.getLogger("taskboard_cli")
    for handler in list(app_logger.handlers):
        handler.close()
        app_logger.removeHandler(handler)


@pytest.fixture(autouse=True)
def config_manager(tmp_path, monkeypatch):
    """Point config and log files at *tmp_path* for every test."""
    import taskboard_cli.config as config_mod
    import taskboard_cli.utils.logger as logger_mod

    monkeypatch.delenv(ENV_API_URL, raising=False)
    monkeypatch.delenv(ENV_API_TOKEN, raising=False)
    monkeypatch.setattr(logger_mod, "user_log_dir", lambda *_: str(tmp_path / "logs"))
    monkeypatch.setattr(logger_mod, "_logger", None)
    _clear_app_handlers()

    manager = ConfigManager("default", config_dir=tmp_path / "config")
    monkeypatch.setattr(config_mod, "_config_manager", manager)

    yield manager

    _clear_app_handlers()


@pytest.fixture
def source() -> FakeTaskSource:
    """A server holding project 'proj-1' with 25 tasks."""
    return FakeTaskSource({"proj-1": make_tasks(25)})
