import logging
from pathlib import Path

import pytest

from zshstrap.core.config import default_config
from zshstrap.core.registry import load_tasks
from zshstrap.core.settings import Elevation, Settings


@pytest.fixture(autouse=True)
def isolated_home(tmp_path_factory, monkeypatch) -> Path:
    """Point HOME at a temp dir and clear the variables zshstrap reads."""
    home = tmp_path_factory.mktemp("home")
    monkeypatch.setenv("HOME", str(home))
    for var in (
        "ZSHSTRAP_LOG_LEVEL",
        "ZSHSTRAP_FORCE_UPDATE",
        "ZSHSTRAP_CONFIG_FILE",
        "SSH_CONNECTION",
        "SSH_TTY",
        "SSH_CLIENT",
        "FORCE_COLOR",
        "TTY_COMPATIBLE",
    ):
        monkeypatch.delenv(var, raising=False)
    return home


@pytest.fixture(autouse=True)
def preload_task_registry():
    """Register every task before tests that look at the registry directly."""
    load_tasks()


@pytest.fixture
def settings(isolated_home) -> Settings:
    config = default_config()
    config["script_behavior"]["log_to_file"] = False
    return Settings(home=isolated_home, elevation=Elevation.NONE, config=config)


@pytest.fixture
def make_ctx(settings):
    """Build the context dict the bootstrap command passes to each task."""

    def _make(dry_run=True, assume_yes=False, **overrides):
        ctx = {
            "settings": settings,
            "dry_run": dry_run,
            "verbose": False,
            "assume_yes": assume_yes,
        }
        ctx.update(overrides)
        return ctx

    return _make


@pytest.fixture(autouse=True)
def restore_root_logging():
    """CLI commands reconfigure the root logger; put it back after each test."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in list(root.handlers):
        if handler in handlers or type(handler).__module__.startswith("_pytest"):
            continue
        root.removeHandler(handler)
        handler.close()
    root.setLevel(level)
