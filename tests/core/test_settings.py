import json

import pytest

from zshstrap.core import settings as settings_mod
from zshstrap.core.logger import LogLevel
from zshstrap.core.settings import Elevation, Settings, build_settings, resolve_elevation


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("DEBUG", LogLevel.DEBUG),
        ("debug", LogLevel.DEBUG),
        ("Info", LogLevel.INFO),
        ("WARN", LogLevel.WARN),
        ("warning", LogLevel.WARN),
        ("ERROR", LogLevel.ERROR),
        ("verbose", LogLevel.INFO),
        ("", LogLevel.INFO),
        (None, LogLevel.INFO),
    ],
)
def test_log_level_parse(raw, expected):
    assert LogLevel.parse(raw) is expected


def test_log_level_order():
    assert LogLevel.DEBUG < LogLevel.INFO < LogLevel.WARN < LogLevel.ERROR
    assert LogLevel.WARN <= LogLevel.WARN
    assert sorted([LogLevel.ERROR, LogLevel.DEBUG, LogLevel.WARN]) == [
        LogLevel.DEBUG,
        LogLevel.WARN,
        LogLevel.ERROR,
    ]


def test_build_settings_from_env(tmp_path):
    env = {
        "HOME": str(tmp_path),
        "ZSHSTRAP_LOG_LEVEL": "warn",
        "ZSHSTRAP_FORCE_UPDATE": "1",
        "SSH_CONNECTION": "10.0.0.1 5555 10.0.0.2 22",
    }
    s = build_settings(env=env, elevation=Elevation.NONE)
    assert s.home == tmp_path
    assert s.log_level is LogLevel.WARN
    assert s.force_update is True
    assert s.ssh_session is True
    assert s.editor == "vim"
    assert s.zshrc_path == tmp_path / ".zshrc"
    assert s.local_override_path == tmp_path / ".zshrc.local"
    assert s.local_hash_path == tmp_path / ".zshrc_local_hash"
    assert s.remote_hash_path == tmp_path / ".zshrc_remote_hash"


@pytest.mark.parametrize("value", ["0", "", "no", "false"])
def test_force_update_is_off_for_falsy_values(tmp_path, value):
    s = build_settings(env={"HOME": str(tmp_path), "ZSHSTRAP_FORCE_UPDATE": value}, elevation=Elevation.NONE)
    assert s.force_update is False


def test_local_session_uses_local_editor(tmp_path):
    s = build_settings(env={"HOME": str(tmp_path)}, elevation=Elevation.NONE)
    assert s.ssh_session is False
    assert s.editor == "code --wait"


def test_config_file_from_env_overrides_defaults(tmp_path):
    cfg = tmp_path / "custom.json"
    cfg.write_text(json.dumps({"editor": {"local": "nano"}, "zshrc_path": "~/dotfiles/zshrc"}))
    s = build_settings(
        env={"HOME": str(tmp_path), "ZSHSTRAP_CONFIG_FILE": str(cfg)},
        elevation=Elevation.NONE,
    )
    assert s.editor == "nano"
    assert s.zshrc_path == tmp_path / "dotfiles" / "zshrc"
    # untouched keys keep their defaults
    assert s.config["editor"]["ssh"] == "vim"


def test_tool_config_returns_a_copy(settings):
    commands = settings.tool_config("required_commands")
    commands.append("make")
    assert "make" not in settings.tool_config("required_commands")
    assert settings.tool_config("not-a-tool") == {}


def test_elevation_root_runs_as_is(monkeypatch):
    monkeypatch.setattr(settings_mod.os, "geteuid", lambda: 0, raising=False)
    monkeypatch.setattr(settings_mod.shutil, "which", lambda name: "/usr/bin/sudo")
    assert resolve_elevation() is Elevation.NONE


def test_elevation_prefers_sudo_when_available(monkeypatch):
    monkeypatch.setattr(settings_mod.os, "geteuid", lambda: 1000, raising=False)
    monkeypatch.setattr(settings_mod.shutil, "which", lambda name: "/usr/bin/sudo")
    assert resolve_elevation() is Elevation.SUDO
    assert Elevation.SUDO.wrap(["apt-get", "install", "-y", "zsh"]) == [
        "sudo",
        "apt-get",
        "install",
        "-y",
        "zsh",
    ]


def test_elevation_without_sudo(monkeypatch):
    monkeypatch.setattr(settings_mod.os, "geteuid", lambda: 1000, raising=False)
    monkeypatch.setattr(settings_mod.shutil, "which", lambda name: None)
    assert resolve_elevation() is Elevation.NONE
    assert Elevation.NONE.wrap(["true"]) == ["true"]


def test_settings_are_frozen(tmp_path):
    s = Settings(home=tmp_path)
    with pytest.raises(AttributeError):
        s.force_update = True  # type: ignore[misc]
