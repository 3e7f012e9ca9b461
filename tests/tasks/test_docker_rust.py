import os

import pytest

from zshstrap.core.task import Severity
from zshstrap.tasks import docker, rust
from zshstrap.tasks.docker import docker_task
from zshstrap.tasks.rust import ensure_cargo_on_path, rust_toolchain_task


def _result(success=True):
    return type(
        "MockResult",
        (),
        {"success": success, "returncode": 0 if success else 1, "stdout": "", "stderr": ""},
    )()


# --- Docker ---


def test_docker_present_is_skipped(monkeypatch, make_ctx):
    monkeypatch.setattr(docker, "command_exists", lambda name: True)
    monkeypatch.setattr(docker, "run_command", lambda *a, **k: pytest.fail("should not install"))
    result = docker_task(make_ctx(dry_run=False))
    assert result.success and not result.changed


def test_docker_disabled_in_config(monkeypatch, make_ctx, settings):
    settings.config["tools"]["docker"]["enabled"] = False
    monkeypatch.setattr(docker, "command_exists", lambda name: pytest.fail("should not probe"))
    assert docker_task(make_ctx()).success


def test_docker_install_runs_script_with_elevation(monkeypatch, make_ctx):
    calls = []
    monkeypatch.setattr(docker.sys, "platform", "linux")
    monkeypatch.setattr(docker, "command_exists", lambda name: False)
    monkeypatch.setattr(docker, "run_command", lambda cmd, **kwargs: calls.append(cmd) or _result())

    result = docker_task(make_ctx(dry_run=False))

    assert result.success and result.changed
    assert calls[0][:2] == ["curl", "-fsSL"]
    assert calls[1][0] == "sh"
    assert calls[1][1] == calls[0][-1]


def test_docker_install_failure_is_non_fatal(monkeypatch, make_ctx):
    monkeypatch.setattr(docker.sys, "platform", "linux")
    monkeypatch.setattr(docker, "command_exists", lambda name: False)
    monkeypatch.setattr(docker, "run_command", lambda cmd, **kwargs: _result(False))

    result = docker_task(make_ctx(dry_run=False))
    assert result.success is False
    assert result.messages[0][0] is Severity.WARNING
    assert docker_task._task_fatal is False


def test_docker_on_macos_only_hints(monkeypatch, make_ctx):
    monkeypatch.setattr(docker.sys, "platform", "darwin")
    monkeypatch.setattr(docker, "command_exists", lambda name: False)
    result = docker_task(make_ctx(dry_run=False))
    assert result.success is True
    assert result.messages[0][0] is Severity.HINT


# --- Rust ---


def test_cargo_bin_prepended_once(monkeypatch, settings):
    monkeypatch.setenv("PATH", "/usr/bin")
    (settings.home / ".cargo" / "bin").mkdir(parents=True)

    assert ensure_cargo_on_path(settings) is True
    assert ensure_cargo_on_path(settings) is False
    assert os.environ["PATH"].split(os.pathsep) == [str(settings.home / ".cargo" / "bin"), "/usr/bin"]


def test_rustup_installed_without_touching_profile(monkeypatch, make_ctx):
    monkeypatch.setenv("PATH", "/usr/bin")
    calls = []
    monkeypatch.setattr(rust, "command_exists", lambda name: False)
    monkeypatch.setattr(rust, "run_command", lambda cmd, **kwargs: calls.append(cmd) or _result())

    result = rust_toolchain_task(make_ctx(dry_run=False))

    assert result.success and result.changed
    assert "--no-modify-path" in calls[0][2]
    assert "-y" in calls[0][2]


def test_rustup_present_does_nothing_by_default(monkeypatch, make_ctx):
    monkeypatch.setenv("PATH", "/usr/bin")
    monkeypatch.setattr(rust, "command_exists", lambda name: True)
    monkeypatch.setattr(rust, "run_command", lambda *a, **k: pytest.fail("should not run"))
    result = rust_toolchain_task(make_ctx(dry_run=False))
    assert result.success and not result.changed


def test_update_on_run_failure_is_only_a_warning(monkeypatch, make_ctx, settings):
    monkeypatch.setenv("PATH", "/usr/bin")
    settings.config["tools"]["rust"]["update_on_run"] = True
    calls = []
    monkeypatch.setattr(rust, "command_exists", lambda name: True)
    monkeypatch.setattr(rust, "run_command", lambda cmd, **kwargs: calls.append(cmd) or _result(False))

    result = rust_toolchain_task(make_ctx(dry_run=False))
    assert calls == [["rustup", "update"]]
    assert result.success is True
    assert result.messages[-1][0] is Severity.WARNING


def test_rustup_install_failure(monkeypatch, make_ctx):
    monkeypatch.setenv("PATH", "/usr/bin")
    monkeypatch.setattr(rust, "command_exists", lambda name: False)
    monkeypatch.setattr(rust, "run_command", lambda cmd, **kwargs: _result(False))
    result = rust_toolchain_task(make_ctx(dry_run=False))
    assert result.success is False
