import pytest

from zshstrap.core.task import Severity
from zshstrap.tasks import framework
from zshstrap.tasks.framework import (
    ensure_plugin,
    oh_my_zsh_plugins_task,
    oh_my_zsh_task,
    omz_dir,
)


def _result(success=True, stderr=""):
    return type(
        "MockResult",
        (),
        {"success": success, "returncode": 0 if success else 128, "stdout": "", "stderr": stderr},
    )()


def _install_omz(settings):
    entry = omz_dir(settings) / "oh-my-zsh.sh"
    entry.parent.mkdir(parents=True)
    entry.write_text("# framework\n")


def test_installer_keeps_zshrc_and_login_shell(monkeypatch, make_ctx, settings):
    calls = []

    def _run(cmd, **kwargs):
        calls.append((cmd, kwargs))
        if cmd[0] == "/bin/sh":
            _install_omz(settings)
        return _result()

    monkeypatch.setattr(framework, "run_command", _run)
    result = oh_my_zsh_task(make_ctx(dry_run=False))

    assert result.success is True
    assert result.changed is True
    cmd, kwargs = calls[0]
    assert "--unattended" in cmd[2]
    assert kwargs["env"]["RUNZSH"] == "no"
    assert kwargs["env"]["CHSH"] == "no"
    assert kwargs["env"]["KEEP_ZSHRC"] == "yes"
    assert kwargs["env"]["ZSH"] == str(omz_dir(settings))
    assert calls[1][0][:2] == ["zsh", "-n"]


def test_already_installed_only_verifies(monkeypatch, make_ctx, settings):
    _install_omz(settings)
    calls = []
    monkeypatch.setattr(framework, "run_command", lambda cmd, **kwargs: calls.append(cmd) or _result())

    result = oh_my_zsh_task(make_ctx(dry_run=False))
    assert result.success is True
    assert result.changed is False
    assert [c[0] for c in calls] == ["zsh"]


def test_missing_entrypoint_after_install_fails(monkeypatch, make_ctx, settings):
    monkeypatch.setattr(framework, "run_command", lambda cmd, **kwargs: _result())
    result = oh_my_zsh_task(make_ctx(dry_run=False))
    assert result.success is False
    assert result.messages[0][0] is Severity.ERROR


def test_installer_failure_fails_task(monkeypatch, make_ctx):
    monkeypatch.setattr(framework, "run_command", lambda cmd, **kwargs: _result(False))
    result = oh_my_zsh_task(make_ctx(dry_run=False))
    assert result.success is False
    assert "install failed" in result.messages[0][1]


def test_task_is_fatal():
    assert oh_my_zsh_task._task_fatal is True
    assert oh_my_zsh_plugins_task._task_fatal is False


def test_plugin_present_is_not_cloned(monkeypatch, settings):
    (omz_dir(settings) / "custom" / "plugins" / "zsh-autosuggestions").mkdir(parents=True)
    monkeypatch.setattr(framework, "run_command", lambda *a, **k: pytest.fail("should not clone"))
    outcome = ensure_plugin(settings, "zsh-autosuggestions", "https://example.com/x")
    assert outcome.status == "present"


def test_plugins_cloned_shallow(monkeypatch, make_ctx, settings):
    _install_omz(settings)
    calls = []
    monkeypatch.setattr(framework, "run_command", lambda cmd, **kwargs: calls.append(cmd) or _result())

    result = oh_my_zsh_plugins_task(make_ctx(dry_run=False))

    assert result.success is True
    assert result.changed is True
    assert len(calls) == 2
    assert all(cmd[:4] == ["git", "clone", "--depth", "1"] for cmd in calls)
    assert calls[0][-1].endswith("custom/plugins/zsh-autosuggestions")


def test_plugin_clone_failure_is_reported(monkeypatch, make_ctx, settings):
    _install_omz(settings)
    monkeypatch.setattr(
        framework, "run_command", lambda cmd, **kwargs: _result(False, "fatal: repository not found")
    )
    result = oh_my_zsh_plugins_task(make_ctx(dry_run=False))
    assert result.success is False
    assert any("repository not found" in msg for _, msg in result.messages)


def test_plugins_without_framework_warn(make_ctx):
    result = oh_my_zsh_plugins_task(make_ctx(dry_run=False))
    assert result.success is False
    assert result.messages[0][0] is Severity.WARNING
