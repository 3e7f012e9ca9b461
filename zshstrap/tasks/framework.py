# zshstrap/tasks/framework.py

import os
from pathlib import Path

from zshstrap.core.command import directory_exists, run_command
from zshstrap.core.logger import LoggerProxy
from zshstrap.core.registry import task
from zshstrap.core.settings import Settings
from zshstrap.core.task import Severity, TaskContext, TaskResult
from zshstrap.core.types import InstallOutcome

log = LoggerProxy(__name__)

# --- Constants ---
OMZ_INSTALL_URL = "https://raw.githubusercontent.com/ohmyzsh/ohmyzsh/master/tools/install.sh"
OMZ_DIRNAME = ".oh-my-zsh"
OMZ_ENTRYPOINT = "oh-my-zsh.sh"


def omz_dir(settings: Settings) -> Path:
    return settings.home / OMZ_DIRNAME


def is_omz_installed(settings: Settings) -> bool:
    return directory_exists(omz_dir(settings))


def install_omz(settings: Settings, dry_run: bool = False) -> bool:
    """Runs the upstream installer unattended; it must not touch ~/.zshrc or the login shell."""
    if is_omz_installed(settings):
        log.info("Oh My Zsh already installed.")
        return True

    log.info("Oh My Zsh not found. Attempting installation...")
    env = {
        **os.environ,
        "HOME": str(settings.home),
        "ZSH": str(omz_dir(settings)),
        "RUNZSH": "no",
        "CHSH": "no",
        "KEEP_ZSHRC": "yes",
    }
    cmd = ["/bin/sh", "-c", f"curl -fsSL {OMZ_INSTALL_URL} | sh -s -- --unattended"]
    return run_command(cmd, dry_run=dry_run, check=True, env=env).success


def verify_omz_sources(settings: Settings) -> bool:
    """The framework entrypoint exists and zsh can parse it."""
    entrypoint = omz_dir(settings) / OMZ_ENTRYPOINT
    if not entrypoint.is_file():
        log.error(f"{entrypoint} is missing.")
        return False
    result = run_command(["zsh", "-n", str(entrypoint)], check=True)
    if not result.success:
        log.error(f"zsh cannot source {entrypoint}.")
    return result.success


@task("Oh My Zsh", fatal=True)
def oh_my_zsh_task(ctx: TaskContext) -> TaskResult:
    settings = ctx["settings"]
    dry_run = ctx["dry_run"]
    was_installed = is_omz_installed(settings)

    if not install_omz(settings, dry_run=dry_run):
        return TaskResult(
            name="Oh My Zsh",
            success=False,
            messages=[(Severity.ERROR, "Oh My Zsh install failed")],
        )

    if not dry_run and not verify_omz_sources(settings):
        return TaskResult(
            name="Oh My Zsh",
            success=False,
            messages=[(Severity.ERROR, f"Oh My Zsh failed to source from {omz_dir(settings)}")],
        )

    return TaskResult(name="Oh My Zsh", success=True, changed=not was_installed and not dry_run)


def ensure_plugin(settings: Settings, name: str, url: str, dry_run: bool = False) -> InstallOutcome:
    target = omz_dir(settings) / "custom" / "plugins" / name
    if directory_exists(target):
        return InstallOutcome(name, "present")

    log.info(f"Cloning Oh My Zsh plugin {name}...")
    result = run_command(
        ["git", "clone", "--depth", "1", url, str(target)], dry_run=dry_run, check=True
    )
    if not result.success:
        return InstallOutcome(name, "failed", reason=result.stderr or f"git clone exited {result.returncode}")
    return InstallOutcome(name, "installed")


@task("Oh My Zsh Plugins")
def oh_my_zsh_plugins_task(ctx: TaskContext) -> TaskResult:
    settings = ctx["settings"]
    dry_run = ctx["dry_run"]
    plugins: dict[str, str] = settings.tool_config("oh_my_zsh").get("plugins", {})
    result = TaskResult(name="Oh My Zsh Plugins", success=True)

    if not dry_run and not is_omz_installed(settings):
        result.success = False
        result.messages.append((Severity.WARNING, "Oh My Zsh is not installed; plugins skipped"))
        return result

    for name, url in plugins.items():
        outcome = ensure_plugin(settings, name, url, dry_run=dry_run)
        if outcome.status == "installed":
            result.changed = not dry_run
            result.messages.append((Severity.INFO, f"Installed plugin {name}"))
        elif not outcome.ok:
            result.success = False
            result.messages.append((Severity.WARNING, f"Plugin {name} failed: {outcome.reason}"))
    return result
