# zshstrap/tasks/fzf.py

import sys
from pathlib import Path

import typer

from zshstrap.core.command import command_exists, run_command
from zshstrap.core.logger import LoggerProxy
from zshstrap.core.registry import task
from zshstrap.core.settings import Settings
from zshstrap.core.task import Severity, TaskContext, TaskResult

log = LoggerProxy(__name__)

FZF_REPO = "https://github.com/junegunn/fzf.git"


def fzf_dir(settings: Settings) -> Path:
    return settings.home / ".fzf"


def is_fzf_installed(settings: Settings) -> bool:
    return command_exists("fzf") or (fzf_dir(settings) / "bin" / "fzf").is_file()


def install_fzf(settings: Settings, dry_run: bool = False) -> bool:
    target = fzf_dir(settings)
    if not target.is_dir():
        cloned = run_command(["git", "clone", "--depth", "1", FZF_REPO, str(target)], dry_run=dry_run, check=True)
        if not cloned.success:
            return False
    # --no-update-rc: the synced .zshrc already sources ~/.fzf.zsh
    return run_command(
        [str(target / "install"), "--all", "--no-update-rc"], dry_run=dry_run, check=True
    ).success


def _stdin_is_interactive() -> bool:
    return sys.stdin is not None and sys.stdin.isatty()


def confirm_install(settings: Settings, assume_yes: bool, dry_run: bool = False) -> bool | None:
    """
    Ask once whether to install fzf.

    Returns True/False for an answer, or None when nobody can be asked.
    The sentinel is written after any answer so the question never repeats.
    """
    if assume_yes:
        answer = True
    elif _stdin_is_interactive():
        answer = typer.confirm("fzf is not installed. Install it into ~/.fzf now?", default=True)
    else:
        return None

    if not dry_run:
        settings.fzf_sentinel_path.touch()
    return answer


@task("Fuzzy Finder")
def fzf_task(ctx: TaskContext) -> TaskResult:
    settings = ctx["settings"]
    dry_run = ctx["dry_run"]
    result = TaskResult(name="Fuzzy Finder", success=True)

    if not settings.tool_config("fzf").get("enabled", True):
        result.messages.append((Severity.DEBUG, "fzf disabled in config"))
        return result

    if is_fzf_installed(settings):
        result.messages.append((Severity.DEBUG, "fzf already installed"))
        return result

    if settings.fzf_sentinel_path.exists() and not ctx.get("assume_yes", False):
        result.messages.append(
            (Severity.DEBUG, f"fzf install already offered; delete {settings.fzf_sentinel_path} to be asked again")
        )
        return result

    answer = confirm_install(settings, ctx.get("assume_yes", False), dry_run=dry_run)
    if answer is None:
        result.messages.append((Severity.HINT, "fzf is not installed; rerun with --yes to install it"))
        return result
    if not answer:
        result.messages.append((Severity.INFO, "fzf install declined"))
        return result

    if not install_fzf(settings, dry_run=dry_run):
        result.success = False
        result.messages.append((Severity.WARNING, "fzf install failed"))
        return result

    result.changed = not dry_run
    result.messages.append((Severity.INFO, f"Installed fzf into {fzf_dir(settings)}"))
    return result
