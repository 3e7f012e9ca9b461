# zshstrap/tasks/rust.py

import os
from pathlib import Path

from zshstrap.core.command import command_exists, run_command
from zshstrap.core.logger import LoggerProxy
from zshstrap.core.registry import task
from zshstrap.core.settings import Settings
from zshstrap.core.task import Severity, TaskContext, TaskResult

log = LoggerProxy(__name__)

RUSTUP_INSTALL_URL = "https://sh.rustup.rs"


def cargo_bin_dir(settings: Settings) -> Path:
    return settings.home / ".cargo" / "bin"


def ensure_cargo_on_path(settings: Settings) -> bool:
    """Put ~/.cargo/bin on this process's PATH so later steps find cargo. Returns True if PATH changed."""
    bin_dir = cargo_bin_dir(settings)
    if not bin_dir.is_dir():
        return False
    entries = os.environ.get("PATH", "").split(os.pathsep)
    if str(bin_dir) in entries:
        return False
    os.environ["PATH"] = os.pathsep.join([str(bin_dir), *[e for e in entries if e]])
    log.debug(f"Prepended {bin_dir} to PATH")
    return True


def install_rustup(settings: Settings, dry_run: bool = False) -> bool:
    log.info("rustup not found. Installing the Rust toolchain...")
    cmd = [
        "/bin/sh",
        "-c",
        f"curl --proto '=https' --tlsv1.2 -sSf {RUSTUP_INSTALL_URL} | sh -s -- -y --no-modify-path",
    ]
    env = {**os.environ, "HOME": str(settings.home)}
    return run_command(cmd, dry_run=dry_run, check=True, env=env).success


def update_toolchain(dry_run: bool = False) -> bool:
    result = run_command(["rustup", "update"], dry_run=dry_run, check=False)
    if not result.success and not dry_run:
        log.warning("'rustup update' finished with errors, but continuing.")
    return result.success


@task("Rust Toolchain")
def rust_toolchain_task(ctx: TaskContext) -> TaskResult:
    settings = ctx["settings"]
    dry_run = ctx["dry_run"]
    rust_cfg = settings.tool_config("rust")
    result = TaskResult(name="Rust Toolchain", success=True)

    if not rust_cfg.get("enabled", True):
        result.messages.append((Severity.DEBUG, "Rust toolchain disabled in config"))
        return result

    ensure_cargo_on_path(settings)

    if not command_exists("rustup"):
        if not install_rustup(settings, dry_run=dry_run):
            result.success = False
            result.messages.append((Severity.WARNING, "rustup install failed"))
            return result
        ensure_cargo_on_path(settings)
        result.changed = not dry_run
        result.messages.append((Severity.INFO, "Installed rustup and the stable toolchain"))
        return result

    if rust_cfg.get("update_on_run", False):
        if update_toolchain(dry_run=dry_run):
            result.messages.append((Severity.INFO, "Rust toolchain is up to date"))
        else:
            result.messages.append((Severity.WARNING, "rustup update reported errors"))
    return result
