#!/usr/bin/env python3
"""
zshstrap - shell startup bootstrapper
=====================================

CLI entry point that wires up:
* Settings (environment + config file) & logging
* Task registration and the bootstrap run
* .zshrc sync against the remote gist
* dockerps, the colorized container table
"""

from __future__ import annotations

# ── Standard library ────────────────────────────────────────────────────────
import shlex
from typing import Annotated

# ── Third-party ─────────────────────────────────────────────────────────────
import typer
from rich.console import Console
from rich.markup import escape

# ── Local imports ───────────────────────────────────────────────────────────
from zshstrap import dockerps
from zshstrap.core import config as config_loader
from zshstrap.core import sync
from zshstrap.core.errors import ContainerRuntimeError, FatalStepError, FetchError
from zshstrap.core.logger import LoggerProxy, setup_logging
from zshstrap.core.orchestrator import format_summary, run_bootstrap
from zshstrap.core.registry import load_tasks
from zshstrap.core.settings import Settings, build_settings
from zshstrap.core.task import TaskContext

# ── Typer CLI app ───────────────────────────────────────────────────────────
app = typer.Typer(
    help="zshstrap - bootstrap a zsh development environment and keep .zshrc in sync.",
    add_completion=False,
)

DOCKERPS_CONTEXT = {"allow_extra_args": True, "ignore_unknown_options": True}


def _startup(verbose: bool = False) -> Settings:
    settings = build_settings()
    setup_logging(settings, verbose=verbose)
    return settings


def _fatal(message: str) -> typer.Exit:
    """Print a red diagnostic on stderr; the caller raises the returned Exit."""
    Console(stderr=True).print(f"[bold red]FATAL:[/] {escape(message)}", soft_wrap=True)
    return typer.Exit(code=1)


def _with_url_hint(settings: Settings, message: str) -> str:
    if settings.remote_url == config_loader.PLACEHOLDER_REMOTE_URL:
        return f"{message} (remote_url is still the placeholder; set it in your config file)"
    return message


# ── CLI commands ────────────────────────────────────────────────────────────
@app.command()
def bootstrap(
    dry_run: Annotated[
        bool, typer.Option("--dry-run", "-n", help="Print commands without executing.")
    ] = False,
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Enable verbose (DEBUG) output.")
    ] = False,
    yes: Annotated[
        bool, typer.Option("--yes", "-y", help="Answer yes to install prompts.")
    ] = False,
    only: Annotated[
        list[str] | None,
        typer.Option(
            "--only",
            "-o",
            help="Run only the named task(s); may be given several times, e.g. -o 'Docker' -o 'Fuzzy Finder'.",
        ),
    ] = None,
) -> None:
    """
    Bring the machine to the baseline: required commands, Oh My Zsh, Docker,
    Rust, CLI utilities, fzf, and a .zshrc sync check.

    Safe to run repeatedly; every step is skipped when already satisfied.
    """
    settings = _startup(verbose)
    log = LoggerProxy(__name__)

    ctx: TaskContext = {
        "settings": settings,
        "dry_run": dry_run,
        "verbose": verbose,
        "assume_yes": yes,
    }
    only_set = {name.strip() for name in only} if only else None

    try:
        results = run_bootstrap(load_tasks(), ctx, only=only_set)
    except ValueError as exc:
        typer.echo(f"ERROR: {exc}", err=True)
        raise typer.Exit(code=1) from None
    except FatalStepError as exc:
        raise _fatal(str(exc)) from None

    for line in format_summary(results):
        log.info(line)
    failed = [r.name for r in results if not r.success]
    if failed:
        log.warning("Finished with non-fatal failures: %s", ", ".join(failed))


@app.command(name="update-zshrc")
def update_zshrc_command() -> None:
    """Overwrite the local .zshrc with the remote copy."""
    settings = _startup()
    try:
        changed = sync.update_zshrc(settings)
    except FetchError as exc:
        raise _fatal(_with_url_hint(settings, str(exc))) from None
    except OSError as exc:
        raise _fatal(f"Could not write {settings.zshrc_path}: {exc}") from None
    if changed:
        typer.echo(f"Updated {settings.zshrc_path} from {settings.remote_url}")
    else:
        typer.echo(f"{settings.zshrc_path} is already in sync.")


@app.command(name="zshrc-diff")
def zshrc_diff_command() -> None:
    """Show how the local .zshrc differs from the remote copy."""
    settings = _startup()
    try:
        text = sync.zshrc_diff(settings)
    except FetchError as exc:
        raise _fatal(_with_url_hint(settings, str(exc))) from None
    if text:
        typer.echo(text, nl=not text.endswith("\n"))
    elif text == "":
        typer.echo("No differences.")


@app.command(name="sync-check")
def sync_check_command() -> None:
    """Compare the local .zshrc with the remote copy; ZSHSTRAP_FORCE_UPDATE applies it."""
    settings = _startup()
    try:
        state = sync.check_sync(settings)
    except OSError as exc:
        raise _fatal(f"Could not write {settings.zshrc_path}: {exc}") from None
    if state is None:
        typer.echo("Remote .zshrc unreachable; sync not checked.", err=True)
    elif state.in_sync:
        typer.echo(f"In sync ({state.remote_hash}).")
    elif settings.force_update:
        typer.echo(f"Updated to {state.remote_hash}.")
    else:
        typer.echo(f"Out of sync: local {state.local_hash or '(missing)'} != remote {state.remote_hash}")


@app.command(name="dockerps", add_help_option=False, context_settings=DOCKERPS_CONTEXT)
def dockerps_command(
    ctx: typer.Context,
    compose: Annotated[
        bool, typer.Option("--compose", help="List with `docker compose ps`.")
    ] = False,
    show_help: Annotated[bool, typer.Option("-h", "--help", help="Show usage.")] = False,
) -> None:
    """Containers as an aligned, color-coded NAMES / PORTS / STATUS table."""
    if show_help:
        typer.echo(dockerps.USAGE, nl=False)
        raise typer.Exit(code=0)

    _startup()
    mode = dockerps.ListingMode.COMPOSE if compose else dockerps.ListingMode.PLAIN
    try:
        rows = dockerps.list_containers(mode, list(ctx.args))
    except ContainerRuntimeError as exc:
        Console(stderr=True).print(f"[bold red]dockerps:[/] {escape(str(exc))}", soft_wrap=True)
        raise typer.Exit(code=1) from None
    dockerps.render_table(rows, Console())


@app.command(name="shell-env")
def shell_env_command() -> None:
    """Print exports for `eval "$(zshstrap shell-env)"` in .zshrc."""
    settings = _startup()
    override = shlex.quote(str(settings.local_override_path))
    typer.echo(f"export EDITOR={shlex.quote(settings.editor)}")
    typer.echo('export VISUAL="$EDITOR"')
    typer.echo(f"[ -r {override} ] && source {override}")


@app.command(name="generate-config")
def generate_config_command(
    force: Annotated[bool, typer.Option("--force", help="Overwrite existing config file.")] = False,
) -> None:
    """
    Write the default config to ~/.config/zshstrap/config.json.
    """
    settings = _startup()
    cfg_path = settings.home / ".config" / "zshstrap" / "config.json"
    if cfg_path.exists() and not force:
        typer.echo(f"Config already exists at {cfg_path} - use --force to overwrite.", err=True)
        raise typer.Exit(code=1)

    if config_loader.generate_default_config(cfg_path):
        typer.echo(f"Default config written to {cfg_path}")
        typer.echo("Set remote_url to the raw URL of your .zshrc gist before running update-zshrc.")
    else:
        typer.echo("Failed to create default config", err=True)
        raise typer.Exit(code=1)


# ── Standalone console scripts ─────────────────────────────────────────────
# One-command apps so `dockerps`, `update_zshrc` and `zshrc_diff` can be run
# directly from the shell.
dockerps_app = typer.Typer(add_completion=False)
dockerps_app.command(add_help_option=False, context_settings=DOCKERPS_CONTEXT)(dockerps_command)

update_zshrc_app = typer.Typer(add_completion=False)
update_zshrc_app.command()(update_zshrc_command)

zshrc_diff_app = typer.Typer(add_completion=False)
zshrc_diff_app.command()(zshrc_diff_command)


# ── Main guard ──────────────────────────────────────────────────────────────
if __name__ == "__main__":
    app()
