# zshstrap/tasks/docker.py

import sys
import tempfile
from pathlib import Path

from zshstrap.core.command import command_exists, run_command
from zshstrap.core.logger import LoggerProxy
from zshstrap.core.registry import task
from zshstrap.core.settings import Settings
from zshstrap.core.task import Severity, TaskContext, TaskResult

log = LoggerProxy(__name__)

DOCKER_INSTALL_URL = "https://get.docker.com"


def install_docker(settings: Settings, dry_run: bool = False) -> bool:
    """Download the convenience script, then run it with elevation."""
    with tempfile.TemporaryDirectory(prefix="zshstrap-docker-") as tmp:
        script = Path(tmp) / "get-docker.sh"
        fetched = run_command(
            ["curl", "-fsSL", DOCKER_INSTALL_URL, "-o", str(script)], dry_run=dry_run, check=True
        )
        if not fetched.success:
            log.error("Could not download the Docker install script.")
            return False
        installed = run_command(settings.elevation.wrap(["sh", str(script)]), dry_run=dry_run, check=True)
    return installed.success


@task("Docker")
def docker_task(ctx: TaskContext) -> TaskResult:
    settings = ctx["settings"]
    dry_run = ctx["dry_run"]

    if not settings.tool_config("docker").get("enabled", True):
        return TaskResult("Docker", True, messages=[(Severity.DEBUG, "Docker disabled in config")])

    if command_exists("docker"):
        return TaskResult("Docker", True, messages=[(Severity.DEBUG, "docker already installed")])

    if sys.platform == "darwin":
        return TaskResult(
            "Docker",
            True,
            messages=[(Severity.HINT, "docker not found; install Docker Desktop or colima")],
        )

    log.info("docker not found. Running the Docker install script...")
    if not install_docker(settings, dry_run=dry_run):
        return TaskResult("Docker", False, messages=[(Severity.WARNING, "Docker install failed")])
    return TaskResult("Docker", True, changed=not dry_run, messages=[(Severity.INFO, "Installed Docker")])
