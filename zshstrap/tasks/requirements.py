# zshstrap/tasks/requirements.py

from zshstrap.core.command import command_exists, run_command
from zshstrap.core.logger import LoggerProxy
from zshstrap.core.registry import task
from zshstrap.core.settings import Settings
from zshstrap.core.task import Severity, TaskContext, TaskResult
from zshstrap.core.types import PackageManager

log = LoggerProxy(__name__)

# Probed in order; brew first so a Mac with a stray apt shim still uses brew.
PACKAGE_MANAGERS = (
    PackageManager("brew", ("brew", "install"), needs_elevation=False),
    PackageManager("apt-get", ("apt-get", "install", "-y")),
    PackageManager("dnf", ("dnf", "install", "-y")),
    PackageManager("pacman", ("pacman", "-S", "--noconfirm", "--needed")),
    PackageManager("apk", ("apk", "add")),
    PackageManager("zypper", ("zypper", "--non-interactive", "install")),
)


def detect_package_manager() -> PackageManager | None:
    for manager in PACKAGE_MANAGERS:
        if command_exists(manager.name):
            return manager
    return None


def missing_commands(names: list[str]) -> list[str]:
    return [name for name in names if not command_exists(name)]


def install_packages(
    manager: PackageManager, packages: list[str], settings: Settings, dry_run: bool = False
) -> bool:
    cmd = manager.install_argv(packages)
    if manager.needs_elevation:
        cmd = settings.elevation.wrap(cmd)
    log.info(f"Installing {', '.join(packages)} with {manager.name}...")
    return run_command(cmd, dry_run=dry_run, check=True).success


def ensure_required_commands(settings: Settings, dry_run: bool = False) -> TaskResult:
    required = list(settings.tool_config("required_commands") or [])
    result = TaskResult(name="Required Commands", success=True)

    missing = missing_commands(required)
    if not missing:
        result.messages.append((Severity.DEBUG, f"All present: {', '.join(required)}"))
        return result

    manager = detect_package_manager()
    if manager is None:
        result.success = False
        result.messages.append(
            (Severity.ERROR, f"Missing {', '.join(missing)} and no supported package manager found")
        )
        return result

    if not install_packages(manager, missing, settings, dry_run=dry_run):
        result.success = False
        result.messages.append((Severity.ERROR, f"{manager.name} failed to install {', '.join(missing)}"))
        return result

    if not dry_run:
        still_missing = missing_commands(missing)
        if still_missing:
            result.success = False
            result.messages.append(
                (Severity.ERROR, f"Still missing after install: {', '.join(still_missing)}")
            )
            return result

    result.changed = not dry_run
    result.messages.append((Severity.INFO, f"Installed {', '.join(missing)} via {manager.name}"))
    return result


@task("Required Commands", fatal=True)
def required_commands_task(ctx: TaskContext) -> TaskResult:
    return ensure_required_commands(ctx["settings"], dry_run=ctx["dry_run"])
