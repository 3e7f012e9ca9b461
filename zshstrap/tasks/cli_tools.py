# zshstrap/tasks/cli_tools.py

from zshstrap.core.command import command_exists, run_command
from zshstrap.core.logger import LoggerProxy
from zshstrap.core.registry import task
from zshstrap.core.task import Severity, TaskContext, TaskResult
from zshstrap.core.types import InstallOutcome, ToolRequirement

log = LoggerProxy(__name__)

BINSTALL_SCRIPT_URL = (
    "https://raw.githubusercontent.com/cargo-bins/cargo-binstall/main/install-from-binstall-release.sh"
)
BINSTALL = ToolRequirement(
    name="cargo-binstall",
    install_procedure=(
        "/bin/bash",
        "-c",
        f"curl -L --proto '=https' --tlsv1.2 -sSf {BINSTALL_SCRIPT_URL} | bash",
    ),
)


def install_binstall(dry_run: bool = False) -> InstallOutcome:
    if command_exists(BINSTALL.name):
        return InstallOutcome(BINSTALL.name, "present")
    if not command_exists("cargo"):
        return InstallOutcome(BINSTALL.name, "skipped", reason="cargo is not installed")

    log.info("cargo-binstall not found. Running its install script...")
    if run_command(list(BINSTALL.install_procedure), dry_run=dry_run, check=True).success:
        return InstallOutcome(BINSTALL.name, "installed")

    log.warning("cargo-binstall install script failed; building it with cargo install.")
    if run_command(["cargo", "install", "--locked", BINSTALL.name], dry_run=dry_run, check=True).success:
        return InstallOutcome(BINSTALL.name, "installed", notes=["built from source"])
    return InstallOutcome(BINSTALL.name, "failed", reason="script and cargo install both failed")


@task("Cargo Binstall")
def cargo_binstall_task(ctx: TaskContext) -> TaskResult:
    outcome = install_binstall(dry_run=ctx["dry_run"])
    result = TaskResult(name="Cargo Binstall", success=outcome.ok, details=outcome)
    if outcome.status == "installed":
        result.changed = not ctx["dry_run"]
        result.messages.append((Severity.INFO, "Installed cargo-binstall"))
    elif outcome.status == "skipped":
        result.messages.append((Severity.WARNING, f"cargo-binstall skipped: {outcome.reason}"))
    elif outcome.status == "failed":
        result.messages.append((Severity.WARNING, f"cargo-binstall install failed: {outcome.reason}"))
    return result


def utility_requirements(entries: list[dict]) -> list[ToolRequirement]:
    return [ToolRequirement(name=e["name"], package=e.get("package")) for e in entries]


def install_cargo_tool(tool: ToolRequirement, dry_run: bool = False) -> InstallOutcome:
    """Prefer prebuilt binaries through cargo-binstall, else compile with cargo."""
    if command_exists(tool.name):
        return InstallOutcome(tool.name, "present")

    if command_exists(BINSTALL.name):
        cmd = ["cargo", "binstall", "-y", tool.package_name]
    elif command_exists("cargo"):
        cmd = ["cargo", "install", "--locked", tool.package_name]
    else:
        return InstallOutcome(tool.name, "skipped", reason="cargo is not installed")

    log.info(f"Installing {tool.package_name} for `{tool.name}`...")
    result = run_command(cmd, dry_run=dry_run, check=True)
    if not result.success:
        return InstallOutcome(tool.name, "failed", reason=result.stderr or f"exit {result.returncode}")
    return InstallOutcome(tool.name, "installed")


@task("CLI Utilities")
def cli_utilities_task(ctx: TaskContext) -> TaskResult:
    settings = ctx["settings"]
    dry_run = ctx["dry_run"]
    tools = utility_requirements(settings.tool_config("cli_utilities") or [])
    result = TaskResult(name="CLI Utilities", success=True, details=[])

    for tool in tools:
        outcome = install_cargo_tool(tool, dry_run=dry_run)
        result.details.append(outcome)
        if outcome.status == "installed":
            result.changed = not dry_run
            result.messages.append((Severity.INFO, f"Installed {tool.package_name}"))
        elif outcome.status == "skipped":
            result.messages.append((Severity.WARNING, f"{tool.name} skipped: {outcome.reason}"))
        elif outcome.status == "failed":
            result.success = False
            result.messages.append((Severity.WARNING, f"{tool.name} install failed: {outcome.reason}"))
    return result
