# zshstrap/core/orchestrator.py
"""
Runs the registered bootstrap tasks in order.

Each task guards itself with an existence check, so a second run is cheap.
A failing non-fatal task is logged and the run moves on; a failing fatal
task raises :class:`FatalStepError` because nothing after it can be trusted.
"""

from __future__ import annotations

from zshstrap.core.errors import FatalStepError
from zshstrap.core.logger import LoggerProxy
from zshstrap.core.registry import RegisteredTask
from zshstrap.core.task import Severity, TaskContext, TaskResult

log = LoggerProxy(__name__)


def log_with_severity(logger: LoggerProxy, sev: Severity, msg: str) -> None:
    getattr(logger, sev.log_method())(msg)


def run_task(entry: RegisteredTask, ctx: TaskContext) -> TaskResult:
    """Run one task; a crash becomes a failed TaskResult."""
    try:
        return entry.func(ctx)
    except KeyboardInterrupt:
        raise
    except Exception as exc:
        log.exception("Task %s crashed: %s", entry.name, exc)
        return TaskResult(
            name=entry.name,
            success=False,
            changed=False,
            messages=[(Severity.ERROR, str(exc))],
        )


def run_bootstrap(
    registry: dict[str, RegisteredTask],
    ctx: TaskContext,
    only: set[str] | None = None,
) -> list[TaskResult]:
    """
    Execute tasks in registry order.

    Args:
        registry: Tasks keyed by name, already in bootstrap order.
        ctx: Shared task context.
        only: When given, run just these task names.

    Returns:
        One TaskResult per executed task.

    Raises:
        ValueError: ``only`` names a task that does not exist.
        FatalStepError: a fatal task failed; no later task ran.
    """
    if only:
        unknown = only - set(registry)
        if unknown:
            raise ValueError(f"Unknown task(s): {', '.join(sorted(unknown))}")

    summary: list[TaskResult] = []
    for name, entry in registry.items():
        if only and name not in only:
            log.debug("Skipping %s - not selected via --only.", name)
            continue

        log.debug("--- Running task: %s ---", name)
        result = run_task(entry, ctx)

        for sev, msg in result.messages:
            log_with_severity(log, sev, f"{result.name}: {msg}")
        summary.append(result)

        if result.success:
            if result.changed:
                log.info("Task %s made changes", name)
            continue

        if entry.fatal:
            log.error("Task %s FAILED - aborting further execution.", name)
            raise FatalStepError(name, [msg for _, msg in result.messages])
        log.warning("Task %s failed; continuing.", name)

    return summary


def format_summary(results: list[TaskResult]) -> list[str]:
    """One line per task, e.g. ``Docker               : OK  (changed)``."""
    lines = []
    for res in results:
        status = "OK  " if res.success else "FAIL"
        changed = " (changed)" if res.changed else ""
        lines.append(f"{res.name:<20} : {status}{changed}")
    return lines
