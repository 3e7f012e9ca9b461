# zshstrap/tasks/sync.py

import dataclasses

from zshstrap.core.registry import task
from zshstrap.core.sync import check_sync
from zshstrap.core.task import Severity, TaskContext, TaskResult


@task("Zshrc Sync Check")
def zshrc_sync_task(ctx: TaskContext) -> TaskResult:
    settings = ctx["settings"]
    if ctx["dry_run"] and settings.force_update:
        # never rewrite ~/.zshrc during a dry run
        settings = dataclasses.replace(settings, force_update=False)

    state = check_sync(settings)
    result = TaskResult(name="Zshrc Sync Check", success=True, details=state)

    if state is None:
        result.messages.append((Severity.WARNING, "Remote .zshrc unreachable; sync not checked"))
    elif state.in_sync:
        result.messages.append((Severity.DEBUG, f"In sync at {state.remote_hash}"))
    elif settings.force_update:
        result.changed = True
        result.messages.append((Severity.INFO, f"Updated .zshrc to {state.remote_hash}"))
    else:
        result.messages.append((Severity.HINT, "Local .zshrc is out of sync with the remote copy"))
    return result
