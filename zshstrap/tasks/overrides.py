# zshstrap/tasks/overrides.py

from zshstrap.core.registry import task
from zshstrap.core.task import Severity, TaskContext, TaskResult


@task("Local Overrides")
def local_overrides_task(ctx: TaskContext) -> TaskResult:
    """The override file is optional; report whether the shell will pick one up."""
    path = ctx["settings"].local_override_path
    if path.is_file():
        return TaskResult("Local Overrides", True, messages=[(Severity.INFO, f"Sourcing {path}")])
    return TaskResult("Local Overrides", True, messages=[(Severity.DEBUG, f"No {path}; nothing to source")])
