import importlib
from collections.abc import Callable

# zshstrap/core/registry.py
from dataclasses import dataclass

from zshstrap.core.task import TaskContext, TaskResult

TaskFunc = Callable[[TaskContext], TaskResult]


@dataclass(frozen=True)
class RegisteredTask:
    name: str
    func: TaskFunc
    fatal: bool = False


_TASK_REGISTRY: dict[str, RegisteredTask] = {}

# Bootstrap order. The framework must come before its plugins and Rust
# before the cargo-based installers; the rest is free to move.
TASK_MODULES = (
    "zshstrap.tasks.requirements",
    "zshstrap.tasks.framework",
    "zshstrap.tasks.docker",
    "zshstrap.tasks.rust",
    "zshstrap.tasks.cli_tools",
    "zshstrap.tasks.fzf",
    "zshstrap.tasks.sync",
    "zshstrap.tasks.overrides",
)


def task(name: str, fatal: bool = False) -> Callable[[TaskFunc], TaskFunc]:
    """
    Decorator to register a task with a name and attach metadata.

    A ``fatal`` task aborts the whole bootstrap when it fails.
    """

    def _decorator(fn: TaskFunc) -> TaskFunc:
        if name in _TASK_REGISTRY:
            raise RuntimeError(f"Duplicate task name: {name}")

        fn._task_name = name  # type: ignore[attr-defined]
        fn._task_fatal = fatal  # type: ignore[attr-defined]
        _TASK_REGISTRY[name] = RegisteredTask(name=name, func=fn, fatal=fatal)
        return fn

    return _decorator


def load_tasks() -> dict[str, RegisteredTask]:
    """Import every task module (registration happens at import time)."""
    for module_name in TASK_MODULES:
        importlib.import_module(module_name)
    return get_task_registry()


def _module_rank(entry: RegisteredTask) -> int:
    module = getattr(entry.func, "__module__", "")
    return TASK_MODULES.index(module) if module in TASK_MODULES else len(TASK_MODULES)


def get_task_registry() -> dict[str, RegisteredTask]:
    """Registered tasks in bootstrap order, whatever order modules were imported in."""
    ordered = sorted(_TASK_REGISTRY.values(), key=_module_rank)
    return {entry.name: entry for entry in ordered}


def clear_registry() -> None:
    _TASK_REGISTRY.clear()
