# zshstrap/core/task.py
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

from typing_extensions import TypedDict

if TYPE_CHECKING:
    from zshstrap.core.settings import Settings


class TaskContext(TypedDict):
    """Runtime context passed to every task function."""

    settings: "Settings"
    dry_run: bool
    verbose: bool
    assume_yes: bool


class Severity(Enum):
    """
    Represents the severity levels for task messages.

    Provides a mapping between severity levels and their corresponding
    logger method names.
    """

    DEBUG = "debug"
    HINT = "hint"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"

    def log_method(self) -> str:
        """
        Determine the appropriate logger method name based on the severity level.

        Returns:
            str: The logger method name corresponding to the severity level.
        """
        if self in (Severity.INFO, Severity.HINT):
            return "info"
        return self.value


@dataclass
class TaskResult:
    name: str
    success: bool
    changed: bool = False
    messages: list[tuple[Severity, str]] = field(default_factory=list)
    details: Any | None = None  # Flexible detail container for task-specific metadata

    def __str__(self) -> str:
        status = "OK" if self.success else "FAIL"
        return f"[{status}] {self.name}: {self.messages[-1][1] if self.messages else 'No message'}"
