# zshstrap/core/errors.py
from __future__ import annotations


class ZshstrapError(RuntimeError):
    """Base class for errors that should end a command with a diagnostic."""


class FetchError(ZshstrapError):
    """Raised when the remote .zshrc cannot be fetched."""


class FatalStepError(ZshstrapError):
    """Raised when a fatal bootstrap task fails and later tasks cannot be trusted."""

    def __init__(self, task_name: str, messages: list[str] | None = None):
        self.task_name = task_name
        self.messages = messages or []
        detail = "; ".join(self.messages) if self.messages else "no details"
        super().__init__(f"Task '{task_name}' failed: {detail}")


class ContainerRuntimeError(ZshstrapError):
    """Raised when the container runtime is missing or its listing command fails."""
