from dataclasses import dataclass, field
from typing import Literal


@dataclass(frozen=True)
class ToolRequirement:
    """One installable dependency: an existence check plus how to install it."""

    name: str
    install_procedure: tuple[str, ...] = ()
    package: str | None = None
    sentinel: str | None = None

    @property
    def package_name(self) -> str:
        return self.package or self.name


@dataclass(frozen=True)
class SyncState:
    local_hash: str | None
    remote_hash: str

    @property
    def in_sync(self) -> bool:
        return self.local_hash == self.remote_hash


@dataclass(frozen=True)
class PackageManager:
    name: str
    install_cmd: tuple[str, ...]
    needs_elevation: bool = True

    def install_argv(self, packages: list[str]) -> list[str]:
        return [*self.install_cmd, *packages]


@dataclass
class InstallOutcome:
    name: str
    status: Literal["present", "installed", "failed", "skipped"]
    reason: str | None = None
    notes: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status != "failed"
