"""
Runtime settings assembled once per process.

Everything a command needs from the environment (log level, force-update
flag, SSH session, home directory) and from the JSON config file is folded
into one frozen :class:`Settings` object. Commands build it at startup and
hand it to every component; nothing reads ``os.environ`` after that point.
"""

from __future__ import annotations

import copy
import os
import shutil
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from zshstrap.core import config as config_loader
from zshstrap.core.logger import LogLevel

# ── Environment variables ──────────────────────────────────────────────────
ENV_LOG_LEVEL = "ZSHSTRAP_LOG_LEVEL"
ENV_FORCE_UPDATE = "ZSHSTRAP_FORCE_UPDATE"
ENV_CONFIG_FILE = "ZSHSTRAP_CONFIG_FILE"
SSH_ENV_VARS = ("SSH_CONNECTION", "SSH_TTY", "SSH_CLIENT")

_TRUTHY = {"1", "true", "yes", "on"}

# ── Persisted state (relative to $HOME) ────────────────────────────────────
LOCAL_HASH_FILE = ".zshrc_local_hash"
REMOTE_HASH_FILE = ".zshrc_remote_hash"
FZF_PROMPT_SENTINEL = ".zshstrap_fzf_prompted"


class Elevation(Enum):
    """How commands that need root are run for the rest of the process."""

    NONE = "none"
    SUDO = "sudo"

    def wrap(self, cmd: list[str]) -> list[str]:
        if self is Elevation.SUDO:
            return ["sudo", *cmd]
        return list(cmd)


def resolve_elevation() -> Elevation:
    """
    Decide once whether privileged commands get a ``sudo`` prefix.

    Already root, or no sudo on the machine: run as-is.
    """
    geteuid = getattr(os, "geteuid", None)
    if geteuid is not None and geteuid() == 0:
        return Elevation.NONE
    if shutil.which("sudo"):
        return Elevation.SUDO
    return Elevation.NONE


def _is_truthy(value: str | None) -> bool:
    return (value or "").strip().lower() in _TRUTHY


def _expand(path: str, home: Path) -> Path:
    if path == "~":
        return home
    if path.startswith("~/"):
        return home / path[2:]
    return Path(path)


@dataclass(frozen=True)
class Settings:
    home: Path
    log_level: LogLevel = LogLevel.INFO
    force_update: bool = False
    ssh_session: bool = False
    elevation: Elevation = Elevation.NONE
    config: dict[str, Any] = field(default_factory=config_loader.default_config)

    @property
    def remote_url(self) -> str:
        return str(self.config["remote_url"])

    @property
    def request_timeout(self) -> float:
        return float(self.config.get("script_behavior", {}).get("request_timeout", 15))

    @property
    def zshrc_path(self) -> Path:
        return _expand(self.config.get("zshrc_path", "~/.zshrc"), self.home)

    @property
    def local_override_path(self) -> Path:
        return _expand(self.config.get("local_override_path", "~/.zshrc.local"), self.home)

    @property
    def local_hash_path(self) -> Path:
        return self.home / LOCAL_HASH_FILE

    @property
    def remote_hash_path(self) -> Path:
        return self.home / REMOTE_HASH_FILE

    @property
    def fzf_sentinel_path(self) -> Path:
        return self.home / FZF_PROMPT_SENTINEL

    @property
    def editor(self) -> str:
        editors = self.config.get("editor", {})
        if self.ssh_session:
            return str(editors.get("ssh", "vim"))
        return str(editors.get("local", "code --wait"))

    def tool_config(self, name: str) -> Any:
        """A copy of one entry under ``tools``; an empty dict when unset."""
        value = self.config.get("tools", {}).get(name)
        return copy.deepcopy(value) if value is not None else {}


def build_settings(
    env: Mapping[str, str] | None = None,
    config_path: Path | None = None,
    elevation: Elevation | None = None,
) -> Settings:
    """
    Assemble :class:`Settings` from the environment and the config file.

    Args:
        env: Environment mapping; defaults to ``os.environ``.
        config_path: Config file; defaults to $ZSHSTRAP_CONFIG_FILE or
            ``~/.config/zshstrap/config.json`` under the resolved home.
        elevation: Pre-resolved elevation, mainly for tests. Resolved with
            :func:`resolve_elevation` when omitted.
    """
    env = os.environ if env is None else env
    home = Path(env.get("HOME") or Path.home())

    if config_path is None:
        raw_path = env.get(ENV_CONFIG_FILE)
        config_path = (
            _expand(raw_path, home) if raw_path else home / ".config" / "zshstrap" / "config.json"
        )

    return Settings(
        home=home,
        log_level=LogLevel.parse(env.get(ENV_LOG_LEVEL)),
        force_update=_is_truthy(env.get(ENV_FORCE_UPDATE)),
        ssh_session=any(env.get(name) for name in SSH_ENV_VARS),
        elevation=elevation if elevation is not None else resolve_elevation(),
        config=config_loader.load_config(config_path),
    )
