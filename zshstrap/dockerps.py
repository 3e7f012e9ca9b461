"""
dockerps - container listings as an aligned, color-coded table.

Rows come from ``docker ps`` (or ``docker compose ps``) formatted as
``name<TAB>ports<TAB>status``. Column widths are global, so every row is
parsed before anything is printed.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from rich.console import Console
from rich.text import Text

from zshstrap.core.command import command_exists, run_command
from zshstrap.core.errors import ContainerRuntimeError
from zshstrap.core.logger import LoggerProxy

log = LoggerProxy(__name__)

HEADERS = ("NAMES", "PORTS", "STATUS")
PORTS_PLACEHOLDER = "-"
COLUMN_GAP = "  "
NO_RESULTS = "No containers found."
RUNTIME_BINARY = "docker"

USAGE = """\
Usage: dockerps [--compose] [-h|--help] [extra args...]

List containers as an aligned, color-coded table of name, ports and status.

Options:
  --compose   List with `docker compose ps` instead of `docker ps`
  -h, --help  Show this help

Any other arguments are passed to the listing command unchanged, e.g.
  dockerps -a
  dockerps --compose --all
"""


class ListingMode(Enum):
    PLAIN = "plain"
    COMPOSE = "compose"

    @property
    def base_command(self) -> list[str]:
        if self is ListingMode.COMPOSE:
            return [RUNTIME_BINARY, "compose", "ps"]
        return [RUNTIME_BINARY, "ps"]

    @property
    def row_template(self) -> str:
        # compose names the field .Name, plain ps uses .Names
        name_field = "{{.Name}}" if self is ListingMode.COMPOSE else "{{.Names}}"
        return f"{name_field}\t{{{{.Ports}}}}\t{{{{.Status}}}}"


def build_listing_command(mode: ListingMode, extra_args: list[str] | None = None) -> list[str]:
    return [*mode.base_command, "--format", mode.row_template, *(extra_args or [])]


class StatusClass(Enum):
    UP = "green"
    DOWN = "red"
    OTHER = "yellow"

    @property
    def style(self) -> str:
        return self.value


_DOWN_PREFIXES = ("Exited", "stopped")


def classify_status(status: str) -> StatusClass:
    if status.startswith("Up"):
        return StatusClass.UP
    if status.startswith(_DOWN_PREFIXES):
        return StatusClass.DOWN
    return StatusClass.OTHER


@dataclass(frozen=True)
class ContainerRow:
    name: str
    ports: str
    status: str

    @property
    def fields(self) -> tuple[str, str, str]:
        return (self.name, self.ports, self.status)


def parse_row(line: str) -> ContainerRow:
    """Split one tab-delimited line; short lines get empty trailing fields."""
    parts = line.rstrip("\r\n").split("\t", 2)
    parts += [""] * (3 - len(parts))
    name, ports, status = parts
    return ContainerRow(name=name, ports=ports or PORTS_PLACEHOLDER, status=status)


def parse_rows(output: str) -> list[ContainerRow]:
    return [parse_row(line) for line in output.splitlines() if line.strip()]


def column_widths(rows: list[ContainerRow]) -> tuple[int, int, int]:
    widths = [len(header) for header in HEADERS]
    for row in rows:
        for i, value in enumerate(row.fields):
            widths[i] = max(widths[i], len(value))
    return (widths[0], widths[1], widths[2])


def _pad(values: tuple[str, str, str], widths: tuple[int, int, int]) -> list[str]:
    return [value.ljust(width) for value, width in zip(values, widths)]


def render_table(rows: list[ContainerRow], console: Console) -> None:
    widths = column_widths(rows)

    console.print(Text(COLUMN_GAP.join(_pad(HEADERS, widths)), style="bold"), soft_wrap=True)
    console.print("-" * (sum(widths) + len(COLUMN_GAP) * 2), soft_wrap=True, highlight=False)

    if not rows:
        console.print(NO_RESULTS, soft_wrap=True, highlight=False)
        return

    for row in rows:
        name, ports, status = _pad(row.fields, widths)
        line = Text(name + COLUMN_GAP + ports + COLUMN_GAP)
        line.append(status, style=classify_status(row.status).style)
        console.print(line, soft_wrap=True)


def list_containers(mode: ListingMode, extra_args: list[str] | None = None) -> list[ContainerRow]:
    """
    Run the listing command and parse its rows.

    Raises:
        ContainerRuntimeError: docker is not installed or the listing failed.
    """
    if not command_exists(RUNTIME_BINARY):
        raise ContainerRuntimeError(f"{RUNTIME_BINARY} not found on PATH")

    cmd = build_listing_command(mode, extra_args)
    result = run_command(cmd, check=True, capture=True)
    if not result.success:
        raise ContainerRuntimeError(
            result.stderr or f"{cmd[0]} exited with code {result.returncode}"
        )
    return parse_rows(result.stdout)
