# zshstrap/core/logger.py
from __future__ import annotations

import logging
import sys
from enum import Enum
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import IO, TYPE_CHECKING, Any

from rich.console import Console
from rich.logging import RichHandler

if TYPE_CHECKING:
    from zshstrap.core.settings import Settings

# Default log format
DEFAULT_LOG_FORMAT = "%(asctime)s [%(levelname)-8s] %(name)-22s: %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class LogLevel(Enum):
    """
    The four verbosity levels accepted in ZSHSTRAP_LOG_LEVEL, in increasing order.
    """

    DEBUG = 10
    INFO = 20
    WARN = 30
    ERROR = 40

    def __lt__(self, other: LogLevel) -> bool:
        if not isinstance(other, LogLevel):
            return NotImplemented
        return self.value < other.value

    def __le__(self, other: LogLevel) -> bool:
        if not isinstance(other, LogLevel):
            return NotImplemented
        return self.value <= other.value

    @property
    def logging_level(self) -> int:
        return self.value

    @classmethod
    def parse(cls, raw: str | None, default: LogLevel | None = None) -> LogLevel:
        """
        Parse a level name case-insensitively. WARNING is accepted as WARN.
        Unknown values fall back to ``default`` (INFO when not given).
        """
        fallback = default or cls.INFO
        if not raw:
            return fallback
        name = raw.strip().upper()
        if name == "WARNING":
            name = "WARN"
        try:
            return cls[name]
        except KeyError:
            return fallback


class LogSink(Enum):
    """Where console log records go; chosen once by ``select_sink``."""

    RICH = "rich"
    PLAIN = "plain"


def select_sink(stream: IO[str] | None = None) -> LogSink:
    stream = stream if stream is not None else sys.stderr
    isatty = getattr(stream, "isatty", None)
    return LogSink.RICH if callable(isatty) and isatty() else LogSink.PLAIN


class LoggerProxy:
    """
    Lazy logger accessor to avoid boilerplate logger setup in each module.
    Usage: log = LoggerProxy(__name__)
    """

    def __init__(self, name: str):
        self._name = name
        self._logger: logging.Logger | None = None

    def _get_logger(self) -> logging.Logger:
        if self._logger is None:
            self._logger = logging.getLogger(self._name)
        assert self._logger is not None
        return self._logger

    def __getattr__(self, item: str) -> Any:
        return getattr(self._get_logger(), item)


def _console_handler(sink: LogSink, stream: IO[str], log_format: str, date_format: str) -> logging.Handler:
    handler: logging.Handler
    if sink is LogSink.RICH:
        handler = RichHandler(
            console=Console(file=stream),
            rich_tracebacks=True,
            markup=False,
            show_time=False,
            show_path=False,
        )
        # RichHandler renders level and time itself
        handler.setFormatter(logging.Formatter("%(message)s"))
        return handler
    handler = logging.StreamHandler(stream)
    handler.setFormatter(logging.Formatter(log_format, date_format))
    return handler


def setup_logging(
    settings: Settings,
    verbose: bool = False,
    stream: IO[str] | None = None,
) -> LogSink:
    """
    Sets up logging for one process run.

    Args:
        settings: The resolved runtime settings (level and script_behavior config).
        verbose: Whether to enable DEBUG logging regardless of settings.
        stream: Console stream; defaults to stderr so stdout stays clean for
            commands like ``shell-env``.

    Returns:
        The console sink that was selected.
    """
    stream = stream if stream is not None else sys.stderr
    behavior = settings.config.get("script_behavior", {})

    level = LogLevel.DEBUG if verbose else settings.log_level
    log_format = behavior.get("log_format", DEFAULT_LOG_FORMAT)
    date_format = behavior.get("date_format", DEFAULT_DATE_FORMAT)

    sink = select_sink(stream)
    handlers: list[logging.Handler] = [_console_handler(sink, stream, log_format, date_format)]

    if behavior.get("log_to_file", True):
        log_dir = Path(behavior.get("log_file_directory", "~/.cache/zshstrap")).expanduser()
        if not log_dir.is_absolute():
            log_dir = settings.home / log_dir
        try:
            log_dir.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(
                log_dir / "zshstrap.log", maxBytes=1024 * 1024, backupCount=3
            )
            file_handler.setFormatter(logging.Formatter(log_format, date_format))
            handlers.append(file_handler)
        except OSError as e:
            print(f"ERROR: Could not set up file logging at {log_dir}: {e}", file=sys.stderr)

    root_logger = logging.getLogger()
    if root_logger.hasHandlers():
        for handler in list(root_logger.handlers):
            root_logger.removeHandler(handler)
            handler.close()

    logging.basicConfig(
        level=level.logging_level, format=log_format, datefmt=date_format, handlers=handlers
    )

    LoggerProxy(__name__).debug(
        "Logging initialized. Level: %s. Sink: %s. File logging: %s",
        level.name,
        sink.value,
        behavior.get("log_to_file", True),
    )
    return sink
