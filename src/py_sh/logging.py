"""Shell logging and tracing.

The logger records structured entries for what the shell does with a
line: which tokens the parser matched, which pipelines it built, which
processes were started and how they exited.

Debugging a shell is mostly a matter of watching this trail, so the
logger can also **echo** entries to a stream as they arrive.  The
echo threshold is what ``-v`` / ``-vv`` on the command line control:

- **LogLevel** — severity levels ordered for filtering (DEBUG < ERROR).
- **LogEntry** — a single structured record (level, message, source).
- **Logger** — an append-only log with filtering, clearing and echo.

Design choices:
    - **IntEnum for levels** so they compare naturally with ``<``.
    - **Frozen dataclass for entries** — log records should be immutable.
    - **Echo goes to stderr by default** — stdout belongs to the
      commands the shell runs.
"""

import sys
from dataclasses import dataclass
from enum import IntEnum
from typing import TextIO


class LogLevel(IntEnum):
    """Severity levels for log entries.

    Using IntEnum means levels compare with ``<`` / ``>`` naturally,
    which makes minimum-level filtering trivial.
    """

    DEBUG = 0
    INFO = 1
    WARNING = 2
    ERROR = 3


@dataclass(frozen=True)
class LogEntry:
    """A single structured log record.

    Attributes:
        level: The severity of this event.
        message: A human-readable description of what happened.
        source: The component that generated the event (e.g. "parser").

    """

    level: LogLevel
    message: str
    source: str

    def __str__(self) -> str:
        """Format as ``[LEVEL] source: message``."""
        return f"[{self.level.name}] {self.source}: {self.message}"


class Logger:
    """Append-only log buffer with filtering and optional echo.

    Entries are always kept in memory.  Entries at or above
    ``echo_level`` are additionally written to ``stream`` as they
    arrive; ``echo_level=None`` keeps the logger silent.
    """

    def __init__(
        self,
        *,
        echo_level: LogLevel | None = None,
        stream: TextIO | None = None,
    ) -> None:
        """Create an empty logger.

        Args:
            echo_level: Minimum level written to ``stream``, or None.
            stream: Where echoed entries go (defaults to ``sys.stderr``
                at the time of each write).

        """
        self._entries: list[LogEntry] = []
        self._echo_level = echo_level
        self._stream = stream

    @property
    def entries(self) -> list[LogEntry]:
        """Return all log entries in chronological order."""
        return list(self._entries)

    @property
    def echo_level(self) -> LogLevel | None:
        """Return the echo threshold, or None if echo is off."""
        return self._echo_level

    def log(self, level: LogLevel, message: str, *, source: str) -> None:
        """Append a new entry to the log, echoing it if loud enough.

        Args:
            level: Severity of the event.
            message: Human-readable event description.
            source: Component that generated the event.

        """
        entry = LogEntry(level=level, message=message, source=source)
        self._entries.append(entry)
        if self._echo_level is not None and level >= self._echo_level:
            stream = self._stream if self._stream is not None else sys.stderr
            stream.write(f"{entry}\n")
            stream.flush()

    def debug(self, message: str, *, source: str) -> None:
        """Log at DEBUG level."""
        self.log(LogLevel.DEBUG, message, source=source)

    def info(self, message: str, *, source: str) -> None:
        """Log at INFO level."""
        self.log(LogLevel.INFO, message, source=source)

    def warning(self, message: str, *, source: str) -> None:
        """Log at WARNING level."""
        self.log(LogLevel.WARNING, message, source=source)

    def error(self, message: str, *, source: str) -> None:
        """Log at ERROR level."""
        self.log(LogLevel.ERROR, message, source=source)

    def filter(
        self,
        *,
        min_level: LogLevel | None = None,
        source: str | None = None,
    ) -> list[LogEntry]:
        """Return entries matching the given criteria.

        Args:
            min_level: If set, only return entries at or above this level.
            source: If set, only return entries from this source.

        Returns:
            A filtered list of log entries.

        """
        result = self._entries
        if min_level is not None:
            result = [e for e in result if e.level >= min_level]
        if source is not None:
            result = [e for e in result if e.source == source]
        return result if result is not self._entries else list(result)

    def clear(self) -> None:
        """Remove all log entries."""
        self._entries.clear()
