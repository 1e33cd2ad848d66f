"""Shell configuration — prompt, limits, and how to start a subshell.

The configuration is a frozen dataclass built once at startup.  It can
come from three places, later ones winning:

1. Built-in defaults (the classic ``> `` prompt, 64 pipelines per line,
   64 stages per pipeline).
2. A JSON file passed with ``--config``.
3. Command-line switches such as ``-v`` (applied by the caller with
   ``dataclasses.replace``).

Subshells are started as a fresh copy of this interpreter.  When the
parent was configured from a file, the child is pointed at the same
file so that prompts and limits agree on both sides of the ``(``.
"""

from __future__ import annotations

import json
import sys
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from py_sh.errors import ConfigError
from py_sh.logging import LogLevel

if TYPE_CHECKING:
    from pathlib import Path

DEFAULT_MAX_PIPELINES = 64
DEFAULT_MAX_STAGES = 64

_INT_KEYS = ("max_pipelines", "max_stages")
_STR_KEYS = ("prompt", "banner")
_KNOWN_KEYS = frozenset((*_INT_KEYS, *_STR_KEYS, "log_level"))


def default_subshell_argv() -> tuple[str, ...]:
    """Return the argv that starts a quiet copy of this interpreter."""
    return (sys.executable, "-m", "py_sh", "--quiet")


@dataclass(frozen=True)
class ShellConfig:
    """Settings for one shell session.

    Attributes:
        prompt: Printed before each line is read.
        banner: Printed once when an interactive session starts.
        max_pipelines: Most pipelines a single line may contain.
        max_stages: Most stages a single pipeline may contain.
        log_level: Minimum level echoed to stderr, or None (the
            default) to keep the trail in memory only.
        subshell_argv: Command used to run a parenthesized group.

    """

    prompt: str = "> "
    banner: str = "Shell started:"
    max_pipelines: int = DEFAULT_MAX_PIPELINES
    max_stages: int = DEFAULT_MAX_STAGES
    log_level: LogLevel | None = None
    subshell_argv: tuple[str, ...] = field(default_factory=default_subshell_argv)

    def __post_init__(self) -> None:
        """Reject limits that would make every line unparseable."""
        for key in _INT_KEYS:
            value = getattr(self, key)
            if value < 1:
                msg = f"{key} must be at least 1 (got {value})"
                raise ConfigError(msg)
        if not self.subshell_argv:
            msg = "subshell_argv must name a program"
            raise ConfigError(msg)


def load_config(path: Path | None = None) -> ShellConfig:
    """Load a configuration from a JSON file, or return the defaults.

    Args:
        path: A JSON file holding an object with any of ``prompt``,
            ``banner``, ``max_pipelines``, ``max_stages`` and
            ``log_level`` (a level name such as ``"debug"``).

    Returns:
        The resulting configuration.

    Raises:
        ConfigError: If the file cannot be read, is not a JSON object,
            or holds unknown keys or values of the wrong type.

    """
    if path is None:
        return ShellConfig()

    try:
        data = json.loads(path.read_text())
    except (OSError, json.JSONDecodeError) as e:
        msg = f"Cannot load config {path}: {e}"
        raise ConfigError(msg) from e

    if not isinstance(data, dict):
        msg = f"Config {path} must hold a JSON object"
        raise ConfigError(msg)

    unknown = sorted(set(data) - _KNOWN_KEYS)
    if unknown:
        msg = f"Unknown config keys in {path}: {', '.join(unknown)}"
        raise ConfigError(msg)

    options: dict[str, Any] = {}
    for key in _INT_KEYS:
        if key in data:
            value = data[key]
            if not isinstance(value, int) or isinstance(value, bool):
                msg = f"{key} must be an integer"
                raise ConfigError(msg)
            options[key] = value
    for key in _STR_KEYS:
        if key in data:
            if not isinstance(data[key], str):
                msg = f"{key} must be a string"
                raise ConfigError(msg)
            options[key] = data[key]
    if "log_level" in data:
        options["log_level"] = parse_log_level(data["log_level"])

    argv = (*default_subshell_argv(), "--config", str(path))
    return ShellConfig(subshell_argv=argv, **options)


def parse_log_level(name: object) -> LogLevel:
    """Convert a level name (case-insensitive) to a ``LogLevel``.

    Raises:
        ConfigError: If ``name`` is not a known level name.

    """
    if isinstance(name, str) and name.upper() in LogLevel.__members__:
        return LogLevel[name.upper()]
    choices = ", ".join(level.name.lower() for level in LogLevel)
    msg = f"log_level must be one of {choices} (got {name!r})"
    raise ConfigError(msg)
