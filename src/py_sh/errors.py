"""Exceptions raised by the shell.

Every error the shell raises derives from ``ShellError``, so callers
that only care about "did the shell give up on this" can catch one
type.  The hierarchy mirrors how far an error reaches:

- **ParseError** — the current line is rejected before anything runs.
  ``ShellSyntaxError`` (grammar mismatch) and ``CapacityError``
  (resource limit) are the two ways this happens.
- **ForkError** — the interpreter cannot create processes any more.
  Nothing can proceed, so this one ends the session.
- **ConfigError** — the configuration cannot be loaded at startup.

Redirect and exec failures are *not* here: the first is
reported and turns into a failed pipeline, the second only ever
happens inside a child process.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from py_sh.tokens import Symbol


class ShellError(Exception):
    """Base class for every error the shell raises."""


class ParseError(ShellError):
    """Raise when an input line cannot be turned into a command model."""


class ShellSyntaxError(ParseError):
    """Raise when the grammar expected one symbol but found another.

    Attributes:
        expected: The symbol the grammar required.
        found: The symbol actually at the lookahead.

    """

    def __init__(self, expected: Symbol, found: Symbol) -> None:
        """Create a syntax error for an ``expected``/``found`` mismatch."""
        self.expected = expected
        self.found = found
        super().__init__(f"syntax error: expected {expected.label}, found {found.label}")


class CapacityError(ParseError):
    """Raise when a line needs more pipelines or stages than allowed."""


class ForkError(ShellError):
    """Raise when a new process cannot be created."""


class ConfigError(ShellError):
    """Raise when the shell configuration is unreadable or invalid."""
