"""Interactive REPL (Read-Eval-Print Loop) for the shell.

The REPL is the thin I/O wrapper around ``Shell``:

    1. **Read** — display the prompt and read one line.
    2. **Eval** — pass the line to ``shell.execute()``; the commands
       print for themselves.
    3. **Reap** — collect any background children that finished.
    4. **Loop** — until a blank line or end of input.

The same loop serves subshells.  A subshell's stdin is a pipe holding
exactly one line, so the child evaluates that line, then reads end of
input and exits with status 0.  ``quiet`` drops the banner and prompt
so they do not leak into the subshell's output.
"""

import sys

from py_sh.errors import ForkError
from py_sh.orchestrator import reap_children
from py_sh.shell import Shell
from py_sh.tokens import tokenize

EXIT_OK = 0
EXIT_FORK_FAILED = 1

_SOURCE = "repl"


def read_line(prompt: str) -> str | None:
    """Read one line from stdin, or None at end of input."""
    try:
        return input(prompt)
    except EOFError:
        return None


def is_blank(line: str) -> bool:
    """Return True if ``line`` holds no tokens at all."""
    return not tokenize(line)


def run(shell: Shell, *, quiet: bool = False) -> int:
    """Run the read-eval loop until a blank line or end of input.

    Handles:
    - Syntax errors — reported by the shell; the loop keeps going.
    - Ctrl+C — abandons the current line and prompts again.
    - Fork failure — fatal; the session ends with a non-zero status.

    Args:
        shell: The shell that evaluates each line.
        quiet: Suppress the banner and prompt (subshell mode).

    Returns:
        The process exit status for the session.

    """
    logger = shell.logger
    prompt = "" if quiet else shell.config.prompt
    if not quiet:
        print(shell.config.banner)  # noqa: T201

    while True:
        line = read_line(prompt)
        if line is None or is_blank(line):
            break

        try:
            shell.execute(line)
        except KeyboardInterrupt:
            # Ctrl+C — the foreground job got the signal too
            print()  # noqa: T201
        except ForkError as e:
            logger.error(str(e), source=_SOURCE)
            print(f"py-sh: {e}", file=sys.stderr)  # noqa: T201
            return EXIT_FORK_FAILED

        reap_children(logger)

    return EXIT_OK
