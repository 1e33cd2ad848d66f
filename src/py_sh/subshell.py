"""Subshells — run a parenthesized group in a fresh interpreter.

``( cmd1 ; cmd2 )`` is not evaluated in-process.  Instead the parser
captures the text between the parentheses and this module turns it
into an ordinary one-stage pipeline whose program is *this shell*:

    ( echo a ; echo b )   →   [python -m py_sh --quiet]  feed="echo a ; echo b"

When the pipeline runs, the orchestrator hands the read end of an
anonymous pipe to the child as its stdin.  Only once the child exists
does ``write_feed`` send the captured text down the write end, so a
group larger than the pipe buffer is drained as it is written.  The
child reads that single line, evaluates it with the full grammar,
reaches end of input, and exits.  To the outer shell the whole group is
one process with one exit status.
"""

import os

from py_sh.model import Command, PipelineSpec


def subshell_pipeline(text: str, argv: tuple[str, ...]) -> PipelineSpec:
    """Build the pipeline that evaluates ``text`` in a child interpreter.

    Args:
        text: The captured group, tokens joined by single spaces.
        argv: How to start the interpreter (see ``ShellConfig``).

    Returns:
        A single-stage pipeline carrying ``text`` as its feed.

    """
    return PipelineSpec(commands=[Command(argv=argv)], feed=text)


def write_feed(write_fd: int, text: str) -> None:
    """Send ``text`` as one line down ``write_fd``, then close it.

    Closing the write end is what lets the reader see end of input, so
    it happens even when the write fails.

    Raises:
        OSError: If the reader went away before taking the whole line.

    """
    try:
        view = memoryview(f"{text}\n".encode())
        while view:
            written = os.write(write_fd, view)
            view = view[written:]
    finally:
        os.close(write_fd)
