"""Process orchestrator — run one pipeline as a chain of OS processes.

For a pipeline of *n* stages the orchestrator forks *n* children, left
to right.  Stage *i* gets a fresh pipe for its stdout whose read end
becomes stage *i+1*'s stdin:

    stdin/<file ──▶ [stage 0] ──pipe──▶ [stage 1] ──pipe──▶ [stage 2] ──▶ stdout/>file

Only the last stage's exit status decides whether the pipeline
succeeded, and only a foreground pipeline waits for it.  Earlier stages
are never waited for here; ``reap_children`` collects them later
without blocking.

Descriptor discipline matters more than anything else in this module.
A pipe's write end that stays open anywhere (parent or a sibling) means
the reader never sees end of input and the pipeline hangs.  So:

    - Redirect files are opened before the first fork; if either fails
      nothing is started.
    - A subshell feed is written only after stage 0 has been forked,
      while the child is there to read it.
    - Each child ``dup2``s its two ends onto 0 and 1 and closes every
      other copy it was handed before ``execvp``.
    - The parent closes each end the moment it has been handed over.
      When ``run`` returns, the parent holds exactly the descriptors it
      held before.

Design choices:
    - **``-1`` means inherit** — a stage whose read or write end is
      ``INHERIT`` simply keeps the shell's own stdin/stdout.
    - **The child never returns** — whatever happens after ``fork`` in
      the child ends in ``os._exit``, so a failed ``exec`` can't fall
      back into the interpreter loop.
"""

import os
import signal
import sys
from typing import NoReturn

from py_sh.errors import ForkError
from py_sh.logging import Logger
from py_sh.model import Command, PipelineSpec
from py_sh.subshell import write_feed

INHERIT = -1

# Conventional status for "command not found / not executable".
EXEC_FAILED_STATUS = 127

_SOURCE = "orchestrator"


def _close(fd: int) -> None:
    """Close ``fd`` unless it is the inherit marker."""
    if fd != INHERIT:
        os.close(fd)


class ProcessOrchestrator:
    """Fork, wire and wait for the stages of one pipeline at a time."""

    def __init__(self, *, logger: Logger | None = None) -> None:
        """Create an orchestrator that reports through ``logger``."""
        self._logger = logger if logger is not None else Logger()
        self._last_pid: int | None = None

    @property
    def last_pid(self) -> int | None:
        """Return the pid of the most recently started final stage."""
        return self._last_pid

    def run(self, spec: PipelineSpec) -> bool:
        """Execute ``spec`` and return whether it succeeded.

        A foreground pipeline succeeds when its last stage exits with
        status 0.  A background pipeline always counts as a success.

        Args:
            spec: The pipeline to run (at least one stage).

        Returns:
            True on success, False on failure or redirect error.

        Raises:
            ForkError: If a child process cannot be created.

        """
        try:
            source, sink, feed_fd = self._open_endpoints(spec)
        except OSError as e:
            self._report(f"{e.filename or 'pipe'}: {e.strerror}")
            return False

        # Python-level buffers would otherwise be flushed twice: once by
        # the parent and once by every child that inherits them.
        sys.stdout.flush()
        sys.stderr.flush()

        read_fd = source
        last = len(spec.commands) - 1
        pid = 0
        for index, command in enumerate(spec.commands):
            if index < last:
                try:
                    next_read, write_fd = os.pipe()
                except OSError as e:
                    for fd in (read_fd, sink, feed_fd):
                        _close(fd)
                    msg = f"cannot create pipe: {e.strerror}"
                    raise ForkError(msg) from e
            else:
                next_read, write_fd = INHERIT, sink

            try:
                pid = os.fork()
            except OSError as e:
                for fd in (read_fd, write_fd, next_read, feed_fd):
                    _close(fd)
                if index < last:
                    _close(sink)
                msg = f"cannot fork: {e.strerror}"
                raise ForkError(msg) from e

            if pid == 0:
                _exec_stage(
                    command,
                    read_fd=read_fd,
                    write_fd=write_fd,
                    unused_fds=(next_read, sink, feed_fd) if index < last else (feed_fd,),
                    background=spec.background,
                )

            self._logger.debug(f"started pid {pid}: {command}", source=_SOURCE)
            _close(read_fd)
            _close(write_fd)
            read_fd = next_read

        if spec.feed is not None:
            self._send_feed(feed_fd, spec.feed)

        self._last_pid = pid
        if spec.background:
            self._poll(pid)
            self._logger.info(f"[{pid}] running in background: {spec}", source=_SOURCE)
            return True
        return self._wait(pid)

    def _open_endpoints(self, spec: PipelineSpec) -> tuple[int, int, int]:
        """Open stage 0's input and the last stage's output.

        A background pipeline reads /dev/null even when it has a ``<``
        redirect; only a subshell feed takes precedence over that.

        Returns:
            ``(source, sink, feed)`` descriptors, any of which may be
            ``INHERIT``.  ``feed`` is the write end of the subshell pipe.

        Raises:
            OSError: If a redirect file or the feed pipe cannot be opened.
                Nothing is left open in that case.

        """
        feed = INHERIT
        if spec.feed is not None:
            source, feed = os.pipe()
        elif spec.background:
            source = os.open(os.devnull, os.O_RDONLY)
        elif spec.input_path is not None:
            source = os.open(spec.input_path, os.O_RDONLY)
        else:
            source = INHERIT

        sink = INHERIT
        if spec.output_path is not None:
            flags = os.O_WRONLY | os.O_CREAT
            flags |= os.O_APPEND if spec.append else os.O_TRUNC
            try:
                sink = os.open(spec.output_path, flags, 0o666)
            except OSError:
                _close(source)
                _close(feed)
                raise
        return source, sink, feed

    def _wait(self, pid: int) -> bool:
        """Block until ``pid`` exits; True iff its status is zero."""
        _, status = os.waitpid(pid, 0)
        code = os.waitstatus_to_exitcode(status)
        self._logger.info(f"pid {pid} exited with {code}", source=_SOURCE)
        return status == 0

    def _poll(self, pid: int) -> None:
        """Reap ``pid`` if it has already finished; never block."""
        try:
            done, status = os.waitpid(pid, os.WNOHANG)
        except ChildProcessError:
            return
        if done:
            code = os.waitstatus_to_exitcode(status)
            self._logger.info(f"pid {pid} exited with {code}", source=_SOURCE)

    def _send_feed(self, feed_fd: int, text: str) -> None:
        """Write a subshell's line to its stdin pipe."""
        try:
            write_feed(feed_fd, text)
        except OSError as e:
            # The child exited without reading; its status tells the rest.
            self._logger.warning(f"subshell feed not delivered: {e.strerror}", source=_SOURCE)

    def _report(self, message: str) -> None:
        """Tell the user about a pipeline that could not start."""
        self._logger.error(message, source=_SOURCE)
        print(f"py-sh: {message}", file=sys.stderr)  # noqa: T201


def _exec_stage(
    command: Command,
    *,
    read_fd: int,
    write_fd: int,
    unused_fds: tuple[int, ...],
    background: bool,
) -> NoReturn:
    """Turn the freshly forked child into ``command``.  Never returns."""
    try:
        # The interpreter ignores SIGPIPE; programs expect the default.
        signal.signal(signal.SIGPIPE, signal.SIG_DFL)
        signal.signal(signal.SIGINT, signal.SIG_IGN if background else signal.SIG_DFL)
        for fd in unused_fds:
            _close(fd)
        if read_fd != INHERIT:
            os.dup2(read_fd, 0)
            os.close(read_fd)
        if write_fd != INHERIT:
            os.dup2(write_fd, 1)
            os.close(write_fd)
        os.execvp(command.program, command.argv)
    except OSError as e:
        os.write(2, f"py-sh: {command.program}: {e.strerror}\n".encode())
    finally:
        os._exit(EXEC_FAILED_STATUS)


def reap_children(logger: Logger | None = None) -> list[tuple[int, int]]:
    """Collect every child that has already exited, without blocking.

    Returns:
        ``(pid, exit_code)`` for each child reaped, in reap order.

    """
    reaped: list[tuple[int, int]] = []
    while True:
        try:
            pid, status = os.waitpid(-1, os.WNOHANG)
        except ChildProcessError:
            break
        if pid == 0:
            break
        code = os.waitstatus_to_exitcode(status)
        reaped.append((pid, code))
        if logger is not None:
            logger.info(f"reaped pid {pid} (exit {code})", source=_SOURCE)
    return reaped
