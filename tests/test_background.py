"""Tests for background pipelines.

A trailing ``&`` starts the pipeline and hands the prompt back at
once.  The shell never waits for it; finished jobs are reaped between
lines.
"""

import contextlib
import os
import signal
import time
from pathlib import Path

import pytest

from py_sh.logging import Logger
from py_sh.model import Command, PipelineSpec
from py_sh.orchestrator import ProcessOrchestrator, reap_children
from py_sh.shell import Shell

_QUICK = 2.0
_REAP_TIMEOUT = 5.0
_PROC = Path("/proc")
_SURVIVOR_STATUS = 3
_INTERRUPT_SELF = "kill -INT $$; sleep 0.3; exit 3"


def _kill(pid: int) -> None:
    """Kill and reap a background job."""
    os.kill(pid, signal.SIGTERM)
    with contextlib.suppress(ChildProcessError):
        os.waitpid(pid, 0)


class TestBackgroundJobs:
    """Verify ``&`` semantics."""

    def test_does_not_block(self) -> None:
        """``sleep 5 &`` returns well before five seconds."""
        shell = Shell()
        start = time.monotonic()
        assert shell.execute("sleep 5 &") == [True]
        assert time.monotonic() - start < _QUICK
        assert shell.last_pid is not None
        _kill(shell.last_pid)

    def test_next_pipeline_runs_at_once(self, tmp_path: Path) -> None:
        """``sleep 5 & printf x > f`` runs the second without waiting."""
        out = tmp_path / "f.txt"
        logger = Logger()
        start = time.monotonic()
        assert Shell(logger=logger).execute(f"sleep 5 & printf x > {out}") == [True, True]
        assert time.monotonic() - start < _QUICK
        assert out.read_text() == "x"
        for entry in logger.filter(source="orchestrator"):
            if "running in background" in entry.message:
                _kill(int(entry.message[1 : entry.message.index("]")]))

    def test_background_always_succeeds(self, tmp_path: Path) -> None:
        """``false &`` counts as success."""
        out = tmp_path / "f.txt"
        assert Shell().execute(f"false & printf x > {out}") == [True, True]

    def test_background_output_still_written(self, tmp_path: Path) -> None:
        """A background job's redirect gets its output eventually."""
        out = tmp_path / "f.txt"
        shell = Shell()
        shell.execute(f"printf done > {out} &")
        pid = shell.last_pid
        assert pid is not None
        with contextlib.suppress(ChildProcessError):
            os.waitpid(pid, 0)
        assert out.read_text() == "done"

    def test_finished_job_is_reaped(self) -> None:
        """A background job that exits is collected without blocking."""
        shell = Shell()
        shell.execute("true &")
        pid = shell.last_pid
        reaped: list[int] = []
        deadline = time.monotonic() + _REAP_TIMEOUT
        while time.monotonic() < deadline and pid not in reaped:
            reaped.extend(p for p, _ in reap_children())
            time.sleep(0.05)
        # the orchestrator may already have reaped it when it started
        assert pid in reaped or not _is_child(pid)


class TestInterrupt:
    """Verify SIGINT reaches foreground jobs only."""

    def test_foreground_job_dies_on_sigint(self) -> None:
        """A foreground stage has the default SIGINT action."""
        logger = Logger()
        orchestrator = ProcessOrchestrator(logger=logger)
        spec = PipelineSpec(commands=[Command(argv=("sh", "-c", _INTERRUPT_SELF))])
        assert orchestrator.run(spec) is False
        messages = [e.message for e in logger.filter(source="orchestrator")]
        assert f"pid {orchestrator.last_pid} exited with {-signal.SIGINT}" in messages

    def test_background_job_ignores_sigint(self) -> None:
        """A background stage inherits an ignored SIGINT through exec."""
        orchestrator = ProcessOrchestrator()
        command = Command(argv=("sh", "-c", _INTERRUPT_SELF))
        assert orchestrator.run(PipelineSpec(commands=[command], background=True)) is True
        assert orchestrator.last_pid is not None
        _, status = os.waitpid(orchestrator.last_pid, 0)
        assert os.waitstatus_to_exitcode(status) == _SURVIVOR_STATUS

    @pytest.mark.skipif(not _PROC.is_dir(), reason="needs /proc")
    def test_ctrl_c_spares_background_sleep(self) -> None:
        """``sleep 5 &`` is still running after a SIGINT."""
        shell = Shell()
        shell.execute("sleep 5 &")
        pid = shell.last_pid
        assert pid is not None
        _wait_for_exec(pid, b"sleep")
        os.kill(pid, signal.SIGINT)
        time.sleep(0.2)
        assert os.waitpid(pid, os.WNOHANG) == (0, 0)
        _kill(pid)


def _is_child(pid: int | None) -> bool:
    """Return True if ``pid`` is still an unreaped child."""
    assert pid is not None
    try:
        os.waitpid(pid, os.WNOHANG)
    except ChildProcessError:
        return False
    return True


def _wait_for_exec(pid: int, program: bytes) -> None:
    """Block until ``pid`` has exec'd ``program``."""
    cmdline = _PROC / str(pid) / "cmdline"
    deadline = time.monotonic() + _REAP_TIMEOUT
    while time.monotonic() < deadline:
        if cmdline.read_bytes().startswith(program):
            return
        time.sleep(0.01)
    pytest.fail(f"pid {pid} never started {program!r}")
