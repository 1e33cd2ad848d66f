"""The shell — parse one line and run it.

``Shell`` glues the pieces together for a single input line:

    line ──parse──▶ CommandModel ──SequenceExecutor──▶ processes

It owns the configuration and the logger for a session and is the only
place that turns a rejected line into a message for the user.  A line
that fails to parse never runs any part of itself; the session carries
on with the next line.

Design choices:
    - **Parse errors are recovered, fork errors are not.**  A typo
      costs one line.  Running out of processes ends the session,
      because no later line could run either.
    - **Returns outcomes, not output.**  Commands write straight to the
      inherited stdout; the caller gets the per-pipeline results.
    - **One line, one trail.**  The log is cleared before each line is
      parsed, so nothing logged outlives the line it belongs to.
"""

import sys

from py_sh.config import ShellConfig
from py_sh.errors import ParseError
from py_sh.executor import SequenceExecutor
from py_sh.logging import Logger
from py_sh.model import CommandModel
from py_sh.orchestrator import ProcessOrchestrator
from py_sh.parser import parse

_SOURCE = "shell"


class Shell:
    """Command interpreter for real OS processes."""

    def __init__(
        self,
        *,
        config: ShellConfig | None = None,
        logger: Logger | None = None,
    ) -> None:
        """Create a shell.

        Args:
            config: Session settings (defaults if omitted).
            logger: Shared log; one echoing at ``config.log_level`` is
                created if omitted.

        """
        self._config = config if config is not None else ShellConfig()
        self._logger = logger if logger is not None else Logger(echo_level=self._config.log_level)
        self._orchestrator = ProcessOrchestrator(logger=self._logger)
        self._executor = SequenceExecutor(self._orchestrator, logger=self._logger)

    @property
    def config(self) -> ShellConfig:
        """Return the session configuration."""
        return self._config

    @property
    def logger(self) -> Logger:
        """Return the session logger."""
        return self._logger

    @property
    def last_pid(self) -> int | None:
        """Return the pid of the last pipeline stage started, if any."""
        return self._orchestrator.last_pid

    def parse(self, line: str) -> CommandModel:
        """Parse ``line`` without running it.

        The logger is cleared first, so it only ever holds the trail of
        the line being handled.

        Raises:
            ShellSyntaxError: If the line does not fit the grammar.
            CapacityError: If the line is too big.

        """
        self._logger.clear()
        return parse(line, self._config, self._logger)

    def execute(self, line: str) -> list[bool | None]:
        """Parse and run one line.

        Args:
            line: The raw line as typed.

        Returns:
            The outcome of each pipeline (None for skipped ones), or an
            empty list if the line was rejected.

        Raises:
            ForkError: If a process could not be created.

        """
        try:
            model = self.parse(line)
        except ParseError as e:
            self._logger.error(str(e), source=_SOURCE)
            print(e, file=sys.stderr)  # noqa: T201
            return []
        return self._executor.run(model)
