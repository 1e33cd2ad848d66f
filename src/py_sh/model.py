"""Command model — what the parser builds and the executor consumes.

One input line becomes one ``CommandModel``: an ordered list of
``PipelineSpec``, each a chain of ``Command`` stages joined by pipes,
plus the flags that say how it connects to its neighbours.

    echo hi > f.txt && cat f.txt | tr a-z A-Z ; sleep 5 &

    pipeline 0: [echo hi]           > f.txt    chain=SKIP_NEXT_ON_FAILURE
    pipeline 1: [cat f.txt] | [tr a-z A-Z]     chain=NONE
    pipeline 2: [sleep 5]                      background

Design choices:
    - **Commands are frozen** — once a stage is parsed its argv never
      changes.  Pipelines are mutable only while the parser fills them.
    - **Capacity is explicit** — the model knows its own limits and
      raises ``CapacityError`` rather than truncating.  A line that is
      too big never runs at all.
    - **Dataclass equality** — two parses of the same line compare
      equal.
"""

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from py_sh.config import DEFAULT_MAX_PIPELINES, DEFAULT_MAX_STAGES
from py_sh.errors import CapacityError


class ChainCondition(StrEnum):
    """Whether the *next* pipeline runs, given this one's outcome."""

    NONE = "none"
    SKIP_NEXT_ON_FAILURE = "skip_next_on_failure"  # &&
    SKIP_NEXT_ON_SUCCESS = "skip_next_on_success"  # ||


@dataclass(frozen=True)
class Command:
    """One pipeline stage: an argv whose first element is the program."""

    argv: tuple[str, ...]

    def __post_init__(self) -> None:
        """Reject an empty argv."""
        if not self.argv:
            msg = "A command needs at least a program name"
            raise ValueError(msg)

    @property
    def program(self) -> str:
        """Return the program name (``argv[0]``)."""
        return self.argv[0]

    def __str__(self) -> str:
        """Format as the words of the command joined by spaces."""
        return " ".join(self.argv)


@dataclass
class PipelineSpec:
    """A chain of commands connected by pipes, plus its I/O and flags.

    Attributes:
        commands: Stages in left-to-right pipe order.
        input_path: File read by stage 0 (``<``), if any.
        output_path: File written by the last stage (``>``/``>>``), if any.
        append: True when the output redirect is ``>>``.
        chain: Whether the next pipeline is skipped, and when.
        background: True when the executor should not wait for it.
        feed: Text delivered to stage 0 through a pipe (subshells only).

    """

    commands: list[Command] = field(default_factory=lambda: [])  # noqa: PIE807
    input_path: str | None = None
    output_path: str | None = None
    append: bool = False
    chain: ChainCondition = ChainCondition.NONE
    background: bool = False
    feed: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-friendly description of this pipeline."""
        return {
            "commands": [list(c.argv) for c in self.commands],
            "input_path": self.input_path,
            "output_path": self.output_path,
            "append": self.append,
            "chain": self.chain.value,
            "background": self.background,
            "feed": self.feed,
        }

    def __str__(self) -> str:
        """Format roughly as it was typed (without chain operators)."""
        text = " | ".join(str(c) for c in self.commands)
        if self.feed is not None:
            text = f"( {self.feed} )"
        if self.input_path is not None:
            text += f" < {self.input_path}"
        if self.output_path is not None:
            text += f" {'>>' if self.append else '>'} {self.output_path}"
        if self.background:
            text += " &"
        return text


@dataclass
class CommandModel:
    """Every pipeline of one input line, in execution order.

    Attributes:
        pipelines: The pipelines, in the order they appeared.
        max_pipelines: Most pipelines this model accepts.
        max_stages: Most stages any one pipeline accepts.

    """

    pipelines: list[PipelineSpec] = field(default_factory=lambda: [])  # noqa: PIE807
    max_pipelines: int = DEFAULT_MAX_PIPELINES
    max_stages: int = DEFAULT_MAX_STAGES

    def add_pipeline(self, spec: PipelineSpec) -> PipelineSpec:
        """Append a pipeline and return it.

        Raises:
            CapacityError: If the model already holds ``max_pipelines``.

        """
        if len(self.pipelines) >= self.max_pipelines:
            msg = f"too many pipelines in one line (limit {self.max_pipelines})"
            raise CapacityError(msg)
        self.pipelines.append(spec)
        return spec

    def add_stage(self, spec: PipelineSpec, command: Command) -> None:
        """Append a stage to ``spec``.

        Raises:
            CapacityError: If ``spec`` already holds ``max_stages``.

        """
        if len(spec.commands) >= self.max_stages:
            msg = f"too many stages in one pipeline (limit {self.max_stages})"
            raise CapacityError(msg)
        spec.commands.append(command)

    @property
    def last(self) -> PipelineSpec | None:
        """Return the most recently added pipeline, or None."""
        return self.pipelines[-1] if self.pipelines else None

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-friendly description of the whole model."""
        return {"pipelines": [p.to_dict() for p in self.pipelines]}

    def __iter__(self) -> Iterator[PipelineSpec]:
        """Iterate over the pipelines in execution order."""
        return iter(self.pipelines)

    def __len__(self) -> int:
        """Return the number of pipelines."""
        return len(self.pipelines)
