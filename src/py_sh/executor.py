"""Sequence executor — walk a command model, one pipeline at a time.

The executor decides *whether* each pipeline runs; the orchestrator
decides *how*.  The only state carried from one pipeline to the next is
a skip flag derived from the previous pipeline's chain condition and
outcome:

    ======================  =========  =================
    previous chain          outcome    next pipeline
    ======================  =========  =================
    SKIP_NEXT_ON_FAILURE    failed     skipped
    SKIP_NEXT_ON_SUCCESS    succeeded  skipped
    anything else           any        runs
    ======================  =========  =================

A skip covers exactly one pipeline.  ``false && a && b`` skips ``a``
and then runs ``b``, because a skipped pipeline has no outcome to
chain from.  Traditional shells would skip to the end of the chain;
this shell keeps the simpler one-step rule.
"""

from py_sh.logging import Logger
from py_sh.model import ChainCondition, CommandModel, PipelineSpec
from py_sh.orchestrator import ProcessOrchestrator

_SOURCE = "executor"


def skips_next(spec: PipelineSpec, *, succeeded: bool) -> bool:
    """Return True if the pipeline after ``spec`` must be skipped."""
    if spec.chain is ChainCondition.SKIP_NEXT_ON_FAILURE:
        return not succeeded
    if spec.chain is ChainCondition.SKIP_NEXT_ON_SUCCESS:
        return succeeded
    return False


class SequenceExecutor:
    """Run the pipelines of a command model in order, honouring chains."""

    def __init__(
        self,
        orchestrator: ProcessOrchestrator | None = None,
        *,
        logger: Logger | None = None,
    ) -> None:
        """Create an executor that dispatches to ``orchestrator``."""
        self._logger = logger if logger is not None else Logger()
        self._orchestrator = (
            orchestrator if orchestrator is not None else ProcessOrchestrator(logger=self._logger)
        )

    def run(self, model: CommandModel) -> list[bool | None]:
        """Execute every pipeline of ``model`` that is not skipped.

        Args:
            model: A fully parsed command model.

        Returns:
            One entry per pipeline: True/False for its outcome, or None
            if it was skipped.

        Raises:
            ForkError: Propagated from the orchestrator.

        """
        outcomes: list[bool | None] = []
        skip = False
        for number, spec in enumerate(model):
            if skip:
                self._logger.info(f"skipping pipeline #{number}: {spec}", source=_SOURCE)
                outcomes.append(None)
                skip = False
                continue
            succeeded = self._orchestrator.run(spec)
            outcomes.append(succeeded)
            skip = skips_next(spec, succeeded=succeeded)
        return outcomes
