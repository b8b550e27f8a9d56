"""Planning phase adapter for task decomposition."""

from loguru import logger

from taskplan.decomposition.decomposer import Decomposer
from taskplan.decomposition.errors import DecomposerError
from taskplan.decomposition.models import Plan


class DecomposerPhase:
    """
    Runs the decomposer as the ``tasks`` step of a planning session.

    Example:
        >>> phase = DecomposerPhase(decomposer)
        >>> if phase.should_run(plan):
        ...     await phase.run(plan)
    """

    NAME = "tasks"

    def __init__(self, decomposer: Decomposer) -> None:
        if decomposer is None:
            raise DecomposerError(phase="config", message="decomposer is missing")
        self.decomposer = decomposer

    @property
    def name(self) -> str:
        """Phase name."""
        return self.NAME

    def should_run(self, plan: Plan | None) -> bool:
        """Run only when an architecture exists and tasks are not done yet."""
        if plan is None or plan.architecture is None:
            return False
        return not plan.is_phase_completed(self.NAME)

    async def run(self, plan: Plan | None) -> None:
        """
        Decompose the plan's architecture and store the result on the plan.

        Args:
            plan: Planning session, updated in place.

        Raises:
            DecomposerError: Phase ``run``, wrapping any decomposition failure.
        """
        if plan is None:
            raise DecomposerError(phase="run", message="plan is missing")

        if plan.architecture is None:
            raise DecomposerError(
                phase="run",
                message="architecture is missing - tasks phase requires the architecture phase first",
            )

        try:
            graph = await self.decomposer.decompose(plan.architecture)
        except Exception as e:
            raise DecomposerError(
                phase="run",
                message="task decomposition failed",
                cause=e,
            ) from e

        plan.task_graph = graph
        plan.add_cost(graph.cost)
        plan.mark_phase_completed(self.NAME)

        logger.info(f"Plan {plan.id}: tasks phase completed with {len(graph.tasks)} tasks")
