"""Scheduler - turns a task list into a linear execution order."""

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from loguru import logger

from taskplan.decomposition.graph import DependencyGraph
from taskplan.decomposition.models import Task


@runtime_checkable
class Scheduler(Protocol):
    """Determines execution order for tasks."""

    def schedule(self, tasks: Sequence[Task]) -> list[str]:
        """Return task ids in execution order."""
        ...


class DefaultScheduler:
    """
    Topological scheduler backed by DependencyGraph.

    Example:
        >>> DefaultScheduler().schedule(tasks)
        ['T001', 'T002', 'T003', 'T004']
    """

    def schedule(self, tasks: Sequence[Task]) -> list[str]:
        """
        Compute a deterministic execution order.

        Args:
            tasks: Tasks to order; an empty list yields an empty order.

        Returns:
            Task ids, each after all of its dependencies.

        Raises:
            GraphError: If the dependencies contain a cycle.
        """
        if not tasks:
            return []

        graph = DependencyGraph(tasks)
        order = graph.topological_sort()
        logger.debug(f"Scheduled {len(order)} tasks: {order}")
        return order


def schedule_tasks(tasks: Sequence[Task]) -> list[str]:
    """Convenience function to schedule tasks."""
    return DefaultScheduler().schedule(tasks)
