"""Dependency graph - cycle detection and topological ordering.

Nodes are task ids. Each node keeps the dependencies its task declared
(incoming edges), the tasks that depend on it (outgoing edges) and an
in-degree that only counts dependencies resolving to a node in the graph.
Dangling references are ignored here; rejecting them is the validator's job.
"""

from collections import deque
from collections.abc import Sequence
from dataclasses import dataclass, field

from loguru import logger

from taskplan.decomposition.errors import GraphError
from taskplan.decomposition.models import Task


@dataclass
class GraphNode:
    """One task in the dependency graph."""

    id: str
    dependencies: list[str] = field(default_factory=list)
    dependents: list[str] = field(default_factory=list)
    in_degree: int = 0


class DependencyGraph:
    """
    Directed graph of task dependencies built from a task list.

    Each instance is built from, and owns, one task list; nothing is shared
    between graphs.

    Example:
        >>> graph = DependencyGraph(tasks)
        >>> graph.detect_cycle()
        None
        >>> graph.topological_sort()
        ['T001', 'T002', 'T003']
    """

    def __init__(self, tasks: Sequence[Task]) -> None:
        """
        Build nodes and edges.

        Args:
            tasks: Task list; for a repeated id the last task wins.
        """
        self._tasks: dict[str, Task] = {}
        self._nodes: dict[str, GraphNode] = {}

        # First pass: one node per task id
        for task in tasks:
            self._tasks[task.id] = task
            self._nodes[task.id] = GraphNode(id=task.id, dependencies=list(task.dependencies))

        # Second pass: reverse edges and in-degree over resolvable dependencies
        for node in self._nodes.values():
            for dep in node.dependencies:
                dep_node = self._nodes.get(dep)
                if dep_node is None:
                    continue
                dep_node.dependents.append(node.id)
                node.in_degree += 1

        logger.debug(f"Built dependency graph with {len(self._nodes)} nodes")

    # =========================================================================
    # CYCLE DETECTION
    # =========================================================================

    def detect_cycle(self) -> list[str] | None:
        """
        Find a dependency cycle with depth-first search.

        Roots are tried in ascending id order so the reported cycle is the
        same on every run. The search uses an explicit stack, so long
        dependency chains cannot exhaust the interpreter's recursion limit.

        Returns:
            The cycle as ids where each id depends on the next and the last
            repeats the first (e.g. ``["T001", "T002", "T001"]``), or None.
        """
        visited: set[str] = set()
        on_path: set[str] = set()

        for root in sorted(self._nodes):
            if root in visited:
                continue

            path = [root]
            visited.add(root)
            on_path.add(root)
            stack = [iter(self._resolved_dependencies(root))]

            while stack:
                dep = next(stack[-1], None)

                if dep is None:
                    stack.pop()
                    on_path.discard(path.pop())
                    continue

                if dep in on_path:
                    cycle = path[path.index(dep):] + [dep]
                    logger.warning(f"Circular dependency detected: {' -> '.join(cycle)}")
                    return cycle

                if dep not in visited:
                    visited.add(dep)
                    on_path.add(dep)
                    path.append(dep)
                    stack.append(iter(self._resolved_dependencies(dep)))

        return None

    def has_cycle(self) -> bool:
        """Check whether the graph contains a cycle."""
        return self.detect_cycle() is not None

    # =========================================================================
    # TOPOLOGICAL SORT
    # =========================================================================

    def topological_sort(self) -> list[str]:
        """
        Order task ids so every task comes after its dependencies.

        Kahn's algorithm over a FIFO queue seeded with the ready ids in
        sorted order. Tasks freed by each dequeued task are sorted and
        appended, so the result depends only on the task set and not on the
        order of the input list.

        Returns:
            Task ids in execution order.

        Raises:
            GraphError: ``cycle`` with the cycle members, or ``incomplete``
                if some nodes could not be ordered.
        """
        cycle = self.detect_cycle()
        if cycle is not None:
            raise GraphError(
                kind=GraphError.CYCLE,
                task_ids=cycle,
                message="circular dependency detected",
            )

        in_degree = {node_id: node.in_degree for node_id, node in self._nodes.items()}

        ready: deque[str] = deque(
            sorted(node_id for node_id, degree in in_degree.items() if degree == 0)
        )

        order: list[str] = []
        while ready:
            current = ready.popleft()
            order.append(current)

            newly_ready: list[str] = []
            for dependent in self._nodes[current].dependents:
                in_degree[dependent] -= 1
                if in_degree[dependent] == 0:
                    newly_ready.append(dependent)

            ready.extend(sorted(newly_ready))

        if len(order) != len(self._nodes):
            missing = sorted(set(self._nodes) - set(order))
            logger.error(f"Topological sort left {len(missing)} tasks unordered: {missing}")
            raise GraphError(
                kind=GraphError.INCOMPLETE,
                task_ids=missing,
                message="topological sort incomplete, possible undetected cycle",
            )

        return order

    # =========================================================================
    # ACCESSORS
    # =========================================================================

    def get_task(self, task_id: str) -> Task | None:
        """Get a task by ID."""
        return self._tasks.get(task_id)

    def get_dependents(self, task_id: str) -> list[str]:
        """Get ids of tasks that depend on the given task."""
        node = self._nodes.get(task_id)
        return list(node.dependents) if node else []

    def get_dependencies(self, task_id: str) -> list[str]:
        """Get the resolvable dependencies of the given task."""
        return self._resolved_dependencies(task_id)

    @property
    def size(self) -> int:
        """Number of nodes in the graph."""
        return len(self._nodes)

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, task_id: object) -> bool:
        return task_id in self._nodes

    def _resolved_dependencies(self, task_id: str) -> list[str]:
        node = self._nodes.get(task_id)
        if node is None:
            return []
        return [dep for dep in node.dependencies if dep in self._nodes]
