"""Task list validation.

Structural and referential checks over a parsed task list. Both entry
points share one ordered check sequence:

1. the list is non-empty
2. every id matches ``T###``
3. no id is duplicated
4. every dependency refers to a task in the list
5. no task depends on itself
6. every task has a title and a description (diagnostic mode only)

``validate`` stops at the first problem and raises it; ``validate_all``
runs every check and returns the full list.
"""

import re
from collections import Counter
from collections.abc import Callable, Iterator, Sequence

from loguru import logger

from taskplan.decomposition.errors import TaskValidationError
from taskplan.decomposition.models import Task

TASK_ID_PATTERN = re.compile(r"^T\d{3}$")

Check = Callable[[Sequence[Task]], Iterator[TaskValidationError]]


# =============================================================================
# CHECKS
# =============================================================================


def check_task_ids(tasks: Sequence[Task]) -> Iterator[TaskValidationError]:
    """Every id must be T followed by exactly three digits."""
    for task in tasks:
        if not TASK_ID_PATTERN.fullmatch(task.id):
            yield TaskValidationError(
                field="id",
                task_id=task.id,
                message="task ID must match pattern T### (e.g., T001)",
            )


def check_unique_ids(tasks: Sequence[Task]) -> Iterator[TaskValidationError]:
    """Ids must not repeat; reported once per id, in first-seen order."""
    counts = Counter(task.id for task in tasks)
    for task_id, count in counts.items():
        if count > 1:
            yield TaskValidationError(
                field="id",
                task_id=task_id,
                message=f"duplicate task ID (appears {count} times)",
            )


def check_dependency_references(tasks: Sequence[Task]) -> Iterator[TaskValidationError]:
    """Dependencies must point at tasks in the same list."""
    known = {task.id for task in tasks}
    for task in tasks:
        for dep in task.dependencies:
            if dep not in known:
                yield TaskValidationError(
                    field="dependencies",
                    task_id=task.id,
                    message=f"references non-existent task {dep}",
                )


def check_self_dependencies(tasks: Sequence[Task]) -> Iterator[TaskValidationError]:
    """A task cannot list itself as a dependency."""
    for task in tasks:
        if task.id in task.dependencies:
            yield TaskValidationError(
                field="dependencies",
                task_id=task.id,
                message="task cannot depend on itself",
            )


def check_completeness(tasks: Sequence[Task]) -> Iterator[TaskValidationError]:
    """Title and description are required, reported per field."""
    for task in tasks:
        if not task.title.strip():
            yield TaskValidationError(
                field="title",
                task_id=task.id,
                message="task title is required",
            )
        if not task.description.strip():
            yield TaskValidationError(
                field="description",
                task_id=task.id,
                message="task description is required",
            )


# =============================================================================
# VALIDATOR
# =============================================================================


class TaskValidator:
    """
    Validate task lists for structural and referential soundness.

    Stateless; one instance can be shared across concurrent calls.

    Example:
        >>> validator = TaskValidator()
        >>> validator.validate(tasks)  # raises the first problem
        >>> for problem in validator.validate_all(tasks):
        ...     print(problem.field, problem.task_id, problem.message)
    """

    STRUCTURAL_CHECKS: tuple[Check, ...] = (
        check_task_ids,
        check_unique_ids,
        check_dependency_references,
        check_self_dependencies,
    )
    DIAGNOSTIC_CHECKS: tuple[Check, ...] = (check_completeness,)

    def validate(self, tasks: Sequence[Task]) -> None:
        """
        Fail fast on the first problem.

        Args:
            tasks: Parsed tasks.

        Raises:
            TaskValidationError: The first problem found.
        """
        for problem in self._iter_problems(tasks, diagnostic=False):
            logger.debug(f"Task validation failed: {problem}")
            raise problem

    def validate_all(self, tasks: Sequence[Task]) -> list[TaskValidationError]:
        """
        Collect every problem, including missing titles and descriptions.

        Args:
            tasks: Parsed tasks.

        Returns:
            All problems found, empty if the list is valid.
        """
        problems = list(self._iter_problems(tasks, diagnostic=True))
        if problems:
            logger.debug(f"Task validation found {len(problems)} problems")
        return problems

    def is_valid(self, tasks: Sequence[Task]) -> bool:
        """Check whether ``validate`` would pass."""
        return next(self._iter_problems(tasks, diagnostic=False), None) is None

    def _iter_problems(
        self,
        tasks: Sequence[Task],
        diagnostic: bool,
    ) -> Iterator[TaskValidationError]:
        """Run the shared check sequence lazily."""
        if not tasks:
            yield TaskValidationError(field="tasks", message="at least one task is required")
            return

        checks = self.STRUCTURAL_CHECKS
        if diagnostic:
            checks = checks + self.DIAGNOSTIC_CHECKS

        for check in checks:
            yield from check(tasks)


def validate_tasks(tasks: Sequence[Task]) -> list[TaskValidationError]:
    """Convenience function returning every validation problem."""
    return TaskValidator().validate_all(tasks)
