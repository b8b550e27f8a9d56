"""Exception types for the task decomposition pipeline.

Three error kinds carry structured fields instead of bare messages:

- DecomposerError: a pipeline failure tagged with the phase that failed
  ("generate", "validate", "persistence", ...), wrapping its cause.
- TaskValidationError: one structural problem in a task list.
- GraphError: the dependency relation cannot be linearized.

Fixed conditions (no architecture, no tasks parsed, no client) have their
own subclasses so callers can catch them by type.
"""

from typing import TypeVar

E = TypeVar("E", bound=BaseException)


class TaskPlanError(Exception):
    """Base exception for taskplan errors."""

    pass


class DecomposerError(TaskPlanError):
    """Pipeline error tagged with the phase that failed."""

    def __init__(
        self,
        phase: str,
        message: str,
        cause: BaseException | None = None,
    ) -> None:
        self.phase = phase
        self.message = message
        self.cause = cause
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.cause is not None:
            return f"decomposer {self.phase}: {self.message}: {self.cause}"
        return f"decomposer {self.phase}: {self.message}"


class MissingClientError(DecomposerError):
    """The decomposer was created without a generation client."""

    def __init__(self) -> None:
        super().__init__(phase="config", message="generation client is missing")


class MissingArchitectureError(DecomposerError):
    """Decompose was called without an architecture."""

    def __init__(self) -> None:
        super().__init__(phase="generate", message="architecture is missing")


class NoTasksFoundError(DecomposerError):
    """The model output contained no parseable task sections."""

    def __init__(self) -> None:
        super().__init__(phase="parse", message="no tasks found in output")


class TaskValidationError(TaskPlanError):
    """A single structural or referential problem in a task list."""

    def __init__(
        self,
        field: str,
        message: str,
        task_id: str | None = None,
    ) -> None:
        self.field = field
        self.task_id = task_id
        self.message = message
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.task_id:
            return f"validation error on {self.field} (task {self.task_id}): {self.message}"
        return f"validation error on {self.field}: {self.message}"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TaskValidationError):
            return NotImplemented
        return (self.field, self.task_id, self.message) == (
            other.field,
            other.task_id,
            other.message,
        )

    def __hash__(self) -> int:
        return hash((self.field, self.task_id, self.message))


class GraphError(TaskPlanError):
    """The dependency graph cannot be turned into an execution order."""

    CYCLE = "cycle"
    INCOMPLETE = "incomplete"

    def __init__(
        self,
        kind: str,
        message: str,
        task_ids: list[str] | None = None,
    ) -> None:
        self.kind = kind
        self.task_ids = list(task_ids or [])
        self.message = message
        super().__init__(str(self))

    def __str__(self) -> str:
        return f"graph error ({self.kind}): {self.message} [tasks: {', '.join(self.task_ids)}]"


# =============================================================================
# CAUSE CHAIN HELPERS
# =============================================================================


def find_error(exc: BaseException | None, error_type: type[E]) -> E | None:
    """Return the first exception of ``error_type`` in the cause chain.

    Walks ``exc`` itself, then the wrapped ``cause`` (or ``__cause__``) links.

    Example:
        >>> try:
        ...     await decomposer.decompose(arch)
        ... except DecomposerError as e:
        ...     problem = find_error(e, TaskValidationError)
    """
    seen: set[int] = set()
    current = exc
    while current is not None and id(current) not in seen:
        if isinstance(current, error_type):
            return current
        seen.add(id(current))
        current = getattr(current, "cause", None) or current.__cause__
    return None


def is_decomposer_error(exc: BaseException | None) -> bool:
    """Check whether a DecomposerError is anywhere in the cause chain."""
    return find_error(exc, DecomposerError) is not None


def is_validation_error(exc: BaseException | None) -> bool:
    """Check whether a TaskValidationError is anywhere in the cause chain."""
    return find_error(exc, TaskValidationError) is not None


def is_graph_error(exc: BaseException | None) -> bool:
    """Check whether a GraphError is anywhere in the cause chain."""
    return find_error(exc, GraphError) is not None
