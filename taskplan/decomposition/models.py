"""Pydantic models for task decomposition.

This module defines the data structures shared by the decomposition
pipeline: the architecture that goes in, the tasks parsed from model
output, the task graph that comes out, and the planning session the
phase adapter updates.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

# =============================================================================
# ENUMS
# =============================================================================


class TaskStatus(str, Enum):
    """Execution status of a task."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"


class Complexity(str, Enum):
    """Task complexity level."""

    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


# =============================================================================
# ARCHITECTURE (decomposer input)
# =============================================================================


class Component(BaseModel):
    """An architectural component."""

    name: str
    description: str = ""
    files: list[str] = Field(default_factory=list)


class Architecture(BaseModel):
    """Architecture design produced by the previous planning phase.

    Example:
        >>> arch = Architecture(
        ...     components=[Component(name="Parser", description="Reads model output")],
        ...     file_structure=["taskplan/parser.py"],
        ... )
    """

    components: list[Component] = Field(default_factory=list)
    dependencies: list[str] = Field(
        default_factory=list,
        description="External libraries or services",
    )
    file_structure: list[str] = Field(default_factory=list)
    tech_decisions: list[str] = Field(default_factory=list)
    raw_output: str = ""


# =============================================================================
# TASKS
# =============================================================================


class Task(BaseModel):
    """A single unit of work parsed from model output.

    The model does not check its own id or dependencies; that is the
    validator's job, so malformed tasks can still be represented and
    reported.

    Example:
        >>> task = Task(
        ...     id="T002",
        ...     title="Add parser",
        ...     description="Parse task sections",
        ...     dependencies=["T001"],
        ... )
        >>> task.dependencies
        ['T001']
    """

    model_config = ConfigDict(frozen=False)

    id: str = Field(..., description="Task identifier, T followed by three digits")
    title: str = Field(default="", description="Short task title")
    description: str = Field(default="", description="What to do")
    dependencies: list[str] = Field(
        default_factory=list,
        description="Task IDs this task depends on",
    )
    files: list[str] = Field(
        default_factory=list,
        description="Files the task is expected to touch",
    )
    status: TaskStatus = Field(default=TaskStatus.PENDING)
    complexity: Complexity | None = Field(default=None)
    success_criteria: list[str] = Field(default_factory=list)

    # Execution tracking, owned by callers
    started_at: datetime | None = None
    completed_at: datetime | None = None


class TaskGraph(BaseModel):
    """Validated, dependency-ordered execution plan.

    ``tasks`` keeps parse order; ``execution_order`` is the topological
    order computed by the scheduler.
    """

    model_config = ConfigDict(frozen=False)

    id: str = Field(default_factory=lambda: str(uuid4()))
    architecture_ref: str | None = Field(
        default=None,
        description="Reference to the source architecture",
    )
    tasks: list[Task] = Field(default_factory=list)
    execution_order: list[str] = Field(default_factory=list)
    raw_output: str = ""

    # Metadata
    created_at: datetime = Field(default_factory=utcnow)
    cost: float = Field(default=0.0, ge=0.0)
    duration_seconds: float = Field(
        default=0.0,
        ge=0.0,
        description="Wall clock time of the whole pipeline",
    )
    generation_duration_seconds: float = Field(
        default=0.0,
        ge=0.0,
        description="Duration reported by the generation client",
    )

    def get_task(self, task_id: str) -> Task | None:
        """Get a task by ID."""
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None

    def ordered_tasks(self) -> list[Task]:
        """Tasks in execution order."""
        by_id = {task.id: task for task in self.tasks}
        return [by_id[tid] for tid in self.execution_order if tid in by_id]

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-compatible dictionary."""
        return self.model_dump(mode="json")


# =============================================================================
# GENERATION
# =============================================================================


class GenerationResult(BaseModel):
    """Output of one generation call."""

    model_config = ConfigDict(frozen=True)

    output: str
    cost: float = Field(default=0.0, ge=0.0)
    duration_seconds: float = Field(default=0.0, ge=0.0)


# =============================================================================
# PLANNING SESSION
# =============================================================================


class Plan(BaseModel):
    """Planning session state shared between planning phases."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    user_prompt: str = ""
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    architecture: Architecture | None = None
    task_graph: TaskGraph | None = None

    completed_phases: list[str] = Field(default_factory=list)
    total_cost: float = 0.0

    def is_phase_completed(self, phase_name: str) -> bool:
        """Check if a phase has already completed."""
        return phase_name in self.completed_phases

    def mark_phase_completed(self, phase_name: str) -> None:
        """Record a completed phase once."""
        if not self.is_phase_completed(phase_name):
            self.completed_phases.append(phase_name)
            self.updated_at = utcnow()

    def add_cost(self, cost: float) -> None:
        """Add to the running total cost."""
        self.total_cost += cost
        self.updated_at = utcnow()
