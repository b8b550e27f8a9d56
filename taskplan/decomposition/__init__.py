"""Task decomposition - turning model output into an execution plan.

This module provides the complete decomposition pipeline:
- Parsing (model output -> tasks)
- Validation (tasks -> structural and referential problems)
- Dependency graph (tasks -> cycle detection, topological order)
- Scheduling (tasks -> execution order)
- Decomposer (architecture -> TaskGraph)
- Persistence (tasks and graphs <-> files)
"""

from taskplan.decomposition.decomposer import (
    Decomposer,
    DecomposerConfig,
    DefaultDecomposer,
)
from taskplan.decomposition.errors import (
    DecomposerError,
    GraphError,
    MissingArchitectureError,
    MissingClientError,
    NoTasksFoundError,
    TaskPlanError,
    TaskValidationError,
    find_error,
    is_decomposer_error,
    is_graph_error,
    is_validation_error,
)
from taskplan.decomposition.graph import DependencyGraph
from taskplan.decomposition.models import (
    Architecture,
    Complexity,
    Component,
    GenerationResult,
    Plan,
    Task,
    TaskGraph,
    TaskStatus,
)
from taskplan.decomposition.parser import ParseReport, SkippedSection, TaskParser
from taskplan.decomposition.persistence import TaskFilePersistence
from taskplan.decomposition.phase import DecomposerPhase
from taskplan.decomposition.scheduler import DefaultScheduler, Scheduler
from taskplan.decomposition.validator import TaskValidator

__all__ = [
    # Models
    "Architecture",
    "Complexity",
    "Component",
    "GenerationResult",
    "Plan",
    "Task",
    "TaskGraph",
    "TaskStatus",
    # Errors
    "DecomposerError",
    "GraphError",
    "MissingArchitectureError",
    "MissingClientError",
    "NoTasksFoundError",
    "TaskPlanError",
    "TaskValidationError",
    "find_error",
    "is_decomposer_error",
    "is_graph_error",
    "is_validation_error",
    # Parser
    "ParseReport",
    "SkippedSection",
    "TaskParser",
    # Validation
    "TaskValidator",
    # Graph and scheduling
    "DependencyGraph",
    "DefaultScheduler",
    "Scheduler",
    # Decomposer
    "Decomposer",
    "DecomposerConfig",
    "DefaultDecomposer",
    "DecomposerPhase",
    # Persistence
    "TaskFilePersistence",
]
