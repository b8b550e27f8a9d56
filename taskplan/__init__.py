"""
taskplan - turn model-generated task lists into dependency-ordered plans.

Parses free-text task decompositions, validates them and schedules them
into a deterministic execution order.
"""

__version__ = "0.1.0"

from taskplan.decomposition import DefaultDecomposer, TaskGraph

__all__ = ["DefaultDecomposer", "TaskGraph", "__version__"]
