"""Prompt management - templates and prompt building."""

from taskplan.prompts.builder import PromptBuilder, format_architecture_summary
from taskplan.prompts.templates import (
    PLANNING_CONSTRAINTS,
    TASKS_PHASE_PROMPT,
    PromptTemplate,
)

__all__ = [
    "PLANNING_CONSTRAINTS",
    "PromptBuilder",
    "PromptTemplate",
    "TASKS_PHASE_PROMPT",
    "format_architecture_summary",
]
