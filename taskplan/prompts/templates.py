"""
Prompt templates for task decomposition.

The task block layout in TASKS_PHASE_PROMPT is the format TaskParser
reads back, so the two must change together.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict

# =============================================================================
# TEMPLATE MODEL
# =============================================================================


class PromptTemplate(BaseModel):
    """A reusable prompt template."""

    model_config = ConfigDict(frozen=True)

    name: str
    template: str
    description: str = ""

    def format(self, **kwargs: Any) -> str:
        """Format the template with provided values.

        Args:
            **kwargs: Template variable values.

        Returns:
            Formatted prompt string.
        """
        return self.template.format(**kwargs)


# =============================================================================
# SHARED SECTIONS
# =============================================================================


PLANNING_CONSTRAINTS = """## PLANNING CONSTRAINTS

When creating plans and decomposing tasks:
1. Be specific and actionable - each task should be implementable in a single session
2. Reference specific files and functions where possible
3. Consider dependencies between tasks
4. Estimate complexity (small/medium/large) for each task
5. Identify potential risks and blockers
6. NEVER guess or assume - base every decision on verified facts

## OUTPUT FORMAT

Respond with structured output that can be parsed. Use markdown headers and lists consistently."""


# =============================================================================
# DECOMPOSITION PROMPTS
# =============================================================================


TASKS_PHASE_PROMPT = PromptTemplate(
    name="tasks_phase",
    description="Decompose an architecture into dependency-ordered tasks",
    template="""## TASK DECOMPOSITION PHASE

Based on the following architecture:

{architecture}

Decompose into executable tasks:
1. Each task should be completable in one session
2. Tasks must have clear dependencies
3. Include file paths and specific changes
4. Order tasks by dependency (independent tasks first)

Output tasks in this format:

### Task T001: [Brief Title]
- **Description**: What to do
- **Dependencies**: [T000] or none
- **Files**: [list of files to modify]
- **Complexity**: small/medium/large
- **Success Criteria**: How to verify the task is done

"""
    + PLANNING_CONSTRAINTS,
)
