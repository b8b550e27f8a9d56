"""
Prompt builder for the task decomposition phase.

Renders an Architecture into the prompt sent to the generation client.
"""

from loguru import logger

from taskplan.decomposition.errors import DecomposerError
from taskplan.decomposition.models import Architecture
from taskplan.prompts.templates import TASKS_PHASE_PROMPT


class PromptBuilder:
    """
    Build generation prompts from planning artifacts.

    Example:
        >>> builder = PromptBuilder()
        >>> prompt = builder.build_tasks_prompt(architecture)
        >>> "### Task T001" in prompt
        True
    """

    def build_tasks_prompt(self, architecture: Architecture | None) -> str:
        """
        Build the task decomposition prompt.

        Args:
            architecture: Architecture produced by the previous phase.

        Returns:
            Formatted prompt.

        Raises:
            DecomposerError: If no architecture is given.
        """
        if architecture is None:
            raise DecomposerError(
                phase="prompt",
                message="architecture is required for tasks prompt",
            )

        summary = format_architecture_summary(architecture)
        prompt = TASKS_PHASE_PROMPT.format(architecture=summary)
        logger.debug(f"Built tasks prompt ({len(prompt)} chars)")
        return prompt


def format_architecture_summary(architecture: Architecture) -> str:
    """Format an Architecture into a readable summary for prompts."""
    lines = ["### Components"]
    for component in architecture.components:
        lines.append(f"- **{component.name}**: {component.description}")
        if component.files:
            lines.append(f"  - Files: {', '.join(component.files)}")

    lines.extend(["", "### Dependencies"])
    lines.extend(f"- {dep}" for dep in architecture.dependencies)

    lines.extend(["", "### File Structure"])
    lines.extend(f"- {path}" for path in architecture.file_structure)

    lines.extend(["", "### Technical Decisions"])
    lines.extend(f"- {decision}" for decision in architecture.tech_decisions)

    return "\n".join(lines) + "\n"
