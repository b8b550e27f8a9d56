"""Decomposer - turns an architecture into a validated TaskGraph.

Pipeline: build prompt -> generate -> parse -> validate (optional) ->
schedule -> assemble. The generation call is the only await point; the
remaining steps are pure functions of the returned text, so one
Decomposer can serve many concurrent ``decompose`` calls.
"""

import time
from typing import Protocol, runtime_checkable

from loguru import logger
from pydantic import BaseModel, Field

from taskplan.core.config import Settings
from taskplan.decomposition.errors import (
    DecomposerError,
    MissingArchitectureError,
    MissingClientError,
)
from taskplan.decomposition.models import Architecture, TaskGraph, utcnow
from taskplan.decomposition.parser import TaskParser
from taskplan.decomposition.scheduler import DefaultScheduler, Scheduler
from taskplan.decomposition.validator import TaskValidator
from taskplan.generation.client import GenerationClient
from taskplan.prompts.builder import PromptBuilder


class DecomposerConfig(BaseModel):
    """Decomposer configuration."""

    task_dir: str = Field(
        default=".claude/tasks",
        description="Directory for task files",
    )
    max_retries: int = Field(
        default=3,
        ge=0,
        description="Max generation attempts; accepted but never consulted",
    )
    validate_output: bool = Field(
        default=True,
        description="Validate parsed tasks before scheduling",
    )

    @classmethod
    def from_settings(cls, settings: Settings) -> "DecomposerConfig":
        """Build the config from application settings."""
        return cls(
            task_dir=settings.taskplan_task_dir,
            max_retries=settings.taskplan_max_retries,
            validate_output=settings.taskplan_validate_output,
        )


@runtime_checkable
class Decomposer(Protocol):
    """Creates TaskGraphs from Architecture designs."""

    async def decompose(self, architecture: Architecture | None) -> TaskGraph:
        """Decompose an architecture into a TaskGraph."""
        ...


class DefaultDecomposer:
    """
    Orchestrate generation, parsing, validation and scheduling.

    Example:
        >>> decomposer = DefaultDecomposer(client=AnthropicGenerationClient())
        >>> graph = await decomposer.decompose(architecture)
        >>> graph.execution_order
        ['T001', 'T002', 'T003']
    """

    def __init__(
        self,
        client: GenerationClient | None,
        config: DecomposerConfig | None = None,
        prompt_builder: PromptBuilder | None = None,
        parser: TaskParser | None = None,
        validator: TaskValidator | None = None,
        scheduler: Scheduler | None = None,
    ) -> None:
        """
        Initialize the decomposer.

        Args:
            client: Generation client used once per ``decompose`` call.
            config: Optional config; defaults apply when omitted.
            prompt_builder: Optional prompt builder override.
            parser: Optional parser override.
            validator: Optional validator override.
            scheduler: Optional scheduler override.

        Raises:
            MissingClientError: If no client is given.
        """
        if client is None:
            raise MissingClientError()

        self.client = client
        self.config = config or DecomposerConfig()
        self.prompt_builder = prompt_builder or PromptBuilder()
        self.parser = parser or TaskParser()
        self.validator = validator or TaskValidator()
        self.scheduler = scheduler or DefaultScheduler()

    async def decompose(self, architecture: Architecture | None) -> TaskGraph:
        """
        Create a TaskGraph from the given architecture.

        Args:
            architecture: Architecture to decompose.

        Returns:
            TaskGraph with tasks in parse order and a topological
            execution order.

        Raises:
            MissingArchitectureError: If ``architecture`` is None.
            DecomposerError: Phase ``generate`` or ``validate`` failures,
                with the underlying error as cause.
            NoTasksFoundError: If the output has no parseable task.
            GraphError: If the dependencies cannot be ordered.
        """
        if architecture is None:
            raise MissingArchitectureError()

        created_at = utcnow()
        start = time.perf_counter()

        try:
            prompt = self.prompt_builder.build_tasks_prompt(architecture)
        except Exception as e:
            raise DecomposerError(
                phase="generate",
                message="failed to build prompt",
                cause=e,
            ) from e

        logger.info("Generating task decomposition")
        try:
            result = await self.client.execute(prompt)
        except Exception as e:
            logger.error(f"Generation failed: {e}")
            raise DecomposerError(
                phase="generate",
                message="generation client failed",
                cause=e,
            ) from e

        tasks = self.parser.parse(result.output)

        if self.config.validate_output:
            try:
                self.validator.validate(tasks)
            except Exception as e:
                logger.warning(f"Generated tasks failed validation: {e}")
                raise DecomposerError(
                    phase="validate",
                    message="task validation failed",
                    cause=e,
                ) from e
        else:
            logger.debug("Output validation disabled, scheduling unvalidated tasks")

        execution_order = self.scheduler.schedule(tasks)

        graph = TaskGraph(
            tasks=tasks,
            execution_order=execution_order,
            raw_output=result.output,
            created_at=created_at,
            cost=result.cost,
            duration_seconds=time.perf_counter() - start,
            generation_duration_seconds=result.duration_seconds,
        )

        logger.info(
            f"Decomposed architecture into {len(tasks)} tasks "
            f"(cost ${graph.cost:.4f}, {graph.duration_seconds:.1f}s)"
        )
        return graph
