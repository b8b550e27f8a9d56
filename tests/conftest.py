"""Pytest configuration and shared fixtures."""

import os
from collections.abc import Callable, Generator
from unittest.mock import AsyncMock, MagicMock

import pytest

# Set test environment
os.environ.setdefault("ANTHROPIC_API_KEY", "sk-ant-REDACTED")
os.environ.setdefault("TASKPLAN_LOG_LEVEL", "DEBUG")


@pytest.fixture
def mock_settings() -> Generator:
    """Clear cached settings around a test."""
    from taskplan.core.config import clear_settings_cache

    clear_settings_cache()

    yield

    clear_settings_cache()


@pytest.fixture
def sample_output() -> str:
    """Provide model output describing four tasks in a diamond."""
    return """Here is the decomposition.

### Task T001: Define models
- **Description**: Create the pydantic models for tasks and graphs
- **Dependencies**: none
- **Files**: taskplan/models.py
- **Complexity**: small
- **Success Criteria**: Models import without errors

### Task T002: Write parser
- **Description**: Parse task blocks from model output
- **Dependencies**: [T001]
- **Files**: taskplan/parser.py, tests/test_parser.py
- **Complexity**: medium

### Task T003: Write validator
- **Description**: Check ids and dependency references
- **Dependencies**: T001
- **Files**: taskplan/validator.py
- **Complexity**: medium

### Task T004: Wire the pipeline
- **Description**: Compose parser, validator and scheduler
- **Dependencies**: [T002], [T003]
- **Files**: taskplan/decomposer.py
- **Complexity**: large
- **Success Criteria**: End-to-end test passes
- **Success Criteria**: Execution order is deterministic
"""


@pytest.fixture
def make_task() -> Callable:
    """Factory for tasks with sensible defaults."""
    from taskplan.decomposition.models import Task

    def _make(task_id: str, *dependencies: str, **kwargs) -> Task:
        kwargs.setdefault("title", f"Task {task_id}")
        kwargs.setdefault("description", f"Do {task_id}")
        return Task(id=task_id, dependencies=list(dependencies), **kwargs)

    return _make


@pytest.fixture
def sample_tasks(make_task: Callable) -> list:
    """Provide a diamond of tasks: T002 and T003 depend on T001, T004 on both."""
    return [
        make_task("T001"),
        make_task("T002", "T001"),
        make_task("T003", "T001"),
        make_task("T004", "T002", "T003"),
    ]


@pytest.fixture
def sample_architecture():
    """Provide a small architecture."""
    from taskplan.decomposition.models import Architecture, Component

    return Architecture(
        components=[
            Component(
                name="Parser",
                description="Reads task blocks from model output",
                files=["taskplan/parser.py"],
            ),
            Component(name="Scheduler", description="Orders tasks by dependency"),
        ],
        dependencies=["pydantic", "loguru"],
        file_structure=["taskplan/", "tests/"],
        tech_decisions=["Kahn's algorithm with lexical tie-break"],
    )


@pytest.fixture
def mock_generation_client(sample_output: str) -> MagicMock:
    """Provide a generation client returning ``sample_output``."""
    from taskplan.decomposition.models import GenerationResult

    client = MagicMock()
    client.execute = AsyncMock(
        return_value=GenerationResult(output=sample_output, cost=0.25, duration_seconds=1.5)
    )
    client.aclose = AsyncMock()
    return client


# Markers
def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: mark test as unit test")
    config.addinivalue_line("markers", "integration: mark test as integration test")
    config.addinivalue_line("markers", "slow: mark test as slow running")
