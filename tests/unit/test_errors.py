"""Unit tests for error types and cause-chain helpers."""

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


class TestMessages:
    """Tests for error string forms."""

    def test_decomposer_error_without_cause(self):
        """Test phase and message rendering."""
        err = DecomposerError("generate", "generation client failed")

        assert str(err) == "decomposer generate: generation client failed"

    def test_decomposer_error_with_cause(self):
        """Test that the cause is appended."""
        err = DecomposerError("generate", "generation client failed", RuntimeError("timeout"))

        assert str(err) == "decomposer generate: generation client failed: timeout"
        assert err.cause.args == ("timeout",)

    def test_validation_error_with_task(self):
        """Test rendering with a task id."""
        err = TaskValidationError(field="id", task_id="T1", message="bad id")

        assert str(err) == "validation error on id (task T1): bad id"

    def test_validation_error_without_task(self):
        """Test rendering without a task id."""
        err = TaskValidationError(field="tasks", message="at least one task is required")

        assert str(err) == "validation error on tasks: at least one task is required"

    def test_graph_error(self):
        """Test kind and task id rendering."""
        err = GraphError(kind=GraphError.CYCLE, task_ids=["T001", "T002", "T001"], message="circular")

        assert str(err) == "graph error (cycle): circular [tasks: T001, T002, T001]"


class TestSentinels:
    """Tests for the fixed-condition error types."""

    def test_sentinels_are_decomposer_errors(self):
        """Test phases of the fixed conditions."""
        assert MissingClientError().phase == "config"
        assert MissingArchitectureError().phase == "generate"
        assert NoTasksFoundError().phase == "parse"
        for err in (MissingClientError(), MissingArchitectureError(), NoTasksFoundError()):
            assert isinstance(err, DecomposerError)
            assert isinstance(err, TaskPlanError)

    def test_validation_errors_compare_by_value(self):
        """Test equality on field, task id and message."""
        a = TaskValidationError(field="id", task_id="T1", message="bad")
        b = TaskValidationError(field="id", task_id="T1", message="bad")

        assert a == b
        assert hash(a) == hash(b)
        assert a != TaskValidationError(field="id", task_id="T2", message="bad")


class TestCauseChain:
    """Tests for find_error and the is_* helpers."""

    def test_find_wrapped_validation_error(self):
        """Test a validation error wrapped in a decomposer error."""
        inner = TaskValidationError(field="id", task_id="T1", message="bad")
        outer = DecomposerError("validate", "task validation failed", inner)

        assert find_error(outer, TaskValidationError) is inner
        assert is_validation_error(outer)
        assert is_decomposer_error(outer)
        assert not is_graph_error(outer)

    def test_find_through_dunder_cause(self):
        """Test the ``raise ... from`` chain."""
        inner = GraphError(kind="cycle", message="circular")
        try:
            try:
                raise inner
            except GraphError as e:
                raise RuntimeError("wrapped") from e
        except RuntimeError as outer:
            assert find_error(outer, GraphError) is inner

    def test_nested_decomposer_errors(self):
        """Test two levels of wrapping."""
        inner = TaskValidationError(field="id", message="bad")
        middle = DecomposerError("validate", "task validation failed", inner)
        outer = DecomposerError("run", "task decomposition failed", middle)

        assert find_error(outer, TaskValidationError) is inner
        assert find_error(outer, DecomposerError) is outer

    def test_none_and_unrelated(self):
        """Test helpers on None and on an unrelated error."""
        assert find_error(None, DecomposerError) is None
        assert not is_decomposer_error(ValueError("x"))

    def test_self_referencing_chain_terminates(self):
        """Test that a looping chain does not hang."""
        err = DecomposerError("generate", "loop")
        err.cause = err

        assert find_error(err, GraphError) is None
