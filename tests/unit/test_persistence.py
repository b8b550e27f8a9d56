"""Unit tests for TaskFilePersistence."""

from datetime import datetime, timezone

import pytest

from taskplan.decomposition.errors import DecomposerError
from taskplan.decomposition.models import Complexity, Task, TaskGraph, TaskStatus
from taskplan.decomposition.persistence import INVALID_TASK_FILE, TaskFilePersistence


@pytest.fixture
def store():
    """Create a persistence instance."""
    return TaskFilePersistence()


@pytest.fixture
def full_task():
    """Task with every field set."""
    return Task(
        id="T002",
        title="Write parser",
        description="Parse task blocks.\n\nKeep it lenient.",
        dependencies=["T001"],
        files=["taskplan/parser.py", "tests/test_parser.py"],
        status=TaskStatus.IN_PROGRESS,
        complexity=Complexity.MEDIUM,
        success_criteria=["Parses sample output", "Skips broken sections"],
        started_at=datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc),
    )


class TestTaskFiles:
    """Tests for single task files."""

    def test_save_and_load(self, store, full_task, tmp_path):
        """Test that a saved task loads back equal."""
        path = store.save_task(full_task, tmp_path)

        assert path == tmp_path / "T002.md"
        assert store.load_task("T002", tmp_path) == full_task

    def test_markdown_layout(self, store, full_task):
        """Test the rendered frontmatter and body."""
        content = store.format_task_markdown(full_task)

        assert content.startswith("---\nid: T002\ntitle: Write parser\nstatus: in_progress\n")
        assert "# T002: Write parser" in content
        assert "## Description" in content
        assert "- [ ] Parses sample output" in content
        assert "- `taskplan/parser.py`" in content

    def test_minimal_task_omits_empty_fields(self, store):
        """Test that empty optional fields are left out."""
        content = store.format_task_markdown(Task(id="T001", title="A", description="a"))

        assert "dependencies" not in content
        assert "complexity" not in content
        assert "## Success Criteria" not in content
        assert "## Files to Modify" not in content

    def test_checked_criteria_are_read(self, store):
        """Test that ticked checklist items are still criteria."""
        content = (
            "---\nid: T001\ntitle: A\nstatus: completed\n---\n\n# T001: A\n\n"
            "## Description\n\nDo it\n\n## Success Criteria\n\n- [x] Done\n- [ ] Pending\n"
        )

        task = store.parse_task_markdown(content)

        assert task.success_criteria == ["Done", "Pending"]
        assert task.status == TaskStatus.COMPLETED
        assert task.description == "Do it"

    def test_title_with_dashes_round_trips(self, store, tmp_path):
        """Test that a '---' inside a frontmatter value is not a delimiter."""
        task = Task(id="T001", title="Split parser --- phase two", description="a --- b")

        store.save_task(task, tmp_path)

        assert store.load_task("T001", tmp_path) == task

    def test_heading_lines_in_description_round_trip(self, store, tmp_path):
        """Test that markdown headings inside a description stay in it."""
        task = Task(
            id="T001",
            title="Docs",
            description="Write the guide.\n\n## Usage\n\nRun it.\n\n## Description\n\nAgain.",
            success_criteria=["Guide renders"],
            files=["docs/guide.md"],
        )

        store.save_task(task, tmp_path)

        assert store.load_task("T001", tmp_path) == task

    def test_creates_directory(self, store, full_task, tmp_path):
        """Test that nested directories are created."""
        target = tmp_path / "a" / "b"

        store.save_task(full_task, target)

        assert (target / "T002.md").exists()

    def test_no_temp_file_left(self, store, full_task, tmp_path):
        """Test that the atomic write cleans up."""
        store.save_task(full_task, tmp_path)

        assert [p.name for p in tmp_path.iterdir()] == ["T002.md"]

    def test_file_permissions(self, store, full_task, tmp_path):
        """Test that task files are owner read/write only."""
        path = store.save_task(full_task, tmp_path)

        assert path.stat().st_mode & 0o777 == 0o600

    def test_save_missing_task(self, store, tmp_path):
        """Test that None cannot be saved."""
        with pytest.raises(DecomposerError) as exc_info:
            store.save_task(None, tmp_path)

        assert exc_info.value.phase == "persistence"

    def test_load_missing_task(self, store, tmp_path):
        """Test loading an id without a file."""
        with pytest.raises(DecomposerError) as exc_info:
            store.load_task("T404", tmp_path)

        assert exc_info.value.message == "task not found"

    def test_invalid_file_format(self, store):
        """Test content without frontmatter."""
        with pytest.raises(DecomposerError):
            store.parse_task_markdown("# Just a heading")


class TestListingAndPaths:
    """Tests for list_tasks and task_path."""

    def test_list_tasks_sorted(self, store, tmp_path):
        """Test that ids are listed in sorted order."""
        for task_id in ("T003", "T001", "T002"):
            store.save_task(Task(id=task_id, title="x", description="y"), tmp_path)
        (tmp_path / "notes.txt").write_text("ignored")

        assert store.list_tasks(tmp_path) == ["T001", "T002", "T003"]

    def test_list_missing_directory(self, store, tmp_path):
        """Test that a missing directory lists nothing."""
        assert store.list_tasks(tmp_path / "missing") == []

    @pytest.mark.parametrize("task_id", ["../evil", "a/b", "a\\b", "", ".", ".."])
    def test_unsafe_ids_cannot_escape(self, store, tmp_path, task_id):
        """Test that ids with path parts map to a fixed file name."""
        assert store.task_path(task_id, tmp_path) == tmp_path / INVALID_TASK_FILE

    def test_invalid_task_file_not_listed(self, store, tmp_path):
        """Test that the fallback file is excluded from listings."""
        store.save_task(Task(id="../x", title="x", description="y"), tmp_path)
        store.save_task(Task(id="T001", title="x", description="y"), tmp_path)

        assert (tmp_path / INVALID_TASK_FILE).exists()
        assert store.list_tasks(tmp_path) == ["T001"]


class TestTaskGraphFiles:
    """Tests for whole-graph YAML files."""

    def test_save_and_load_graph(self, store, sample_tasks, tmp_path):
        """Test that a saved graph loads back equal."""
        graph = TaskGraph(
            tasks=sample_tasks,
            execution_order=["T001", "T002", "T003", "T004"],
            raw_output="### Task T001: ...",
            cost=0.12,
            duration_seconds=3.5,
        )
        path = tmp_path / "graphs" / "task_graph.yaml"

        store.save_task_graph(graph, path)
        loaded = store.load_task_graph(path)

        assert loaded == graph

    def test_load_missing_graph(self, store, tmp_path):
        """Test loading a graph that does not exist."""
        with pytest.raises(DecomposerError) as exc_info:
            store.load_task_graph(tmp_path / "nope.yaml")

        assert exc_info.value.message == "task graph not found"

    def test_load_invalid_graph(self, store, tmp_path):
        """Test that malformed YAML is wrapped."""
        path = tmp_path / "bad.yaml"
        path.write_text("tasks: [unclosed")

        with pytest.raises(DecomposerError) as exc_info:
            store.load_task_graph(path)

        assert exc_info.value.phase == "persistence"
        assert exc_info.value.cause is not None
