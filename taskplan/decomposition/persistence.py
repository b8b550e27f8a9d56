"""Task file persistence.

Each task is stored as ``<task_dir>/<id>.md``: YAML frontmatter with the
structured fields followed by a markdown body (description, success
criteria checklist, files). Whole task graphs are stored as YAML. All
writes go through a temporary file and an atomic rename.
"""

import os
import re
from pathlib import Path
from typing import Any

import yaml
from loguru import logger
from pydantic import ValidationError

from taskplan.decomposition.errors import DecomposerError
from taskplan.decomposition.models import Task, TaskGraph

INVALID_TASK_FILE = "invalid-task-id.md"

# Leading "---" line up to the next line that is exactly "---"
FRONTMATTER_PATTERN = re.compile(r"\A---\r?\n(.*?)\r?\n---[ \t]*(?:\r?\n|\Z)(.*)\Z", re.DOTALL)

# Body headings, in the order format_task_markdown writes them
TASK_SECTIONS = ("Description", "Success Criteria", "Files to Modify")


class TaskFilePersistence:
    """
    Read and write tasks and task graphs on the filesystem.

    Example:
        >>> store = TaskFilePersistence()
        >>> store.save_task(task, ".claude/tasks")
        >>> store.list_tasks(".claude/tasks")
        ['T001']
    """

    # =========================================================================
    # TASKS
    # =========================================================================

    def save_task(self, task: Task | None, task_dir: str | Path) -> Path:
        """
        Write a task to ``<task_dir>/<id>.md``.

        Args:
            task: Task to save.
            task_dir: Target directory, created if missing.

        Returns:
            Path of the written file.
        """
        if task is None:
            raise DecomposerError(phase="persistence", message="cannot save missing task")

        directory = Path(task_dir)
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise DecomposerError(
                phase="persistence",
                message="failed to create task directory",
                cause=e,
            ) from e

        path = self.task_path(task.id, directory)
        self._write_atomic(path, self.format_task_markdown(task), what="task file")
        logger.debug(f"Saved task {task.id} to {path}")
        return path

    def load_task(self, task_id: str, task_dir: str | Path) -> Task:
        """
        Read a task back from its markdown file.

        Raises:
            DecomposerError: ``task not found`` if the file does not exist.
        """
        path = self.task_path(task_id, task_dir)
        if not path.exists():
            raise DecomposerError(phase="persistence", message="task not found")

        try:
            content = path.read_text(encoding="utf-8")
        except OSError as e:
            raise DecomposerError(
                phase="persistence",
                message="failed to read task file",
                cause=e,
            ) from e

        return self.parse_task_markdown(content)

    def list_tasks(self, task_dir: str | Path) -> list[str]:
        """Return the ids of the task files in ``task_dir``, sorted."""
        directory = Path(task_dir)
        if not directory.exists():
            return []

        try:
            entries = list(directory.iterdir())
        except OSError as e:
            raise DecomposerError(
                phase="persistence",
                message="failed to read task directory",
                cause=e,
            ) from e

        return sorted(
            entry.stem
            for entry in entries
            if entry.is_file() and entry.suffix == ".md" and entry.name != INVALID_TASK_FILE
        )

    def task_path(self, task_id: str, task_dir: str | Path) -> Path:
        """Path for a task id; ids that could escape ``task_dir`` map to a fixed name."""
        if any(sep in task_id for sep in ("/", "\\")) or task_id in ("", ".", ".."):
            return Path(task_dir) / INVALID_TASK_FILE
        return Path(task_dir) / f"{task_id}.md"

    # =========================================================================
    # TASK GRAPHS
    # =========================================================================

    def save_task_graph(self, graph: TaskGraph | None, path: str | Path) -> Path:
        """Write a whole TaskGraph as YAML."""
        if graph is None:
            raise DecomposerError(phase="persistence", message="cannot save missing task graph")

        target = Path(path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise DecomposerError(
                phase="persistence",
                message="failed to create directory",
                cause=e,
            ) from e

        content = yaml.safe_dump(
            graph.model_dump(mode="json"),
            sort_keys=False,
            allow_unicode=True,
        )
        self._write_atomic(target, content, what="task graph file")
        logger.info(f"Saved task graph with {len(graph.tasks)} tasks to {target}")
        return target

    def load_task_graph(self, path: str | Path) -> TaskGraph:
        """
        Read a TaskGraph from YAML.

        Raises:
            DecomposerError: ``task graph not found`` if the file does not exist.
        """
        source = Path(path)
        if not source.exists():
            raise DecomposerError(phase="persistence", message="task graph not found")

        try:
            data = yaml.safe_load(source.read_text(encoding="utf-8")) or {}
            return TaskGraph.model_validate(data)
        except (OSError, yaml.YAMLError, ValidationError) as e:
            raise DecomposerError(
                phase="persistence",
                message="failed to load task graph",
                cause=e,
            ) from e

    # =========================================================================
    # MARKDOWN FORMAT
    # =========================================================================

    def format_task_markdown(self, task: Task) -> str:
        """Render a task as YAML frontmatter plus a markdown body."""
        data = task.model_dump(mode="json")
        frontmatter: dict[str, Any] = {
            "id": data["id"],
            "title": data["title"],
            "status": data["status"],
        }
        for key in ("dependencies", "files"):
            if data[key]:
                frontmatter[key] = data[key]
        for key in ("complexity", "started_at", "completed_at"):
            if data[key] is not None:
                frontmatter[key] = data[key]

        lines = [
            "---",
            yaml.safe_dump(frontmatter, sort_keys=False, allow_unicode=True).rstrip("\n"),
            "---",
            "",
            f"# {task.id}: {task.title}",
            "",
            "## Description",
            "",
            task.description,
            "",
        ]

        if task.success_criteria:
            lines.extend(["## Success Criteria", ""])
            lines.extend(f"- [ ] {criterion}" for criterion in task.success_criteria)
            lines.append("")

        if task.files:
            lines.extend(["## Files to Modify", ""])
            lines.extend(f"- `{path}`" for path in task.files)
            lines.append("")

        return "\n".join(lines)

    def parse_task_markdown(self, content: str) -> Task:
        """Parse a task file written by ``format_task_markdown``."""
        match = FRONTMATTER_PATTERN.match(content)
        if match is None:
            raise DecomposerError(phase="persistence", message="invalid task file format")

        try:
            frontmatter = yaml.safe_load(match.group(1)) or {}
        except yaml.YAMLError as e:
            raise DecomposerError(
                phase="persistence",
                message="failed to parse task frontmatter",
                cause=e,
            ) from e

        if not isinstance(frontmatter, dict):
            raise DecomposerError(phase="persistence", message="invalid task frontmatter")

        sections = self._split_sections(match.group(2))
        frontmatter["description"] = "\n".join(sections.get("Description", [])).strip()
        frontmatter["success_criteria"] = [
            line.strip()[len("- [ ]"):].strip()
            for line in sections.get("Success Criteria", [])
            if line.strip().startswith(("- [ ]", "- [x]", "- [X]"))
        ]

        try:
            return Task.model_validate(frontmatter)
        except ValidationError as e:
            raise DecomposerError(
                phase="persistence",
                message="invalid task frontmatter",
                cause=e,
            ) from e

    @staticmethod
    def _split_sections(body: str) -> dict[str, list[str]]:
        """Group body lines under the headings ``format_task_markdown`` writes.

        A heading only counts when it comes later in TASK_SECTIONS than the
        current section, so heading-like lines inside a description stay in it.
        """
        sections: dict[str, list[str]] = {}
        current: list[str] | None = None
        remaining = list(TASK_SECTIONS)
        for line in body.split("\n"):
            stripped = line.strip()
            name = stripped[3:].strip() if stripped.startswith("## ") else None
            if name in remaining:
                del remaining[: remaining.index(name) + 1]
                current = sections.setdefault(name, [])
                continue
            if current is not None:
                current.append(line)
        return sections

    @staticmethod
    def _write_atomic(path: Path, content: str, what: str) -> None:
        tmp_path = path.with_name(path.name + ".tmp")
        try:
            tmp_path.write_text(content, encoding="utf-8")
            os.chmod(tmp_path, 0o600)
            os.replace(tmp_path, path)
        except OSError as e:
            tmp_path.unlink(missing_ok=True)
            raise DecomposerError(
                phase="persistence",
                message=f"failed to write {what}",
                cause=e,
            ) from e
