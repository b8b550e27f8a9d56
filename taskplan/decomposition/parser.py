"""Task parser - extracts structured tasks from model output.

The generation prompt asks for one block per task::

    ### Task T001: Brief title
    - **Description**: What to do
    - **Dependencies**: [T000] or none
    - **Files**: a.py, b.py
    - **Complexity**: small/medium/large
    - **Success Criteria**: Observable outcome

Model output is rarely this tidy, so parsing is best effort: sections whose
header cannot be turned into a task are dropped and reported, and the
call only fails when nothing at all could be parsed.
"""

import re
from dataclasses import dataclass, field

from loguru import logger

from taskplan.decomposition.errors import NoTasksFoundError
from taskplan.decomposition.models import Complexity, Task, TaskStatus


def _field_pattern(name: str, value: str = r"(.+?)\s*") -> re.Pattern[str]:
    """Build a line-anchored, case-insensitive field pattern.

    Accepts an optional list bullet and optional emphasis around the field
    name, e.g. ``- **Files**: x``, ``* Files: x``, ``**Files:** x``.
    """
    emphasis = r"(?:\*\*|__|\*|_)?"
    return re.compile(
        rf"^\s*(?:[-*+]\s+)?{emphasis}(?:{name}){emphasis}\s*:\s*(?:\*\*|__)?\s*{value}$",
        re.IGNORECASE,
    )


# =============================================================================
# TASK PARSER
# =============================================================================


@dataclass
class SkippedSection:
    """A section that looked like a task but could not be parsed."""

    index: int
    header: str
    reason: str


@dataclass
class ParseReport:
    """Tasks parsed from one output, plus the sections that were dropped."""

    tasks: list[Task] = field(default_factory=list)
    skipped: list[SkippedSection] = field(default_factory=list)

    @property
    def section_count(self) -> int:
        """Number of task sections found in the text."""
        return len(self.tasks) + len(self.skipped)


class TaskParser:
    """
    Parse model output into Task records.

    Patterns are compiled once at class level and shared by every
    instance; the parser itself holds no state between calls.

    Example:
        >>> parser = TaskParser()
        >>> tasks = parser.parse(
        ...     "### Task T001: Setup\\n- **Description**: Init repo\\n"
        ...     "- **Dependencies**: none\\n"
        ... )
        >>> tasks[0].id, tasks[0].dependencies
        ('T001', [])
    """

    HEADER_PATTERN = re.compile(
        r"^[ \t]*(?:#{1,6}[ \t]*)?Task[ \t]+(T\d{3})[ \t]*:([^\n]*)$",
        re.IGNORECASE | re.MULTILINE,
    )

    DESCRIPTION_PATTERN = _field_pattern("Description")
    DEPENDENCIES_PATTERN = _field_pattern("Dependencies")
    FILES_PATTERN = _field_pattern("Files?")
    COMPLEXITY_PATTERN = _field_pattern("Complexity", r"(small|medium|large)\b.*")
    SUCCESS_CRITERIA_PATTERN = _field_pattern(r"Success\s*Criteria")

    # [T001] or bare T001, not part of a longer token
    TASK_REF_PATTERN = re.compile(r"\[?(?<![A-Za-z0-9])(T\d{3})(?!\d)\]?")

    NONE_PATTERN = re.compile(r"^\s*(none|n/?a|-)\s*$", re.IGNORECASE)

    FILE_SEPARATOR_PATTERN = re.compile(r"[,\s]+")

    def parse(self, raw_output: str) -> list[Task]:
        """
        Extract tasks from raw model output.

        Args:
            raw_output: Text returned by the generation client.

        Returns:
            Tasks in the order their sections appear.

        Raises:
            NoTasksFoundError: If no section could be parsed into a task.
        """
        report = self.parse_report(raw_output)
        if not report.tasks:
            raise NoTasksFoundError()
        return report.tasks

    def parse_report(self, raw_output: str) -> ParseReport:
        """
        Parse every task section and keep track of the dropped ones.

        Never raises; an empty ``tasks`` list means nothing was found.

        Args:
            raw_output: Text returned by the generation client.

        Returns:
            ParseReport with parsed tasks and skipped sections.
        """
        report = ParseReport()
        sections = self._split_by_task_headers(raw_output)

        if not sections:
            logger.debug("No task headers found in output")
            return report

        for index, section in enumerate(sections):
            task, reason = self._parse_task_section(section)
            if task is None:
                header = section.split("\n", 1)[0].strip()
                logger.warning(f"Skipping task section {index + 1} ({header!r}): {reason}")
                report.skipped.append(SkippedSection(index=index, header=header, reason=reason))
                continue
            report.tasks.append(task)

        logger.info(
            f"Parsed {len(report.tasks)} tasks from {len(sections)} sections"
            + (f" ({len(report.skipped)} skipped)" if report.skipped else "")
        )
        return report

    # =========================================================================
    # SECTION HANDLING
    # =========================================================================

    def _split_by_task_headers(self, text: str) -> list[str]:
        """Split text into sections, each starting at a task header.

        The last section runs to the end of the text.
        """
        starts = [match.start() for match in self.HEADER_PATTERN.finditer(text)]
        ends = starts[1:] + [len(text)]
        return [text[start:end] for start, end in zip(starts, ends)]

    def _parse_task_section(self, section: str) -> tuple[Task | None, str]:
        """Parse a single section into a Task.

        Returns:
            (task, "") on success, (None, reason) when the header is unusable.
        """
        lines = section.split("\n")

        header = self.HEADER_PATTERN.match(lines[0])
        if header is None:
            return None, "invalid task header"

        title = header.group(2).strip()
        if not title:
            return None, "task header has no title"

        task = Task(
            id=header.group(1).upper(),
            title=title,
            status=TaskStatus.PENDING,
        )

        for line in lines[1:]:
            self._parse_task_line(line, task)

        return task, ""

    def _parse_task_line(self, line: str, task: Task) -> None:
        """Apply one field line to the task, ignoring unrecognized lines."""
        line = line.rstrip("\r")

        if match := self.DESCRIPTION_PATTERN.match(line):
            task.description = match.group(1).strip()
            return

        if match := self.DEPENDENCIES_PATTERN.match(line):
            value = match.group(1).strip()
            if not self.NONE_PATTERN.match(value):
                task.dependencies = self.extract_task_ids(value)
            return

        if match := self.FILES_PATTERN.match(line):
            task.files = self.extract_file_list(match.group(1))
            return

        if match := self.COMPLEXITY_PATTERN.match(line):
            task.complexity = Complexity(match.group(1).lower())
            return

        if match := self.SUCCESS_CRITERIA_PATTERN.match(line):
            task.success_criteria.append(match.group(1).strip())
            return

    # =========================================================================
    # FIELD EXTRACTION
    # =========================================================================

    def extract_task_ids(self, text: str) -> list[str]:
        """Extract task ids in order of first appearance, without duplicates."""
        ids: list[str] = []
        for match in self.TASK_REF_PATTERN.finditer(text):
            task_id = match.group(1)
            if task_id not in ids:
                ids.append(task_id)
        return ids

    def extract_file_list(self, text: str) -> list[str]:
        """Split a comma and/or whitespace separated file list."""
        files: list[str] = []
        for token in self.FILE_SEPARATOR_PATTERN.split(text):
            token = token.strip().strip("`'\"").lstrip("[").rstrip("]")
            if token and token != "-":
                files.append(token)
        return files


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================


def parse_tasks(raw_output: str) -> list[Task]:
    """Convenience function to parse model output.

    Args:
        raw_output: Text returned by the generation client.

    Returns:
        List of Task objects.
    """
    return TaskParser().parse(raw_output)
