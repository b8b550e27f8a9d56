"""Main CLI entry point using Typer."""

from pathlib import Path
from typing import NoReturn

import anyio
import typer
import yaml
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from taskplan import __version__
from taskplan.core.config import get_settings
from taskplan.core.logging import configure_logging
from taskplan.decomposition.errors import TaskPlanError
from taskplan.decomposition.models import Architecture, Task

app = typer.Typer(
    name="taskplan",
    help="taskplan - turn model-generated task lists into execution plans",
    add_completion=False,
    rich_markup_mode="rich",
)

console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold blue]taskplan[/bold blue] version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        "-d",
        help="Enable debug logging",
    ),
) -> None:
    """
    taskplan - decompose architectures into dependency-ordered tasks.

    Parses model output into tasks, validates their structure and
    dependencies, and schedules them into a deterministic order.
    """
    settings = get_settings()
    if debug:
        settings = settings.model_copy(update={"taskplan_debug": True})
    configure_logging(settings)


# =============================================================================
# HELPERS
# =============================================================================


def load_architecture(path: Path) -> Architecture:
    """Load an architecture from a YAML or JSON file.

    A saved plan (with a top-level ``architecture`` key) is accepted too.
    """
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if isinstance(data, dict) and isinstance(data.get("architecture"), dict):
        data = data["architecture"]
    return Architecture.model_validate(data)


def render_order_table(tasks: list[Task], order: list[str], title: str = "Execution Order") -> Table:
    """Build a table of tasks in execution order."""
    by_id = {task.id: task for task in tasks}

    table = Table(title=title)
    table.add_column("#", style="dim", justify="right")
    table.add_column("ID", style="cyan")
    table.add_column("Title", style="bold")
    table.add_column("Complexity")
    table.add_column("Dependencies")

    for position, task_id in enumerate(order, start=1):
        task = by_id.get(task_id)
        if task is None:
            continue
        table.add_row(
            str(position),
            task.id,
            escape(task.title),
            task.complexity.value if task.complexity else "-",
            ", ".join(task.dependencies) or "-",
        )

    return table


def fail(message: str) -> NoReturn:
    """Print an error and exit with status 1."""
    console.print(f"[bold red]{escape(message)}[/bold red]")
    raise typer.Exit(code=1)


# =============================================================================
# COMMANDS
# =============================================================================


@app.command()
def decompose(
    architecture_file: Path = typer.Argument(
        ...,
        exists=True,
        dir_okay=False,
        help="Architecture as YAML or JSON",
    ),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Where to write the task graph (default: <task dir>/task_graph.yaml)",
    ),
    save_tasks: bool = typer.Option(
        False,
        "--save-tasks",
        help="Also write one markdown file per task",
    ),
    no_validate: bool = typer.Option(
        False,
        "--no-validate",
        help="Schedule without validating the generated tasks",
    ),
) -> None:
    """
    Generate, validate and schedule tasks for an architecture.

    Example:
        taskplan decompose architecture.yaml --save-tasks
    """
    from taskplan.decomposition.decomposer import DecomposerConfig, DefaultDecomposer
    from taskplan.decomposition.persistence import TaskFilePersistence
    from taskplan.generation.client import AnthropicGenerationClient

    settings = get_settings()
    config = DecomposerConfig.from_settings(settings)
    if no_validate:
        config = config.model_copy(update={"validate_output": False})

    try:
        architecture = load_architecture(architecture_file)
    except (yaml.YAMLError, ValidationError) as e:
        fail(f"Invalid architecture file: {e}")

    console.print(
        Panel(
            f"[bold]Components:[/bold] {len(architecture.components)}\n"
            f"[bold]Files:[/bold] {len(architecture.file_structure)}",
            title="[bold blue]taskplan[/bold blue]",
            border_style="blue",
        )
    )

    async def execute():
        client = AnthropicGenerationClient(settings)
        decomposer = DefaultDecomposer(client=client, config=config)
        try:
            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                console=console,
            ) as progress:
                progress.add_task("Decomposing architecture...", total=None)
                return await decomposer.decompose(architecture)
        finally:
            await client.aclose()

    try:
        graph = anyio.run(execute)
    except TaskPlanError as e:
        fail(f"Decomposition failed: {e}")

    console.print(render_order_table(graph.tasks, graph.execution_order))
    console.print(
        f"[dim]{len(graph.tasks)} tasks, cost ${graph.cost:.4f}, "
        f"{graph.duration_seconds:.1f}s[/dim]"
    )

    store = TaskFilePersistence()
    target = output or Path(config.task_dir) / "task_graph.yaml"
    try:
        store.save_task_graph(graph, target)
        if save_tasks:
            for task in graph.tasks:
                store.save_task(task, config.task_dir)
    except TaskPlanError as e:
        fail(str(e))

    console.print(f"[green]Saved task graph to {target}[/green]")
    if save_tasks:
        console.print(f"[green]Saved {len(graph.tasks)} task files to {config.task_dir}[/green]")


@app.command()
def schedule(
    output_file: Path = typer.Argument(
        ...,
        exists=True,
        dir_okay=False,
        help="Saved model output containing task blocks",
    ),
    no_validate: bool = typer.Option(
        False,
        "--no-validate",
        help="Skip validation before scheduling",
    ),
) -> None:
    """
    Parse saved model output and print its execution order.

    Example:
        taskplan schedule tasks_output.md
    """
    from taskplan.decomposition.parser import TaskParser
    from taskplan.decomposition.scheduler import DefaultScheduler
    from taskplan.decomposition.validator import TaskValidator

    text = output_file.read_text(encoding="utf-8")

    try:
        tasks = TaskParser().parse(text)
        if not no_validate:
            TaskValidator().validate(tasks)
        order = DefaultScheduler().schedule(tasks)
    except TaskPlanError as e:
        fail(str(e))

    console.print(render_order_table(tasks, order))


# Register the remaining commands on ``app``
from taskplan.cli import commands  # noqa: E402,F401
