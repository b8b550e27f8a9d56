"""Additional CLI commands for inspecting task output and saved graphs."""

from pathlib import Path

import typer
from rich.markup import escape
from rich.table import Table

from taskplan.cli.main import app, console, fail, render_order_table
from taskplan.decomposition.errors import TaskPlanError


@app.command()
def check(
    output_file: Path = typer.Argument(
        ...,
        exists=True,
        dir_okay=False,
        help="Saved model output containing task blocks",
    ),
) -> None:
    """
    Report every parsing and validation problem in saved model output.

    Exits with status 1 when any problem is found.
    """
    from taskplan.decomposition.parser import TaskParser
    from taskplan.decomposition.validator import TaskValidator

    report = TaskParser().parse_report(output_file.read_text(encoding="utf-8"))
    problems = TaskValidator().validate_all(report.tasks)

    console.print(
        f"[bold]{len(report.tasks)}[/bold] tasks parsed from "
        f"[bold]{report.section_count}[/bold] sections"
    )

    for skipped in report.skipped:
        console.print(f"[yellow]Skipped section {skipped.index + 1}:[/yellow] {escape(skipped.header)} ({skipped.reason})")

    if problems:
        table = Table(title="Validation Problems")
        table.add_column("Field", style="cyan")
        table.add_column("Task")
        table.add_column("Message", style="red")
        for problem in problems:
            table.add_row(problem.field, escape(problem.task_id or "-"), escape(problem.message))
        console.print(table)

    if problems or report.skipped:
        raise typer.Exit(code=1)

    console.print("[green]No problems found[/green]")


@app.command()
def show(
    graph_file: Path = typer.Argument(
        ...,
        exists=True,
        dir_okay=False,
        help="Task graph YAML written by 'taskplan decompose'",
    ),
) -> None:
    """
    Print a saved task graph in execution order.
    """
    from taskplan.decomposition.persistence import TaskFilePersistence

    try:
        graph = TaskFilePersistence().load_task_graph(graph_file)
    except TaskPlanError as e:
        fail(str(e))

    console.print(render_order_table(graph.tasks, graph.execution_order, title=f"Task Graph {graph.id}"))
    console.print(
        f"[dim]created {graph.created_at.isoformat()}, cost ${graph.cost:.4f}, "
        f"{graph.duration_seconds:.1f}s[/dim]"
    )
