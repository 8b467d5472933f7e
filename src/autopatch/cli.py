"""Command-line interface for AutoPatch."""

import logging
from typing import List, Optional

import structlog
import typer
from rich.console import Console
from rich.markup import escape
from rich.pretty import pprint
from rich.table import Table

from autopatch.exceptions import AutoPatchError
from autopatch.extraction import DestinationRepository, GitExtractor
from autopatch.graph import CommitGraph, CommitGraphBuilder
from autopatch.models import PatcherConfig, Settings
from autopatch.replay import PatchPlanner, ReplayTask, TaskExecutor, TaskKind, resolve_commit_range

app = typer.Typer(
    name="autopatch",
    help="Replay the branch and merge history of one Git repository onto another",
    add_completion=False,
)
console = Console()


def configure_logging(level: str) -> None:
    """Send stdlib and structlog output through one handler at the given level."""
    logging.basicConfig(level=level.upper(), format="%(asctime)s - %(levelname)s - %(message)s")
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.processors.KeyValueRenderer(key_order=["event"]),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def print_branches(graph: CommitGraph) -> None:
    """Show the branches found in the source history."""
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Branch", style="cyan")
    table.add_column("Commits", justify="right", style="yellow")
    table.add_column("Range", style="blue")
    table.add_column("Forked from", style="green")
    table.add_column("Closed", style="white")

    for branch in graph.branches:
        source = graph.source_of(branch)
        table.add_row(
            escape(branch.name),
            str(len(branch.commits)),
            f"{branch.first_commit_number}..{branch.last_commit_number}",
            escape(source.name) if source else "",
            "yes" if branch.closed else "",
        )

    console.print(table)
    console.print("\nAutomatically patch with a commit hash range or one of the branches above.")


def print_tasks(tasks: List[ReplayTask]) -> None:
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Task", style="cyan")
    table.add_column("Target", style="green")
    table.add_column("Message", style="white")

    for position, task in enumerate(tasks):
        target = task.identifier[:7] if task.kind == TaskKind.PATCH else task.identifier
        if task.source_identifier:
            target = f"{task.source_identifier} -> {target}"
        table.add_row(str(position), task.kind.value, escape(target), escape(task.comment[:60]))

    console.print(table)


def prepare_destination(config: PatcherConfig, graph: CommitGraph, start: int) -> DestinationRepository:
    """Open the destination repository, creating it when replaying from the first commit.

    Raises:
        AutoPatchError: If the destination cannot be used
    """
    can_continue, has_repository = DestinationRepository.check_folder(config.dest, can_create=start == 0)
    if not can_continue:
        raise AutoPatchError(f"Destination {config.dest} does not exist")
    if has_repository:
        return DestinationRepository(config.dest)

    root = graph.find_by_number(0)
    return DestinationRepository.init(config.dest, initial_branch=root.name if root else None)


@app.command()
def main(
    params: Optional[List[str]] = typer.Argument(
        None, help="key=value parameters: source, dest, branch, commit, count, startCommit, endCommit, dryRun"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
) -> None:
    """Replay commits of the source repository onto the destination repository.

    Without branch, commit or startCommit/endCommit the branches found in the
    source are listed and nothing is replayed.
    """
    settings = Settings()
    configure_logging("DEBUG" if verbose else settings.log_level)

    try:
        config = PatcherConfig.from_args(params or [])

        extractor = GitExtractor(config.source)
        console.print(f"[bold green]Reading history from:[/bold green] {config.source}")
        graph = CommitGraphBuilder().build(
            extractor.extract_commits(),
            branch_tips=extractor.extract_branch_tips(),
            tags=extractor.extract_tags(),
        )

        if verbose:
            pprint(graph.describe(), console=console, expand_all=True)

        if config.selection_mode is None:
            print_branches(graph)
            return

        start, end = resolve_commit_range(graph, config)
        tasks = PatchPlanner(graph).plan(start, end)
        console.print(f"[bold blue]Commits:[/bold blue] {start}..{end} ({len(tasks)} tasks)")

        if config.dry_run:
            print_tasks(tasks)
            return

        if config.dest is None:
            console.print("[bold red]Error:[/bold red] Missing parameter in commandline (dest)")
            raise typer.Exit(1)

        destination = prepare_destination(config, graph, start)
        executor = TaskExecutor(extractor, destination, patch_file=settings.patch_file)
        result = executor.run(tasks)

        if not result.success:
            console.print(
                f"[bold red]Error:[/bold red] task {result.completed + 1}/{result.total} failed "
                f"({escape(result.failed_task.describe())}): {escape(result.error)}"
            )
            raise typer.Exit(1)

        console.print(f"[bold green]✓[/bold green] Done, {result.completed} tasks applied")

    except (AutoPatchError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
