"""
Clone and pull commands.

Both run the sync engine over the whole registry with a caller-chosen
number of parallel jobs. Per-repository failures are reported but do not
change the exit status; only errors that stop the run (bad job count,
unreadable config) do.
"""

import logging
from dataclasses import dataclass

import click
from rich.console import Console
from rich.progress import BarColumn, MofNCompleteColumn, Progress, SpinnerColumn, TextColumn
from rich.table import Table

from ..cli_utils import add_common_options, echo_json, standard_command
from ..config import get_registry
from ..domain.operation import SyncReport, SyncResult, SyncStatus
from ..services.sync_service import SyncGenerator, SyncService, validate_jobs

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Wording:
    """How one operation talks about its outcomes."""
    verb: str          # "clone"
    gerund: str        # "cloning"
    done: str          # "cloned"
    satisfied: str     # "already cloned"


CLONE = Wording(verb="clone", gerund="cloning", done="cloned", satisfied="already cloned")
PULL = Wording(verb="pull", gerund="pulling", done="pulled", satisfied="already up to date")


def log_result(result: SyncResult, wording: Wording) -> None:
    if result.status == SyncStatus.SUCCEEDED:
        logger.info(f"successfully {wording.done} {result.path}")
    elif result.status == SyncStatus.ALREADY_SATISFIED:
        logger.info(f"{wording.satisfied}: {result.path}")
    else:
        logger.warning(f"{wording.verb} failed for {result.path}: {result.error}")


def summary_lines(report: SyncReport, wording: Wording):
    return [
        f"successfully {wording.done} {report.succeeded}/{report.total} repos",
        f"{report.already_satisfied} repos {wording.satisfied}",
        f"failed to {wording.verb} {report.failed}/{report.total} repos",
    ]


def _output_simple(results: SyncGenerator, service: SyncService, wording: Wording) -> None:
    for result in results:
        log_result(result, wording)

    report = service.last_report
    for failure in report.failures:
        logger.error(f"error {wording.gerund} {failure.path}: {failure.error}")

    click.echo()
    for line in summary_lines(report, wording):
        click.echo(line)


def _output_json(results: SyncGenerator, service: SyncService) -> None:
    for result in results:
        echo_json(result.to_dict())
    echo_json(service.last_report.to_dict())


def _output_pretty(results: SyncGenerator, service: SyncService, wording: Wording, total: int) -> None:
    console = Console()
    console.print(f"\n[bold]{wording.verb.capitalize()}[/bold] [dim]{total} repositories[/dim]\n")

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        console=console,
    ) as progress:
        task = progress.add_task("Starting...", total=total)
        for result in results:
            progress.update(task, advance=1, description=result.path)

    report = service.last_report
    table = Table(title=f"{wording.verb.capitalize()} Summary", show_header=True)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row(wording.done.capitalize(), f"[green]{report.succeeded}[/green]")
    table.add_row(wording.satisfied.capitalize(), f"[yellow]{report.already_satisfied}[/yellow]")
    table.add_row("Failed", f"[red]{report.failed}[/red]")
    table.add_row("Total", str(report.total))
    console.print(table)

    if report.failures:
        console.print(f"\n[red]Errors ({len(report.failures)}):[/red]")
        for failure in report.failures:
            console.print(f"  [red]•[/red] {failure.path}: {failure.error}")


def run_sync(
    wording: Wording,
    jobs: int,
    output_json: bool,
    pretty: bool,
) -> SyncReport:
    """Load the registry, run one sync operation and render it."""
    validate_jobs(jobs)
    registry = get_registry()
    service = SyncService()
    results = getattr(service, f"iter_{wording.verb}")(registry, jobs)

    if output_json:
        _output_json(results, service)
    elif pretty:
        _output_pretty(results, service, wording, len(registry))
    else:
        _output_simple(results, service, wording)
    return service.last_report


@click.command("clone")
@add_common_options('jobs', 'json', 'pretty')
@standard_command
def clone_handler(jobs, output_json, pretty):
    """Clone every registered repository that is missing.

    Repositories that already exist are left untouched. Missing parent
    directories are created.

    Examples:

    \b
        mg clone
        mg clone -j 8 --pretty
    """
    run_sync(CLONE, jobs, output_json, pretty)


@click.command("pull")
@add_common_options('jobs', 'json', 'pretty')
@standard_command
def pull_handler(jobs, output_json, pretty):
    """Fast-forward every registered repository from its upstream.

    Examples:

    \b
        mg pull
        mg pull -j 8 --json
    """
    run_sync(PULL, jobs, output_json, pretty)
