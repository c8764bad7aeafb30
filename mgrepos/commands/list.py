"""
Handles the 'list' command.
"""

import click
from rich.console import Console
from rich.table import Table

from ..cli_utils import add_common_options, echo_json, standard_command
from ..config import get_registry
from ..mrconfig import load_mrconfig


@click.command("list")
@click.option("--legacy", is_flag=True, help="List repositories from ~/.mrconfig instead")
@add_common_options('json', 'pretty')
@standard_command
def list_handler(legacy, output_json, pretty):
    """List registered repositories in registry order.

    Examples:

    \b
        mg list
        mg list --pretty
        mg list --legacy
    """
    if legacy:
        registry = load_mrconfig().to_registry()
    else:
        registry = get_registry()

    if output_json:
        for repo in registry:
            echo_json({'path': repo.path, 'remote': repo.remote})
    elif pretty:
        table = Table(show_header=True, header_style="bold cyan")
        table.add_column("#", style="dim", width=4)
        table.add_column("Path", style="green")
        table.add_column("Remote", style="yellow")
        for i, repo in enumerate(registry):
            table.add_row(str(i), repo.path, repo.remote)
        console = Console()
        console.print(table)
        console.print(f"\n[dim]Total:[/dim] {len(registry)} repositories")
    else:
        for path in registry.get_repo_paths():
            click.echo(path)
