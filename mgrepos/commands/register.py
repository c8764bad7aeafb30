"""
Register and unregister commands.

Both resolve PATH (default: the current directory) to the top level of
the enclosing git repository before touching the registry.
"""

import click

from ..cli_utils import add_common_options, echo_json, standard_command
from ..services.registry_service import RegistryService


@click.command("register")
@click.argument("path", required=False)
@add_common_options('json')
@standard_command
def register_handler(path, output_json):
    """Add a repository to the registry.

    PATH: Any directory inside the repository (default: current directory)

    The repository's first remote URL is recorded as its remote.
    Registering an already registered repository does nothing.

    Examples:

    \b
        mg register
        mg register ~/src/tool
    """
    service = RegistryService()
    outcome = service.register(path)

    if output_json:
        echo_json(outcome.to_dict())
    elif outcome.added:
        click.echo(f"registered {outcome.path} ({outcome.remote})")
    else:
        click.echo(f"already registered: {outcome.path}")


@click.command("unregister")
@click.argument("path", required=False)
@standard_command
def unregister_handler(path):
    """Remove a repository from the registry.

    PATH: Any directory inside the repository (default: current directory)

    Fails if the repository is not registered. The checkout itself is
    left on disk.

    Examples:

    \b
        mg unregister
        mg unregister ~/src/old-tool
    """
    service = RegistryService()
    removed = service.unregister(path)
    click.echo(f"unregistered {removed.path}")
