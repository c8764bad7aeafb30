"""
Handles the 'import' command: merge another registry document into ours.
"""

import click

from ..cli_utils import add_common_options, echo_json, standard_command
from ..config import format_for, parse_registry
from ..exit_codes import ConfigError
from ..services.registry_service import RegistryService


def read_document(source: str):
    """Read a registry document from a file, or from stdin for '-'."""
    if source == "-":
        return click.get_text_stream("stdin").read(), "<stdin>", "json"
    try:
        with open(source, "r") as f:
            return f.read(), source, format_for(source)
    except OSError as e:
        raise ConfigError(f"cannot read {source}: {e}") from e


@click.command("import")
@click.argument("source")
@add_common_options('json')
@standard_command
def import_handler(source, output_json):
    """Merge a registry document into the current registry.

    SOURCE: Path to an mgconfig document (JSON, or YAML by suffix),
    or '-' to read JSON from standard input.

    Repositories whose path is already registered are skipped and counted
    as duplicates.

    Examples:

    \b
        mg import ~/backup/mgconfig
        ssh otherhost cat .config/mgconfig | mg import -
    """
    text, name, fmt = read_document(source)
    other = parse_registry(text, source=name, fmt=fmt, expand=True)

    service = RegistryService()
    outcome = service.import_registry(other)

    if output_json:
        echo_json(outcome.to_dict())
    else:
        click.echo(str(outcome))
