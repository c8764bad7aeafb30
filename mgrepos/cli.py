#!/usr/bin/env python3

import click

from mgrepos.config import set_log_level
from mgrepos.commands.register import register_handler, unregister_handler
from mgrepos.commands.import_registry import import_handler
from mgrepos.commands.sync import clone_handler, pull_handler
from mgrepos.commands.list import list_handler


@click.group()
@click.version_option(package_name="mgrepos")
@click.option('--debug', is_flag=True, help='Enable debug logging')
def cli(debug):
    """mg - keep many git repositories registered and in sync.

    Repositories are tracked in an mgconfig file ($MGCONFIG, or
    $XDG_CONFIG_HOME/mgconfig, or ~/.config/mgconfig). On first use an
    existing ~/.mrconfig is migrated automatically.
    """
    if debug:
        set_log_level("DEBUG")


# Registry management
cli.add_command(register_handler, name='register')
cli.add_command(unregister_handler, name='unregister')
cli.add_command(import_handler, name='import')
cli.add_command(list_handler, name='list')

# Sync
cli.add_command(clone_handler, name='clone')
cli.add_command(pull_handler, name='pull')


def main():
    cli()


if __name__ == "__main__":
    main()
