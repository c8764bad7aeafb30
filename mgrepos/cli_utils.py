"""
Common CLI utilities and decorators for consistent command behavior.
"""

import json
import sys
from functools import wraps
from typing import Any, Dict

import click

from .domain.registry import RegistryError
from .exit_codes import (
    GENERAL_ERROR, INTERRUPTED,
    CommandError, get_exit_code_for_exception,
)
from .infra.git_client import GitError


def standard_command(func):
    """
    Decorator that provides standard CLI error handling.

    Commands raise; this turns the error into one message on stderr and
    the matching exit code. Click's own usage errors pass through.
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except KeyboardInterrupt:
            click.echo("Interrupted by user", err=True)
            sys.exit(INTERRUPTED)
        except click.ClickException:
            raise
        except CommandError as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(e.exit_code)
        except (RegistryError, GitError) as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(GENERAL_ERROR)
        except OSError as e:
            click.echo(f"Error: command failed: {e}", err=True)
            sys.exit(get_exit_code_for_exception(e))

    return wrapper


def echo_json(item: Dict[str, Any]) -> None:
    """Write one JSONL record to stdout."""
    click.echo(json.dumps(item, ensure_ascii=False))


# Standard options that several commands share
common_options = {
    'jobs': click.option('-j', '--jobs', type=int, default=1, show_default=True,
                         help='Number of repositories to process in parallel'),
    'json': click.option('--json', 'output_json', is_flag=True,
                         help='Output as JSONL'),
    'pretty': click.option('--pretty', is_flag=True,
                           help='Display with rich formatting'),
}


def add_common_options(*option_names):
    """
    Decorator to add common options to a command.

    Example:
        @add_common_options('jobs', 'json')
        def my_command(jobs, output_json):
            ...
    """
    def decorator(func):
        for name in reversed(option_names):
            if name in common_options:
                func = common_options[name](func)
        return func
    return decorator
