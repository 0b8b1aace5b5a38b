"""
CLI Error Handling
==================

Provides consistent error handling and exit codes for the ddlc commands.
"""

import sys
import traceback
from enum import IntEnum
from typing import NoReturn

import click

from binddl.errors import DDLError


class ExitCode(IntEnum):
    """Standard exit codes for the CLI."""
    SUCCESS = 0
    PARSE_ERROR = 1      # Source did not parse, or fmt --check found changes
    INVALID_ARGS = 2     # Invalid arguments or missing files
    INTERNAL_ERROR = 3   # Unexpected internal error


def handle_cli_exception(error: Exception, verbose: bool = False) -> NoReturn:
    """
    Report an exception raised by a command and exit.

    Parse errors are printed as-is: they already carry location, source
    context and the "error:" prefix.

    Raises:
        SystemExit: Always exits with an appropriate exit code
    """
    if isinstance(error, DDLError):
        click.echo(str(error), err=True)
        sys.exit(ExitCode.PARSE_ERROR)

    elif isinstance(error, (click.BadParameter, FileNotFoundError, PermissionError)):
        click.echo(f"Error: {error}", err=True)
        sys.exit(ExitCode.INVALID_ARGS)

    elif isinstance(error, UnicodeDecodeError):
        click.echo(f"Error: input is not valid UTF-8: {error}", err=True)
        sys.exit(ExitCode.INVALID_ARGS)

    else:
        click.echo(f"Internal error: {error}", err=True)
        if verbose:
            traceback.print_exc()
        sys.exit(ExitCode.INTERNAL_ERROR)
