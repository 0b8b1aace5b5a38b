"""
ddlc - DDL Command-Line Interface
=================================

This module implements the command-line interface for the DDL parser.

Commands
--------
- **check**: Parse a file and list its structs with their sizes
- **fmt**: Print a file in canonical layout
- **dump**: Print the parsed AST as an indented tree
- **tokens**: Print the token stream

Usage Examples
--------------
Check a schema:
    $ ddlc check tables.ddl

Reject trailing text after the last struct:
    $ ddlc check --strict tables.ddl

Reformat in place:
    $ ddlc fmt tables.ddl -o tables.ddl

Verify formatting in CI:
    $ ddlc fmt --check tables.ddl

Debug a parse:
    $ ddlc -v dump tables.ddl
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click

from binddl import __version__
from binddl.ast import StructDef
from binddl.cli.errors import ExitCode, handle_cli_exception
from binddl.lexer import DDLLexer
from binddl.parser import ParseOk, ParseOptions, parse_file
from binddl.printer import ASTPrinter, format_document

logger = logging.getLogger(__name__)


# =============================================================================
# CLI Context and Utilities
# =============================================================================

class Context:
    """
    Shared context for CLI commands.

    Stores options given before the command name.
    """

    def __init__(self) -> None:
        self.verbose: bool = False

    def setup_logging(self) -> None:
        """Configure logging based on verbosity."""
        level = logging.DEBUG if self.verbose else logging.WARNING
        logging.basicConfig(
            level=level,
            format="%(levelname)s: %(name)s: %(message)s" if self.verbose else "%(message)s",
        )


pass_context = click.make_pass_decorator(Context, ensure=True)

INPUT_FILE = click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)

STRICT = click.option(
    "--strict",
    is_flag=True,
    help="Reject text left over after the last struct definition",
)


def load_structs(input_file: Path, strict: bool) -> tuple[StructDef, ...]:
    """
    Parse input_file, warning about unparsed trailing text.

    Raises:
        DDLError: If the file does not parse
    """
    result = parse_file(input_file, ParseOptions(require_eof=strict))
    structs = result.unwrap()

    if isinstance(result, ParseOk) and result.remaining.strip():
        click.echo(
            f"warning: {input_file}: ignored {len(result.remaining)} characters "
            f"after the last struct definition",
            err=True,
        )
    return structs


def describe_size(struct: StructDef) -> str:
    size = struct.fixed_size
    if size is None:
        return "variable size"
    return f"{size} bytes"


# =============================================================================
# Main CLI Group
# =============================================================================

@click.group()
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output (debug logging)",
)
@click.version_option(__version__, "--version", "-V", prog_name="ddlc")
@pass_context
def main(ctx: Context, verbose: bool) -> None:
    """
    Parser for the binary record description language (DDL).

    \b
    Commands:
      check   Parse and summarise struct definitions
      fmt     Print in canonical layout
      dump    Print the AST tree
      tokens  Print the token stream

    \b
    Examples:
      ddlc check tables.ddl
      ddlc fmt --check tables.ddl
      ddlc -v dump tables.ddl
    """
    ctx.verbose = verbose
    ctx.setup_logging()


# =============================================================================
# Commands
# =============================================================================

@main.command("check")
@INPUT_FILE
@STRICT
@pass_context
def cmd_check(ctx: Context, input_file: Path, strict: bool) -> None:
    """
    Parse INPUT_FILE and list its struct definitions.

    Declared struct sizes are checked against their fields.
    """
    try:
        structs = load_structs(input_file, strict)
    except Exception as e:
        handle_cli_exception(e, ctx.verbose)

    for struct in structs:
        click.echo(f"{struct.name}: {len(struct.fields)} fields, {describe_size(struct)}")

    word = "definition" if len(structs) == 1 else "definitions"
    click.echo(f"{input_file}: {len(structs)} struct {word} OK")


@main.command("fmt")
@INPUT_FILE
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write formatted text to this file instead of stdout",
)
@click.option(
    "--check",
    "check_only",
    is_flag=True,
    help="Exit with status 1 if the file is not already canonical",
)
@STRICT
@pass_context
def cmd_fmt(
    ctx: Context,
    input_file: Path,
    output: Optional[Path],
    check_only: bool,
    strict: bool,
) -> None:
    """
    Print INPUT_FILE in canonical layout.

    Comments are dropped and 'byte' is written as 'uint8'.
    """
    try:
        structs = load_structs(input_file, strict)
        formatted = format_document(structs)

        if check_only:
            original = input_file.read_text(encoding="utf-8")
        elif output is not None:
            output.write_text(formatted, encoding="utf-8")
            logger.debug(f"Wrote {len(formatted)} characters to {output}")
    except Exception as e:
        handle_cli_exception(e, ctx.verbose)

    if check_only:
        if original != formatted:
            click.echo(f"would reformat {input_file}", err=True)
            sys.exit(ExitCode.PARSE_ERROR)
        click.echo(f"{input_file} is already formatted")
    elif output is None:
        click.echo(formatted, nl=False)


@main.command("dump")
@INPUT_FILE
@STRICT
@pass_context
def cmd_dump(ctx: Context, input_file: Path, strict: bool) -> None:
    """Print the AST of INPUT_FILE as an indented tree."""
    try:
        structs = load_structs(input_file, strict)
    except Exception as e:
        handle_cli_exception(e, ctx.verbose)

    click.echo(ASTPrinter().print(structs))


@main.command("tokens")
@INPUT_FILE
@pass_context
def cmd_tokens(ctx: Context, input_file: Path) -> None:
    """Print the token stream of INPUT_FILE, one token per line."""
    try:
        source = input_file.read_text(encoding="utf-8")
        tokens = list(DDLLexer(source, str(input_file)).tokenize())
    except Exception as e:
        handle_cli_exception(e, ctx.verbose)

    for token in tokens:
        click.echo(repr(token))


if __name__ == "__main__":
    main()
