"""
Tests for ddlc - DDL Command-Line Interface
===========================================

These tests drive the click commands through CliRunner. Messages written
to stderr are checked through result.output, which includes them.
"""

from pathlib import Path

import pytest
from click.testing import CliRunner

from binddl import __version__
from binddl.cli.ddlc import main
from binddl.cli.errors import ExitCode


GOOD = "struct Foo : 3 { a: byte, b: uint16 = 1 | * }\nstruct Bar { n: uint8, d: uint8[n] }\n"
CANONICAL = (
    "struct Foo : 3 {\n"
    "    a: uint8,\n"
    "    b: uint16 = 1 | *\n"
    "}\n"
    "\n"
    "struct Bar {\n"
    "    n: uint8,\n"
    "    d: uint8[n]\n"
    "}\n"
)
BAD_SIZE = "struct Foo : 4 { a: uint8, b: uint16 }\n"


@pytest.fixture
def runner():
    return CliRunner()


def write(name: str, text: str) -> str:
    Path(name).write_text(text, encoding="utf-8")
    return name


# =============================================================================
# Test Group Options
# =============================================================================

class TestMain:
    """Tests for options on the command group."""

    def test_help(self, runner):
        """Should list the commands."""
        result = runner.invoke(main, ["--help"])
        assert result.exit_code == 0
        for command in ("check", "fmt", "dump", "tokens"):
            assert command in result.output

    def test_version(self, runner):
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_missing_file(self, runner):
        """A nonexistent input is an argument error."""
        result = runner.invoke(main, ["check", "missing.ddl"])
        assert result.exit_code == ExitCode.INVALID_ARGS


# =============================================================================
# Test check
# =============================================================================

class TestCheck:
    """Tests for the check command."""

    def test_check_ok(self, runner):
        with runner.isolated_filesystem():
            write("good.ddl", GOOD)
            result = runner.invoke(main, ["check", "good.ddl"])
        assert result.exit_code == ExitCode.SUCCESS
        assert "Foo: 2 fields, 3 bytes" in result.output
        assert "Bar: 2 fields, variable size" in result.output
        assert "good.ddl: 2 struct definitions OK" in result.output

    def test_check_single_struct(self, runner):
        with runner.isolated_filesystem():
            write("one.ddl", "struct A { }")
            result = runner.invoke(main, ["check", "one.ddl"])
        assert "one.ddl: 1 struct definition OK" in result.output

    def test_check_size_mismatch(self, runner):
        """A named failure is printed with its location and exits 1."""
        with runner.isolated_filesystem():
            write("bad.ddl", BAD_SIZE)
            result = runner.invoke(main, ["check", "bad.ddl"])
        assert result.exit_code == ExitCode.PARSE_ERROR
        assert "bad.ddl:1:38: error: specified struct size does not match fields" in result.output

    def test_check_syntax_error(self, runner):
        with runner.isolated_filesystem():
            write("bad.ddl", "struct S {\n  b: float\n}\n")
            result = runner.invoke(main, ["check", "bad.ddl"])
        assert result.exit_code == ExitCode.PARSE_ERROR
        assert "bad.ddl:2:6: error: expected field type" in result.output

    def test_trailing_text_warns(self, runner):
        with runner.isolated_filesystem():
            write("tail.ddl", "struct A { }\nnot ddl\n")
            result = runner.invoke(main, ["check", "tail.ddl"])
        assert result.exit_code == ExitCode.SUCCESS
        assert "warning: tail.ddl: ignored 8 characters" in result.output

    def test_trailing_text_strict(self, runner):
        with runner.isolated_filesystem():
            write("tail.ddl", "struct A { }\nnot ddl\n")
            result = runner.invoke(main, ["check", "--strict", "tail.ddl"])
        assert result.exit_code == ExitCode.PARSE_ERROR
        assert "expected struct definition or end of input" in result.output

    def test_invalid_utf8(self, runner):
        with runner.isolated_filesystem():
            Path("bin.ddl").write_bytes(b"struct \xff { }")
            result = runner.invoke(main, ["check", "bin.ddl"])
        assert result.exit_code == ExitCode.INVALID_ARGS
        assert "not valid UTF-8" in result.output

    def test_verbose_logging(self, runner):
        """Verbose mode still succeeds."""
        with runner.isolated_filesystem():
            write("good.ddl", GOOD)
            result = runner.invoke(main, ["-v", "check", "good.ddl"])
        assert result.exit_code == ExitCode.SUCCESS


# =============================================================================
# Test fmt
# =============================================================================

class TestFmt:
    """Tests for the fmt command."""

    def test_fmt_stdout(self, runner):
        with runner.isolated_filesystem():
            write("good.ddl", GOOD)
            result = runner.invoke(main, ["fmt", "good.ddl"])
        assert result.exit_code == ExitCode.SUCCESS
        assert result.output == CANONICAL

    def test_fmt_output_file(self, runner):
        with runner.isolated_filesystem():
            write("good.ddl", GOOD)
            result = runner.invoke(main, ["fmt", "good.ddl", "-o", "out.ddl"])
            written = Path("out.ddl").read_text(encoding="utf-8")
        assert result.exit_code == ExitCode.SUCCESS
        assert written == CANONICAL

    def test_fmt_check_needs_reformat(self, runner):
        with runner.isolated_filesystem():
            write("good.ddl", GOOD)
            result = runner.invoke(main, ["fmt", "--check", "good.ddl"])
        assert result.exit_code == ExitCode.PARSE_ERROR
        assert "would reformat good.ddl" in result.output

    def test_fmt_check_already_formatted(self, runner):
        with runner.isolated_filesystem():
            write("canon.ddl", CANONICAL)
            result = runner.invoke(main, ["fmt", "--check", "canon.ddl"])
        assert result.exit_code == ExitCode.SUCCESS
        assert "canon.ddl is already formatted" in result.output

    def test_fmt_parse_error(self, runner):
        with runner.isolated_filesystem():
            write("bad.ddl", BAD_SIZE)
            result = runner.invoke(main, ["fmt", "bad.ddl", "-o", "out.ddl"])
            assert not Path("out.ddl").exists()
        assert result.exit_code == ExitCode.PARSE_ERROR


# =============================================================================
# Test dump and tokens
# =============================================================================

class TestDump:
    """Tests for the dump command."""

    def test_dump(self, runner):
        with runner.isolated_filesystem():
            write("good.ddl", GOOD)
            result = runner.invoke(main, ["dump", "good.ddl"])
        assert result.exit_code == ExitCode.SUCCESS
        assert "Struct: Foo (declared size 3)" in result.output
        assert "  Field: b uint16 = 1 | *" in result.output
        assert "Struct: Bar (variable size)" in result.output


class TestTokens:
    """Tests for the tokens command."""

    def test_tokens(self, runner):
        with runner.isolated_filesystem():
            write("small.ddl", "struct A { x: byte }")
            result = runner.invoke(main, ["tokens", "small.ddl"])
        assert result.exit_code == ExitCode.SUCCESS
        lines = result.output.splitlines()
        assert lines[0] == "Token(KEYWORD, 'struct', 1:1)"
        assert lines[1] == "Token(IDENTIFIER, 'A', 1:8)"
        assert lines[-1] == "Token(EOF, 1:21)"

    def test_tokens_invalid_character(self, runner):
        with runner.isolated_filesystem():
            write("bad.ddl", "struct A { x: byte ; }")
            result = runner.invoke(main, ["tokens", "bad.ddl"])
        assert result.exit_code == ExitCode.PARSE_ERROR
        assert "invalid character ';'" in result.output
