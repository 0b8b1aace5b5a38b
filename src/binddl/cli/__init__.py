"""
binddl Command-Line Interface
=============================

This package provides the ``ddlc`` command-line tool, a thin click
wrapper around ``binddl.parse``:

- **ddlc check**: parse a file and summarise its structs
- **ddlc fmt**: print a file in canonical layout
- **ddlc dump**: print the parsed AST as a tree
- **ddlc tokens**: print the token stream
"""

__all__ = ["ddlc"]
