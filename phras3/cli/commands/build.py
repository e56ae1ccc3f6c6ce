"""
Build command implementation.

This module handles the 'build' subcommand which renders a compiled
grammar as a standalone Python module.
"""

import argparse
import sys
from pathlib import Path

from phras3.codegen import generate_module_source, write_module

from ..context import get_cli_context
from ..errors import handle_cli_exception
from ..loading import load_grammar_program
from ..output import print_success
from ..validation import validate_path


def cmd_build(args: argparse.Namespace) -> None:
    """
    Handle the 'build' subcommand.

    Writes the module to ``--out`` when given, otherwise to stdout.

    Raises:
        SystemExit: On any error during the build
    """
    try:
        ctx = get_cli_context(args)
        source_path = validate_path(Path(args.file).resolve(), must_exist=True)
        program = load_grammar_program(source_path, ctx.config.compiler_settings())

        out_path = validate_path(getattr(args, "out", None), allow_none=True)
        if out_path is None:
            sys.stdout.write(generate_module_source(program, origin=source_path.name))
            return

        target = write_module(program, out_path, origin=source_path.name)
        print_success(f"Module written to {target}")

    except Exception as exc:
        handle_cli_exception(exc, verbose=getattr(args, "verbose", False))
