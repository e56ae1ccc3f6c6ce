"""
Inspect command implementation.

Lists a grammar's exported entry points and overridable variables, the
surface usage text and wrappers are built from.
"""

import argparse
import json
from pathlib import Path

from ..context import get_cli_context
from ..errors import handle_cli_exception
from ..loading import load_grammar_program
from ..output import print_section
from ..validation import validate_path


def cmd_inspect(args: argparse.Namespace) -> None:
    """Handle the 'inspect' subcommand."""
    try:
        ctx = get_cli_context(args)
        source_path = validate_path(Path(args.file).resolve(), must_exist=True)
        program = load_grammar_program(source_path, ctx.config.compiler_settings())

        summary = {
            "file": str(source_path),
            "exports": sorted(program.exports),
            "variables": list(program.variable_names),
            "definitions": len(program.definitions),
        }
        if getattr(args, "json", False):
            print(json.dumps(summary, indent=2))
            return

        print_section("Exports", summary["exports"])
        print_section("Variables", summary["variables"])

    except Exception as exc:
        handle_cli_exception(exc, verbose=getattr(args, "verbose", False))
