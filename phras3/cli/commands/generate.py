"""
Generate command implementation.

This module handles the 'generate' subcommand which compiles a grammar
and prints random output from one or more of its exported entry points.
"""

import argparse
import logging
from pathlib import Path

from phras3.errors import InvalidEntryPointError, InvalidVariableError

from ..context import get_cli_context
from ..errors import CLIValidationError, handle_cli_exception, wrap_exception
from ..loading import load_grammar_program
from ..validation import parse_assignments, validate_int, validate_path

logger = logging.getLogger(__name__)


def cmd_generate(args: argparse.Namespace) -> None:
    """
    Handle the 'generate' subcommand.

    Args:
        args: Parsed command-line arguments containing:
            - file: Path to the grammar AST (JSON)
            - entry: Exported entry point names
            - var: NAME=VALUE variable overrides (optional)
            - count: Number of rounds to generate (optional)
            - seed: Seed for reproducible output (optional)

    Raises:
        SystemExit: On any error

    Examples:
        >>> cmd_generate(argparse.Namespace(file='names.json', entry=['name'], ...))  # doctest: +SKIP
        Ada Lovelace
    """
    try:
        ctx = get_cli_context(args)
        source_path = validate_path(Path(args.file).resolve(), must_exist=True)

        settings = ctx.config.compiler_settings()
        if getattr(args, "seed", None) is not None:
            settings = settings.model_copy(update={"seed": args.seed})

        count = args.count if getattr(args, "count", None) is not None else ctx.config.cli.default_count
        count = validate_int(count, min_value=1)
        overrides = parse_assignments(getattr(args, "var", None))

        program = load_grammar_program(source_path, settings)
        try:
            program.validate_overrides(overrides)
            entry_points = [program.entry_point(name) for name in args.entry]
        except (InvalidVariableError, InvalidEntryPointError) as exc:
            raise wrap_exception(
                exc,
                message=exc.message,
                error_class=CLIValidationError,
                code=exc.code,
            ) from exc

        logger.debug("Generating %d round(s) from %s", count, ", ".join(args.entry))
        results = [entry(overrides) for _ in range(count) for entry in entry_points]
        print(ctx.config.cli.separator.join(results))

    except Exception as exc:
        handle_cli_exception(exc, verbose=getattr(args, "verbose", False))
