"""
phras3 CLI entry point.

This module provides the command line interface for the phras3 grammar
compiler, dispatching subcommands to focused command modules.
"""

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Optional

from phras3 import __version__
from phras3.config import load_workspace_config
from phras3.errors import ConfigError

from .commands import cmd_build, cmd_generate, cmd_inspect
from .context import CLIContext
from .errors import handle_cli_exception

_LOG_LEVELS = {
    'debug': logging.DEBUG,
    'info': logging.INFO,
    'warn': logging.WARNING,
    'warning': logging.WARNING,
    'error': logging.ERROR,
}


def _configure_logging(args) -> None:
    """Configure the phras3 logger from --log-level or PHRAS3_LOG_LEVEL."""
    log_level = (
        getattr(args, 'log_level', None) or
        os.getenv('PHRAS3_LOG_LEVEL', 'warn')
    ).lower()
    numeric_level = _LOG_LEVELS.get(log_level, logging.WARNING)

    package_logger = logging.getLogger('phras3')
    package_logger.setLevel(numeric_level)

    if not package_logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        handler.setFormatter(formatter)
        package_logger.addHandler(handler)
        # Prevent propagation to root logger to avoid duplicate messages
        package_logger.propagate = False


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="phras3 grammar compiler: turn generative grammars into random text generators",
        prog="phras3"
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        '--config',
        default=None,
        help='Path to a phras3.toml configuration file'
    )
    parser.add_argument(
        '--workspace',
        default=None,
        help='Workspace root directory (defaults to current working directory)'
    )
    parser.add_argument(
        '--log-level',
        choices=['debug', 'info', 'warn', 'error'],
        default=None,
        help='Set logging level (or set PHRAS3_LOG_LEVEL)'
    )
    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Print full tracebacks and detailed CLI errors (or set PHRAS3_VERBOSE=1)'
    )

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    generate_parser = subparsers.add_parser(
        'generate',
        help='Generate random text from exported entry points'
    )
    generate_parser.add_argument('file', help='Path to the grammar AST (JSON parser output)')
    generate_parser.add_argument('entry', nargs='+', help='Exported entry point(s) to generate')
    generate_parser.add_argument(
        '--var',
        action='append',
        default=[],
        metavar='NAME=VALUE',
        help='Override a grammar variable (may be provided multiple times)'
    )
    generate_parser.add_argument(
        '-n', '--count',
        type=int,
        default=None,
        help='Number of rounds to generate (default from [cli] default_count)'
    )
    generate_parser.add_argument(
        '--seed',
        type=int,
        default=None,
        help='Seed the random source for reproducible output'
    )
    generate_parser.set_defaults(func=cmd_generate)

    build_parser_ = subparsers.add_parser(
        'build',
        help='Emit the compiled grammar as a Python module'
    )
    build_parser_.add_argument('file', help='Path to the grammar AST (JSON parser output)')
    build_parser_.add_argument(
        '--out', '-o', default=None, help='Output file (defaults to stdout)'
    )
    build_parser_.set_defaults(func=cmd_build)

    inspect_parser = subparsers.add_parser(
        'inspect',
        help='List exported entry points and overridable variables'
    )
    inspect_parser.add_argument('file', help='Path to the grammar AST (JSON parser output)')
    inspect_parser.add_argument('--json', action='store_true', help='Print a JSON summary')
    inspect_parser.set_defaults(func=cmd_inspect)

    return parser


def main(argv: Optional[list] = None) -> None:
    """
    Main CLI entrypoint with subcommand support.

    Args:
        argv: Command-line arguments (None uses sys.argv[1:])

    Examples:
        >>> main(['generate', 'names.json', 'name', '--var', 'surname=Smith'])  # doctest: +SKIP
        >>> main(['build', 'names.json', '--out', 'names.py'])  # doctest: +SKIP
    """
    if argv is None:
        argv = sys.argv[1:]

    parser = build_parser()
    args = parser.parse_args(argv)
    args.verbose = getattr(args, "verbose", False)

    if not hasattr(args, 'func'):
        parser.print_help()
        sys.exit(1)

    _configure_logging(args)

    workspace_root = (
        Path(args.workspace).resolve()
        if args.workspace
        else Path.cwd()
    )
    config_path = Path(args.config).resolve() if args.config else None
    try:
        config = load_workspace_config(workspace_root, config_path)
    except ConfigError as exc:
        handle_cli_exception(exc, verbose=args.verbose)
        return

    args.cli_context = CLIContext(
        workspace_root=workspace_root,
        config=config,
    )

    args.func(args)


if __name__ == '__main__':  # pragma: no cover
    main()
