"""
Grammar loading for CLI operations.

Maps compiler failures onto the CLI error hierarchy so every command
reports them the same way.
"""

import json
from pathlib import Path
from typing import Optional

from ..compiler import compile_file
from ..config import CompilerSettings
from ..errors import P3Error
from ..runtime import CompiledProgram
from .errors import CLIFileNotFoundError, CLIRuntimeError, CLIValidationError, wrap_exception


def load_grammar_program(source_path: Path, settings: Optional[CompilerSettings] = None) -> CompiledProgram:
    """
    Compile the parser output stored at ``source_path``.

    Args:
        source_path: Path to a JSON file holding the grammar AST
        settings: Compiler settings from the workspace configuration

    Raises:
        CLIFileNotFoundError: If the source file doesn't exist
        CLIValidationError: If the file is not a grammar AST
        CLIRuntimeError: If compilation fails

    Examples:
        >>> program = load_grammar_program(Path("names.json"))  # doctest: +SKIP
        >>> sorted(program.exports)
        ['name']
    """
    if not source_path.exists():
        raise CLIFileNotFoundError(
            f"Source file not found: {source_path}",
            hint="Check the file path and try again"
        )

    try:
        return compile_file(source_path, settings=settings)
    except (json.JSONDecodeError, ValueError) as exc:
        raise wrap_exception(
            exc,
            message=f"{source_path} is not a grammar AST: {exc}",
            error_class=CLIValidationError,
            hint="Pass the JSON output of the grammar parser",
        ) from exc
    except P3Error as exc:
        raise wrap_exception(
            exc,
            message=f"Failed to compile {source_path}: {exc.message}",
            error_class=CLIRuntimeError,
            code=exc.code or 'CLI_RUNTIME_ERROR',
        ) from exc
