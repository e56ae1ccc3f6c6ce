"""
Centralized validation for CLI arguments.
"""

import os
from pathlib import Path
from typing import Any, Dict, List, Optional

from .errors import CLIFileNotFoundError, CLIValidationError


def validate_path(value: Any, *, allow_none: bool = False, must_exist: bool = False) -> Optional[Path]:
    """
    Validate and convert value to Path.

    Args:
        value: Value to validate (string, PathLike, or None)
        allow_none: Whether None is acceptable
        must_exist: Whether the path must exist on the filesystem

    Raises:
        CLIValidationError: If value is not a path-like value
        CLIFileNotFoundError: If must_exist=True and the path is missing

    Examples:
        >>> validate_path("/tmp/names.json")
        PosixPath('/tmp/names.json')
    """
    if value is None:
        if allow_none:
            return None
        raise CLIValidationError(
            "Path value cannot be None",
            hint="Provide a valid file or directory path"
        )

    if isinstance(value, (str, os.PathLike)):
        path = Path(value)

        if must_exist and not path.exists():
            raise CLIFileNotFoundError(
                f"Path does not exist: {path}",
                hint="Check the file path and try again"
            )

        return path

    raise CLIValidationError(
        f"Expected path-like value, got {type(value).__name__}",
        hint="Provide a string or Path object"
    )


def validate_int(
    value: Any,
    *,
    allow_none: bool = False,
    min_value: Optional[int] = None,
    max_value: Optional[int] = None
) -> Optional[int]:
    """
    Validate an integer with optional range checking.

    Examples:
        >>> validate_int(3, min_value=1)
        3
        >>> validate_int(0, min_value=1)
        Traceback (most recent call last):
        ...
        phras3.cli.errors.CLIValidationError: Value 0 is below minimum 1
    """
    if value is None:
        if allow_none:
            return None
        raise CLIValidationError(
            "Integer value cannot be None",
            hint="Provide a valid integer"
        )

    if not isinstance(value, int) or isinstance(value, bool):
        raise CLIValidationError(
            f"Expected integer value, got {type(value).__name__}",
            hint="Provide an integer value"
        )

    if min_value is not None and value < min_value:
        raise CLIValidationError(
            f"Value {value} is below minimum {min_value}",
            hint=f"Use a value >= {min_value}"
        )

    if max_value is not None and value > max_value:
        raise CLIValidationError(
            f"Value {value} exceeds maximum {max_value}",
            hint=f"Use a value <= {max_value}"
        )

    return value


def parse_assignments(entries: Optional[List[str]]) -> Dict[str, str]:
    """
    Parse ``NAME=VALUE`` strings into a mapping; later entries win.

    Examples:
        >>> parse_assignments(['surname=Smith', 'title=Dr'])
        {'surname': 'Smith', 'title': 'Dr'}
    """
    assignments: Dict[str, str] = {}
    for entry in entries or []:
        if '=' not in entry:
            raise CLIValidationError(
                f"Expected NAME=VALUE, got {entry!r}",
                hint="Pass variables as --var name=value"
            )
        key, value = entry.split('=', 1)
        key = key.strip()
        if not key:
            raise CLIValidationError(
                f"Variable name is empty in {entry!r}",
                hint="Pass variables as --var name=value"
            )
        assignments[key] = value
    return assignments
