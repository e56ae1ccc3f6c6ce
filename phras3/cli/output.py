"""
Output formatting for CLI operations.
"""

from typing import Iterable


def print_success(message: str) -> None:
    """
    Print success message with checkmark prefix.

    Examples:
        >>> print_success("Module written to names.py")
        ✓ Module written to names.py
    """
    print(f"✓ {message}")


def print_section(title: str, items: Iterable[str]) -> None:
    """
    Print a titled, indented list; ``(none)`` marks an empty one.

    Examples:
        >>> print_section("Exports", ["name", "title"])
        Exports:
          name
          title
    """
    print(f"{title}:")
    entries = list(items)
    if not entries:
        print("  (none)")
        return
    for entry in entries:
        print(f"  {entry}")
