"""
CLI command modules.

Each command module handles one phras3 subcommand.
"""

from .build import cmd_build
from .generate import cmd_generate
from .inspect import cmd_inspect

__all__ = ["cmd_build", "cmd_generate", "cmd_inspect"]
