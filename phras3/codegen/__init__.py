"""Textual backends for compiled grammars."""

from .python_module import generate_module_source, render_thunk, write_module

__all__ = ["generate_module_source", "render_thunk", "write_module"]
