"""Thunk runtime shared by compiled programs and generated modules."""

from .context import GenerationContext
from .program import CompiledProgram, EntryPoint
from .thunks import (
    EMPTY,
    Call,
    Choice,
    Concat,
    Literal,
    Recursive,
    Ref,
    Thunk,
    Transform,
    VarRef,
    Weighted,
    choice,
    concat,
)
from .transforms import PatternRule, apply_rules, normalize_rules

__all__ = [
    "GenerationContext",
    "CompiledProgram",
    "EntryPoint",
    "Thunk",
    "Literal",
    "EMPTY",
    "Weighted",
    "Choice",
    "Concat",
    "Ref",
    "Recursive",
    "VarRef",
    "Call",
    "Transform",
    "choice",
    "concat",
    "PatternRule",
    "apply_rules",
    "normalize_rules",
]
