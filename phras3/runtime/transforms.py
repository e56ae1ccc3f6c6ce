"""Regex and callable string transform pipelines."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Sequence, Tuple, Union

from phras3.errors import InvalidTransformError


@dataclass(frozen=True)
class PatternRule:
    """Case-insensitive search/replace rule.

    ``replacement`` uses :func:`re.sub` syntax, so groups are written
    ``\\1`` or ``\\g<name>``.
    """

    pattern: "re.Pattern[str]"
    replacement: str

    @classmethod
    def compile(cls, pattern: str, replacement: str) -> "PatternRule":
        try:
            compiled = re.compile(pattern, re.IGNORECASE)
        except re.error as exc:
            raise InvalidTransformError(
                f"Invalid transform pattern {pattern!r}: {exc}",
                hint="Transform patterns use Python regular expression syntax",
            ) from exc
        return cls(pattern=compiled, replacement=replacement)

    def apply(self, text: str) -> Tuple[str, bool]:
        if self.pattern.search(text) is None:
            return text, False
        return self.pattern.sub(self.replacement, text), True


Rule = Union[PatternRule, Callable[[str], Any]]
RuleSet = Tuple[Rule, ...]


def normalize_rules(rules: Any) -> RuleSet:
    """Turn an imported callable or rule list into an ordered :data:`RuleSet`.

    Accepted entries are callables and ``(pattern, replacement)`` pairs.
    A bare callable is treated as a single-rule pipeline.
    """
    if callable(rules):
        return (rules,)
    if isinstance(rules, (str, bytes)) or not isinstance(rules, Iterable):
        raise InvalidTransformError(
            f"Expected a callable or a list of rules, got {type(rules).__name__}"
        )
    normalized = []
    for rule in rules:
        if isinstance(rule, PatternRule) or callable(rule):
            normalized.append(rule)
            continue
        if (
            isinstance(rule, Sequence)
            and not isinstance(rule, str)
            and len(rule) == 2
            and all(isinstance(part, str) for part in rule)
        ):
            normalized.append(PatternRule.compile(rule[0], rule[1]))
            continue
        raise InvalidTransformError(
            f"Unsupported transform rule {rule!r}",
            hint="Use a (pattern, replacement) pair or a callable taking one string",
        )
    return tuple(normalized)


def apply_rules(text: str, rules: Iterable[Rule]) -> str:
    """Run ``text`` through ``rules`` in order.

    The first pattern rule that matches replaces and ends the pipeline;
    callable rules always apply and never end it.
    """
    for rule in rules:
        if isinstance(rule, PatternRule):
            text, matched = rule.apply(text)
            if matched:
                break
        else:
            text = str(rule(text))
    return text


__all__ = ["PatternRule", "Rule", "RuleSet", "normalize_rules", "apply_rules"]
