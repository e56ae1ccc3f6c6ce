"""
Tests for the lazy thunk runtime.

Frequency checks use a seeded random source and compare a chi-squared
statistic against the 0.999 quantile for the relevant degrees of freedom.
"""

import random
from concurrent.futures import ThreadPoolExecutor

import numpy as np
import pytest

from phras3.runtime import (
    Call,
    Choice,
    GenerationContext,
    Literal,
    Recursive,
    Transform,
    VarRef,
    Weighted,
    choice,
    concat,
)

# Chi-squared 0.999 quantiles by degrees of freedom.
CHI2_CRITICAL = {2: 13.816, 3: 16.266, 5: 20.515}


def chi_squared(observed, expected):
    observed = np.asarray(observed, dtype=float)
    expected = np.asarray(expected, dtype=float)
    return float(np.sum((observed - expected) ** 2 / expected))


def make_context(rng=None, **kwargs):
    return GenerationContext(rng=rng or random.Random(0), **kwargs)


class TestBasicThunks:
    """Test literal, concat and choice forcing."""

    def test_concat_joins_without_separator(self):
        thunk = concat([Literal("a"), Literal("b")])
        ctx = make_context()
        assert all(thunk.force(ctx) == "ab" for _ in range(10))

    def test_empty_choice_is_empty_string(self):
        assert Choice(()).force(make_context()) == ""

    def test_choice_pool_is_memoized(self):
        thunk = choice([Literal("a"), Weighted(Literal("b"), 2)])
        assert thunk._pool is None
        pool = thunk.candidates()
        assert thunk.candidates() is pool
        assert pool == [Literal("a"), Literal("b"), Literal("b")]

    def test_choice_selection_is_not_memoized(self, rng):
        thunk = choice([Literal(str(i)) for i in range(5)])
        ctx = make_context(rng)
        assert len({thunk.force(ctx) for _ in range(100)}) > 1

    def test_nested_weighted_choice(self, rng):
        thunk = choice([Weighted(concat([Literal("x"), Literal("y")]), 3)])
        assert thunk.force(make_context(rng)) == "xy"


@pytest.mark.statistical
class TestChoiceFrequencies:
    """Test uniform and weighted selection frequencies."""

    def test_uniform_choice(self, rng):
        branches = ["a", "b", "c", "d"]
        thunk = choice([Literal(text) for text in branches])
        ctx = make_context(rng)
        samples = 10_000
        results = [thunk.force(ctx) for _ in range(samples)]
        observed = [results.count(text) for text in branches]
        expected = [samples / len(branches)] * len(branches)
        assert chi_squared(observed, expected) < CHI2_CRITICAL[3]

    def test_weighted_choice(self, rng):
        weights = {"rare": 1, "common": 2, "frequent": 3}
        thunk = choice([Weighted(Literal(text), weight) for text, weight in weights.items()])
        ctx = make_context(rng)
        samples = 12_000
        results = [thunk.force(ctx) for _ in range(samples)]
        total = sum(weights.values())
        observed = [results.count(text) for text in weights]
        expected = [samples * weight / total for weight in weights.values()]
        assert chi_squared(observed, expected) < CHI2_CRITICAL[2]


class TestVariableReferences:
    """Test override resolution."""

    def test_no_override_forces_fallback(self):
        thunk = VarRef("x", Literal("default"))
        assert thunk.force(make_context()) == "default"

    def test_override_wins_over_fallback(self):
        thunk = VarRef("x", choice([Literal("a"), Literal("b")]))
        assert thunk.force(make_context(overrides={"x": "Z"})) == "Z"

    def test_empty_override_is_ignored(self):
        thunk = VarRef("x", Literal("default"))
        assert thunk.force(make_context(overrides={"x": ""})) == "default"

    def test_override_is_returned_verbatim(self):
        thunk = VarRef("x", Literal("default"))
        assert thunk.force(make_context(overrides={"x": "{not a template}"})) == "{not a template}"

    def test_concurrent_passes_do_not_share_overrides(self):
        thunk = concat([Literal("<"), VarRef("who", Literal("nobody")), Literal(">")])

        def run(name):
            ctx = make_context(random.Random(name), overrides={"who": name})
            return [thunk.force(ctx) for _ in range(200)]

        names = [f"caller{i}" for i in range(8)]
        with ThreadPoolExecutor(max_workers=4) as pool:
            outputs = list(pool.map(run, names))
        for name, results in zip(names, outputs):
            assert set(results) == {f"<{name}>"}


class TestImportedFunctions:
    """Test call and transform thunks."""

    def test_call_forces_arguments_and_stringifies(self):
        thunk = Call("p3_h__size", (concat([Literal("ab"), Literal("c")]),))
        ctx = make_context(imports={"p3_h__size": len})
        assert thunk.force(ctx) == "3"

    def test_transform_with_callable(self):
        thunk = Transform(Literal("quiet"), "p3_t__upper")
        ctx = make_context(imports={"p3_t__upper": str.upper})
        assert thunk.force(ctx) == "QUIET"

    def test_transform_with_rule_list(self):
        thunk = Transform(Literal("aaa"), "p3_t__rules")
        ctx = make_context(imports={"p3_t__rules": [("a+", "b")]})
        assert thunk.force(ctx) == "b"


class TestRecursion:
    """Test probabilistic self reference."""

    def test_zero_probability_never_expands(self):
        definitions = {"p3_chain": concat([Literal("x"), Recursive("p3_chain", 0.0)])}
        ctx = make_context(definitions=definitions)
        assert definitions["p3_chain"].force(ctx) == "x"

    @pytest.mark.statistical
    def test_depth_is_geometric(self, rng):
        definitions = {}
        definitions["p3_chain"] = concat([Literal("x"), Recursive("p3_chain", 0.5)])
        ctx = make_context(rng, definitions=definitions)
        samples = 1000
        depths = np.array([len(definitions["p3_chain"].force(ctx)) for _ in range(samples)])

        assert depths.min() >= 1
        assert abs(depths.mean() - 2.0) < 0.25

        # Depths 1..5 individually, everything deeper in one tail bucket.
        counts = np.bincount(np.minimum(depths, 6), minlength=7)[1:]
        probabilities = [0.5 ** k for k in range(1, 6)]
        probabilities.append(1 - sum(probabilities))
        expected = [samples * p for p in probabilities]
        assert chi_squared(counts, expected) < CHI2_CRITICAL[5]
