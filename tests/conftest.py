import json
import logging
import random
import textwrap

import pytest


def pytest_configure(config):
    """Register markers for pytest."""
    config.addinivalue_line("markers", "statistical: frequency checks over many seeded samples")
    config.addinivalue_line("markers", "integration: mark test as integration test")
    config.addinivalue_line("markers", "cli: mark test as exercising the command line")


class RawGrammar:
    """Builders for the parser's nested-list grammar output."""

    @staticmethod
    def literal(text):
        return ["literal", text]

    @staticmethod
    def ident(path):
        return ["identifier", path]

    @staticmethod
    def string(*parts, weight=None):
        node = ["interpolated_string", list(parts)]
        if weight is not None:
            node.append(weight)
        return node

    @staticmethod
    def block(name, *children):
        return ["scope_block", ["identifier", name], list(children)]

    @staticmethod
    def options(name, *children):
        label = ["identifier", name] if name else None
        return ["list_block", label, list(children)]

    @staticmethod
    def tag(*children, quantifier=None):
        node = ["tag", list(children)]
        if quantifier is not None:
            node.append(quantifier)
        return node

    @staticmethod
    def tag_choice(left, right):
        return ["tag_choice", list(left), list(right)]

    @staticmethod
    def tag_concat(left, right):
        return ["tag_concat", list(left), list(right)]

    @staticmethod
    def transform(argument, function):
        return ["transform", argument, ["identifier", function]]

    @staticmethod
    def call(function, *args):
        return ["call", ["identifier", function], list(args)]

    @staticmethod
    def import_(file, alias):
        return ["meta_statement", "import", [["literal", file], ["identifier", alias]]]

    @staticmethod
    def export(key, value):
        return ["meta_statement", "export", [["literal", key], value]]

    @staticmethod
    def mapping(*entries):
        return ["mapping", *entries]


@pytest.fixture
def raw():
    """Builders for raw grammar nodes."""
    return RawGrammar


@pytest.fixture
def rng():
    """Seeded random source so statistical checks are reproducible."""
    return random.Random(20240611)


@pytest.fixture
def write_grammar(tmp_path):
    """Write raw grammar nodes to a JSON file under tmp_path."""

    def _write(nodes, name="grammar.json"):
        path = tmp_path / name
        path.write_text(json.dumps(nodes), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def helpers_module(tmp_path):
    """A function module a grammar can import as ``helpers.py``."""
    path = tmp_path / "helpers.py"
    path.write_text(
        textwrap.dedent(
            '''
            from os.path import join as _join
            from os.path import basename


            def shout(text):
                return text.upper() + "!"


            def pair(left, right):
                return f"{left}-{right}"


            def count(text):
                return len(text)


            def _hidden(text):
                return text


            class Helper:
                pass


            plural = [
                ("(s|x)$", r"\\1es"),
                ("y$", "ies"),
                ("$", "s"),
            ]

            VERSION = 3
            NAMES = ["not", "a", "rule", "list"]
            '''
        ),
        encoding="utf-8",
    )
    return path


@pytest.fixture(autouse=True)
def _reset_phras3_logger():
    """Undo logger configuration done by CLI runs so caplog sees every record."""
    yield
    package_logger = logging.getLogger("phras3")
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
    package_logger.setLevel(logging.NOTSET)
    package_logger.propagate = True
