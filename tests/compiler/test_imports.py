"""
Tests for resolving imported function modules.
"""

import textwrap

import pytest

from phras3.compiler.imports import exposed_functions, load_import_module, resolve_imports
from phras3.errors import InvalidTransformError, UnresolvedImportError
from phras3.runtime.transforms import PatternRule, apply_rules


def write_module(directory, name, source):
    path = directory / name
    path.write_text(textwrap.dedent(source), encoding="utf-8")
    return path


class TestLoadImportModule:
    """Test locating and loading modules."""

    def test_relative_to_base_path(self, helpers_module):
        module = load_import_module("helpers.py", base_path=helpers_module.parent)
        assert module.shout("hi") == "HI!"

    def test_search_paths(self, tmp_path):
        lib = tmp_path / "lib"
        lib.mkdir()
        write_module(lib, "words.py", "def greet(name):\n    return 'hello ' + name\n")
        module = load_import_module("words.py", base_path=tmp_path, search_paths=[lib])
        assert module.greet("you") == "hello you"

    def test_same_file_loads_once(self, helpers_module):
        first = load_import_module("helpers.py", base_path=helpers_module.parent)
        second = load_import_module(str(helpers_module))
        assert first is second

    def test_dotted_module_name(self):
        module = load_import_module("string")
        assert module.capwords("ada lovelace") == "Ada Lovelace"

    def test_missing_file(self, tmp_path):
        with pytest.raises(UnresolvedImportError) as exc_info:
            load_import_module("nowhere.py", base_path=tmp_path)
        assert "nowhere.py" in str(exc_info.value)
        assert "Searched" in exc_info.value.hint

    def test_missing_module(self):
        with pytest.raises(UnresolvedImportError):
            load_import_module("phras3_no_such_module_anywhere")

    def test_module_failing_on_import(self, tmp_path):
        write_module(tmp_path, "broken.py", "raise RuntimeError('boom')\n")
        with pytest.raises(UnresolvedImportError) as exc_info:
            load_import_module("broken.py", base_path=tmp_path)
        assert "RuntimeError: boom" in str(exc_info.value)


class TestExposedFunctions:
    """Test which module members are exposed."""

    def test_implicit_exposure(self, helpers_module):
        module = load_import_module("helpers.py", base_path=helpers_module.parent)
        exposed = exposed_functions(module)
        assert set(exposed) == {"shout", "pair", "count", "plural"}

    def test_rule_lists_are_normalized(self, helpers_module):
        module = load_import_module("helpers.py", base_path=helpers_module.parent)
        plural = exposed_functions(module)["plural"]
        assert all(isinstance(rule, PatternRule) for rule in plural)
        assert apply_rules("box", plural) == "boxes"
        assert apply_rules("pony", plural) == "ponies"
        assert apply_rules("cat", plural) == "cats"

    def test_dunder_all_is_honoured(self, tmp_path):
        write_module(
            tmp_path,
            "picky.py",
            """
            from os.path import basename

            __all__ = ["basename", "rules"]

            rules = [("a+", "b")]


            def ignored(text):
                return text
            """,
        )
        module = load_import_module("picky.py", base_path=tmp_path)
        assert set(exposed_functions(module)) == {"basename", "rules"}

    def test_invalid_pattern_is_an_error(self, tmp_path):
        write_module(tmp_path, "badrules.py", "rules = [('(unclosed', 'x')]\n")
        module = load_import_module("badrules.py", base_path=tmp_path)
        with pytest.raises(InvalidTransformError) as exc_info:
            exposed_functions(module)
        assert "(unclosed" in str(exc_info.value)


class TestResolveImports:
    """Test the imported-function table."""

    def test_qualified_identifiers(self, helpers_module):
        table = resolve_imports([("helpers.py", "h")], base_path=helpers_module.parent)
        assert set(table) == {"p3_h__shout", "p3_h__pair", "p3_h__count", "p3_h__plural"}

    def test_two_aliases(self, helpers_module):
        table = resolve_imports(
            [("helpers.py", "h"), ("string", "s")],
            base_path=helpers_module.parent,
        )
        assert table["p3_h__shout"]("a") == "A!"
        assert table["p3_s__capwords"]("a b") == "A B"

    def test_any_failure_aborts(self, helpers_module):
        with pytest.raises(UnresolvedImportError):
            resolve_imports(
                [("helpers.py", "h"), ("missing.py", "m")],
                base_path=helpers_module.parent,
            )

    def test_bad_rule_list_names_its_import(self, tmp_path):
        write_module(tmp_path, "badrules.py", "rules = [('(unclosed', 'x')]\n")
        with pytest.raises(InvalidTransformError) as exc_info:
            resolve_imports([("badrules.py", "b")], base_path=tmp_path)
        assert "In import 'badrules.py' as 'b'" in exc_info.value.message
        assert "(unclosed" in exc_info.value.message
        assert exc_info.value.hint == "Transform patterns use Python regular expression syntax"
