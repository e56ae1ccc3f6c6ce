"""Resolution of imported function modules.

An import directive names either a Python source file or an importable
module, plus an alias.  Every function or rule-set the module exposes is
registered under ``alias.name`` using the same identifier scheme as
grammar blocks.  Any failure to load a module is fatal for the compile.
"""

from __future__ import annotations

import hashlib
import importlib
import importlib.util
import inspect
import logging
import sys
from os import PathLike
from pathlib import Path
from types import ModuleType
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from phras3.errors import InvalidTransformError, UnresolvedImportError
from phras3.runtime.transforms import normalize_rules

from .naming import generated_identifier

logger = logging.getLogger(__name__)

_MODULE_NAMESPACE = "phras3_imports"


def _looks_like_path(file: str) -> bool:
    return file.endswith(".py") or "/" in file or "\\" in file


def _candidate_paths(file: str, base_path: Optional[Path], search_paths: Sequence[Path]) -> List[Path]:
    target = Path(file)
    if target.is_absolute():
        return [target]
    candidates: List[Path] = []
    if base_path is not None:
        candidates.append(base_path / target)
    candidates.extend(Path(root) / target for root in search_paths)
    candidates.append(Path.cwd() / target)
    return candidates


def _load_source_file(path: Path) -> ModuleType:
    resolved = path.resolve()
    digest = hashlib.sha1(str(resolved).encode("utf-8")).hexdigest()[:10]
    module_name = f"{_MODULE_NAMESPACE}_{resolved.stem}_{digest}"
    cached = sys.modules.get(module_name)
    if cached is not None:
        return cached
    spec = importlib.util.spec_from_file_location(module_name, resolved)
    if spec is None or spec.loader is None:
        raise UnresolvedImportError(f"Cannot load import from {resolved}")
    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except Exception as exc:
        sys.modules.pop(module_name, None)
        raise UnresolvedImportError(
            f"Import {resolved} failed while loading: {exc.__class__.__name__}: {exc}"
        ) from exc
    return module


def load_import_module(
    file: str,
    *,
    base_path: Optional[str | PathLike[str]] = None,
    search_paths: Iterable[str | PathLike[str]] = (),
) -> ModuleType:
    """Load the module an import directive points at.

    Raises:
        UnresolvedImportError: If no candidate path exists or loading fails
    """
    base = Path(base_path) if base_path is not None else None
    roots = [Path(root) for root in search_paths]
    if _looks_like_path(file):
        candidates = _candidate_paths(file, base, roots)
        for candidate in candidates:
            if candidate.is_file():
                logger.debug("Resolved import %s to %s", file, candidate)
                return _load_source_file(candidate)
        raise UnresolvedImportError(
            f"Cannot resolve import '{file}'",
            hint="Searched: " + ", ".join(str(candidate) for candidate in candidates),
        )
    try:
        return importlib.import_module(file)
    except ImportError as exc:
        raise UnresolvedImportError(f"Cannot resolve import '{file}': {exc}") from exc


def _is_rule(value: Any) -> bool:
    if callable(value):
        return True
    return (
        isinstance(value, (list, tuple))
        and len(value) == 2
        and all(isinstance(part, str) for part in value)
    )


def exposed_functions(module: ModuleType) -> Dict[str, Any]:
    """Map each exposed name of ``module`` to a callable or normalized rule-set.

    ``__all__`` is honoured when present; otherwise public callables
    defined in the module itself and public rule lists are exposed.

    Raises:
        InvalidTransformError: If an exposed rule list holds an unusable
            rule or an invalid pattern
    """
    explicit = getattr(module, "__all__", None)
    names = list(explicit) if explicit is not None else [
        name for name in vars(module) if not name.startswith("_")
    ]
    exposed: Dict[str, Any] = {}
    for name in names:
        value = getattr(module, name, None)
        if inspect.isclass(value) or inspect.ismodule(value):
            continue
        if callable(value):
            if explicit is None and getattr(value, "__module__", None) != module.__name__:
                continue
            exposed[name] = value
        elif isinstance(value, (list, tuple)):
            if explicit is None and not (value and all(_is_rule(rule) for rule in value)):
                logger.debug("Skipping %s.%s: not a rule list", module.__name__, name)
                continue
            exposed[name] = normalize_rules(value)
        elif explicit is not None:
            logger.warning("Skipping %s.%s: not a function or rule list", module.__name__, name)
    return exposed


def resolve_imports(
    imports: Iterable[Tuple[str, str]],
    *,
    base_path: Optional[str | PathLike[str]] = None,
    search_paths: Iterable[str | PathLike[str]] = (),
) -> Dict[str, Any]:
    """Build the imported-function table for ``(file, alias)`` pairs.

    Raises:
        UnresolvedImportError: If a module cannot be loaded
        InvalidTransformError: If a loaded module exposes an unusable rule
            list; the message names the import it came from
    """
    roots = list(search_paths)
    table: Dict[str, Any] = {}
    for file, alias in imports:
        module = load_import_module(file, base_path=base_path, search_paths=roots)
        try:
            functions = exposed_functions(module)
        except InvalidTransformError as exc:
            raise InvalidTransformError(
                f"In import '{file}' as '{alias}': {exc.message}",
                hint=exc.hint,
            ) from exc
        logger.info("Imported %d function(s) from %s as '%s'", len(functions), file, alias)
        for name, value in functions.items():
            table[generated_identifier([alias, name])] = value
    return table


__all__ = ["load_import_module", "exposed_functions", "resolve_imports"]
