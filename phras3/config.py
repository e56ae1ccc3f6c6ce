"""Workspace configuration support for the phras3 compiler and CLI."""

from __future__ import annotations

import json
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from phras3.errors import ConfigError

CONFIG_FILENAMES = ("phras3.toml", ".phras3rc")


class CompilerSettings(BaseModel):
    """Options controlling how grammars compile."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    recursion_probability: float = Field(
        0.5,
        ge=0.0,
        lt=1.0,
        description="Chance that a self-referencing block expands once more",
    )
    seed: Optional[int] = Field(None, description="Seed for the program's default random source")
    import_paths: List[str] = Field(default_factory=list, description="Extra directories searched for imports")
    strict_definitions: bool = Field(
        True,
        description="Treat conflicting definitions of one identifier as a compile error",
    )

    @field_validator("import_paths", mode="before")
    @classmethod
    def _coerce_paths(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [value]
        return value


class CLISettings(BaseModel):
    """Defaults for the ``generate`` command."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    default_count: int = Field(1, ge=1)
    separator: str = "\n\n"


@dataclass
class WorkspaceConfig:
    """Resolved workspace configuration."""

    root: Path
    compiler: CompilerSettings = field(default_factory=CompilerSettings)
    cli: CLISettings = field(default_factory=CLISettings)
    path: Optional[Path] = None
    raw: Dict[str, Any] = field(default_factory=dict)

    def import_roots(self) -> List[Path]:
        roots: List[Path] = []
        for entry in self.compiler.import_paths:
            path = Path(entry)
            roots.append(path if path.is_absolute() else (self.root / path).resolve())
        return roots

    def compiler_settings(self) -> CompilerSettings:
        """Compiler settings with import paths made absolute."""
        return self.compiler.model_copy(
            update={"import_paths": [str(path) for path in self.import_roots()]}
        )


def _read_json_config(path: Path) -> Dict[str, Any]:
    content = path.read_text(encoding="utf-8")
    return json.loads(content)


def _read_toml_config(path: Path) -> Dict[str, Any]:
    with path.open("rb") as handle:
        return tomllib.load(handle)


def locate_config_file(root: Path, explicit: Optional[Path] = None) -> Optional[Path]:
    if explicit is not None:
        return explicit if explicit.exists() else None
    for candidate in CONFIG_FILENAMES:
        path = root / candidate
        if path.exists():
            return path
    return None


def _section(data: Dict[str, Any], name: str) -> Dict[str, Any]:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigError(f"[{name}] must be a table, got {type(section).__name__}")
    return section


def load_workspace_config(root: Path, explicit: Optional[Path] = None) -> WorkspaceConfig:
    root = root.resolve()
    config_path = locate_config_file(root, explicit)
    if config_path is None:
        return WorkspaceConfig(root=root)

    try:
        if config_path.suffix == ".toml":
            data = _read_toml_config(config_path)
        else:
            data = _read_json_config(config_path)
    except (OSError, ValueError) as exc:
        raise ConfigError(f"Cannot read {config_path}: {exc}") from exc

    try:
        compiler = CompilerSettings(**_section(data, "compiler"))
        cli = CLISettings(**_section(data, "cli"))
    except ValidationError as exc:
        raise ConfigError(
            f"Invalid configuration in {config_path}: {exc.error_count()} error(s)",
            hint=str(exc),
        ) from exc

    return WorkspaceConfig(root=root, compiler=compiler, cli=cli, path=config_path, raw=data)


__all__ = [
    "CONFIG_FILENAMES",
    "CompilerSettings",
    "CLISettings",
    "WorkspaceConfig",
    "locate_config_file",
    "load_workspace_config",
]
