"""TOML reader for assetsync.toml project configs."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path
from typing import Any

from assetsync.config import CONFIG_FILE
from assetsync.exceptions import ConfigError, ConfigNotFoundError
from assetsync.filesystem.glob import Glob

_INPUT_KEYS = frozenset({"glob", "codegen", "codegen-path", "packable"})


class CodegenKind(StrEnum):
    """Which codegen template, if any, applies to an input."""

    NONE = "none"
    ASSET_URL = "asset-url"
    URL_AND_SLICE = "url-and-slice"


@dataclass(frozen=True)
class InputConfig:
    """One ``[[inputs]]`` declaration.

    Compared by value: the manifest keeps a snapshot of it so a changed
    declaration can be told apart from changed file contents.
    ``codegen_path`` is kept as written (relative to the config folder) so
    snapshots do not depend on where the project is checked out.
    """

    glob: Glob
    codegen: CodegenKind = CodegenKind.NONE
    codegen_path: str | None = None
    packable: bool = False


@dataclass(frozen=True)
class IncludeConfig:
    """A config file or a directory to search for configs."""

    path: Path


@dataclass(frozen=True)
class Config:
    """Parsed assetsync.toml."""

    name: str
    file_path: Path
    base_path: Path
    includes: tuple[IncludeConfig, ...] = ()
    inputs: tuple[InputConfig, ...] = ()

    @property
    def folder(self) -> Path:
        """The directory containing this config file."""
        return self.file_path.parent

    def codegen_output(self, input_config: InputConfig) -> Path | None:
        """Absolute grouped-codegen output path for one of this config's inputs."""
        if input_config.codegen_path is None:
            return None
        return self.folder / input_config.codegen_path

    @classmethod
    def read_from_file(cls, path: Path) -> Config:
        path = path.resolve()
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise ConfigNotFoundError(path, "config file not found") from exc
        except OSError as exc:
            raise ConfigError(path, f"could not read config: {exc}") from exc

        try:
            data = tomllib.loads(text)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(path, f"invalid TOML: {exc}") from exc

        return parse_config(path, data)

    @classmethod
    def read_from_folder(cls, folder: Path) -> Config:
        return cls.read_from_file(folder / CONFIG_FILE)

    @classmethod
    def read_from_folder_or_file(cls, path: Path) -> Config:
        """Read ``path`` itself, or the config inside it if it is a directory."""
        if path.is_dir():
            return cls.read_from_folder(path)
        return cls.read_from_file(path)


def _expect(path: Path, value: Any, kind: type, what: str) -> Any:
    if not isinstance(value, kind):
        msg = f"'{what}' must be a {kind.__name__}, got {type(value).__name__}"
        raise ConfigError(path, msg)
    return value


def parse_input_config(path: Path, data: Any) -> InputConfig:
    """Build an InputConfig from its TOML table. ``path`` is used for errors."""
    table: dict[str, Any] = _expect(path, data, dict, "inputs")
    unknown = set(table) - _INPUT_KEYS
    if unknown:
        msg = f"unknown input keys: {', '.join(sorted(unknown))}"
        raise ConfigError(path, msg)
    if "glob" not in table:
        msg = f"input entry missing required 'glob' field: {table}"
        raise ConfigError(path, msg)

    pattern: str = _expect(path, table["glob"], str, "glob")
    try:
        glob = Glob(pattern)
    except ValueError as exc:
        raise ConfigError(path, str(exc)) from exc

    raw_codegen: str = _expect(path, table.get("codegen", "none"), str, "codegen")
    try:
        codegen = CodegenKind(raw_codegen)
    except ValueError as exc:
        choices = ", ".join(kind.value for kind in CodegenKind)
        msg = f"unknown codegen kind {raw_codegen!r} (expected one of: {choices})"
        raise ConfigError(path, msg) from exc

    codegen_path = table.get("codegen-path")
    if codegen_path is not None:
        _expect(path, codegen_path, str, "codegen-path")

    return InputConfig(
        glob=glob,
        codegen=codegen,
        codegen_path=codegen_path,
        packable=_expect(path, table.get("packable", False), bool, "packable"),
    )


def input_config_to_dict(input_config: InputConfig) -> dict[str, Any]:
    """Inverse of parse_input_config, omitting unset optional keys."""
    data: dict[str, Any] = {
        "glob": input_config.glob.pattern,
        "codegen": input_config.codegen.value,
        "packable": input_config.packable,
    }
    if input_config.codegen_path is not None:
        data["codegen-path"] = input_config.codegen_path
    return data


def parse_config(path: Path, data: dict[str, Any]) -> Config:
    """Build a Config from the parsed TOML document at ``path``."""
    folder = path.parent

    name: str = _expect(path, data.get("name", folder.name), str, "name")
    raw_base: str = _expect(path, data.get("base-path", "."), str, "base-path")

    includes: list[IncludeConfig] = []
    for entry in _expect(path, data.get("includes", []), list, "includes"):
        # Either a bare path or a table with a 'path' key
        if isinstance(entry, dict):
            if "path" not in entry:
                msg = f"include entry missing required 'path' field: {entry}"
                raise ConfigError(path, msg)
            entry = entry["path"]
        include_path: str = _expect(path, entry, str, "includes")
        includes.append(IncludeConfig(path=folder / include_path))

    inputs = [
        parse_input_config(path, entry)
        for entry in _expect(path, data.get("inputs", []), list, "inputs")
    ]

    return Config(
        name=name,
        file_path=path,
        base_path=folder / raw_base,
        includes=tuple(includes),
        inputs=tuple(inputs),
    )
