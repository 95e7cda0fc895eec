"""TOML reader/writer for assetsync-manifest.toml."""

from __future__ import annotations

import logging
import tomllib
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import tomli_w

from assetsync.config import MANIFEST_FILE
from assetsync.exceptions import ConfigError, ManifestError, SyncIOError
from assetsync.filesystem.asset_name import AssetName
from assetsync.filesystem.config_file import (
    InputConfig,
    input_config_to_dict,
    parse_input_config,
)

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImageSlice:
    """A rectangle inside a packed image."""

    min: tuple[int, int]
    size: tuple[int, int]


@dataclass
class InputManifest:
    """What the previous run knew about one input."""

    config: InputConfig
    hash: str | None = None
    id: int | None = None
    slice: ImageSlice | None = None


@dataclass
class Manifest:
    """Outcome of a sync run, keyed by asset name."""

    inputs: dict[AssetName, InputManifest] = field(default_factory=dict)

    @classmethod
    def read_from_folder(cls, folder: Path) -> Manifest:
        """Load the manifest from ``folder``; a missing file is an empty manifest."""
        manifest_path = folder / MANIFEST_FILE
        try:
            text = manifest_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.debug("No manifest at %s, starting fresh", manifest_path)
            return cls()
        except OSError as exc:
            raise ManifestError(manifest_path, f"could not read manifest: {exc}") from exc

        try:
            data = tomllib.loads(text)
        except tomllib.TOMLDecodeError as exc:
            raise ManifestError(manifest_path, f"invalid TOML: {exc}") from exc

        return parse_manifest(manifest_path, data)

    def to_toml(self) -> str:
        inputs: dict[str, Any] = {}
        for name in sorted(self.inputs):
            inputs[name.value] = _input_manifest_to_dict(self.inputs[name])
        return tomli_w.dumps({"inputs": inputs})

    def write_to_folder(self, folder: Path) -> bool:
        """Persist the manifest. Returns False when the file was already up to date."""
        manifest_path = folder / MANIFEST_FILE
        text = self.to_toml()
        try:
            if manifest_path.exists() and manifest_path.read_text(encoding="utf-8") == text:
                logger.debug("Manifest at %s is unchanged", manifest_path)
                return False
            manifest_path.write_text(text, encoding="utf-8")
        except OSError as exc:
            raise SyncIOError(manifest_path, exc) from exc
        return True


def _parse_pair(manifest_path: Path, value: Any, what: str) -> tuple[int, int]:
    if (
        not isinstance(value, list)
        or len(value) != 2
        or not all(isinstance(v, int) for v in value)
    ):
        msg = f"slice '{what}' must be a pair of integers, got {value!r}"
        raise ManifestError(manifest_path, msg)
    return (value[0], value[1])


def _parse_input_manifest(manifest_path: Path, name: str, data: Any) -> InputManifest:
    if not isinstance(data, dict):
        raise ManifestError(manifest_path, f"entry for {name!r} must be a table")
    if "config" not in data:
        raise ManifestError(manifest_path, f"entry for {name!r} is missing 'config'")

    try:
        config = parse_input_config(manifest_path, data["config"])
    except ConfigError as exc:
        raise ManifestError(manifest_path, f"entry for {name!r}: {exc}") from exc

    content_hash = data.get("hash")
    if content_hash is not None and not isinstance(content_hash, str):
        raise ManifestError(manifest_path, f"'hash' for {name!r} must be a string")
    asset_id = data.get("id")
    if asset_id is not None and (not isinstance(asset_id, int) or isinstance(asset_id, bool)):
        raise ManifestError(manifest_path, f"'id' for {name!r} must be an integer")

    image_slice = None
    raw_slice = data.get("slice")
    if raw_slice is not None:
        if not isinstance(raw_slice, dict):
            raise ManifestError(manifest_path, f"'slice' for {name!r} must be a table")
        image_slice = ImageSlice(
            min=_parse_pair(manifest_path, raw_slice.get("min"), "min"),
            size=_parse_pair(manifest_path, raw_slice.get("size"), "size"),
        )

    return InputManifest(config=config, hash=content_hash, id=asset_id, slice=image_slice)


def parse_manifest(manifest_path: Path, data: dict[str, Any]) -> Manifest:
    """Build a Manifest from a parsed TOML document."""
    raw_inputs = data.get("inputs", {})
    if not isinstance(raw_inputs, dict):
        raise ManifestError(manifest_path, "'inputs' must be a table")

    return Manifest(
        inputs={
            AssetName(name): _parse_input_manifest(manifest_path, name, entry)
            for name, entry in raw_inputs.items()
        }
    )


def _input_manifest_to_dict(entry: InputManifest) -> dict[str, Any]:
    data: dict[str, Any] = {}
    if entry.hash is not None:
        data["hash"] = entry.hash
    if entry.id is not None:
        data["id"] = entry.id
    if entry.slice is not None:
        data["slice"] = {"min": list(entry.slice.min), "size": list(entry.slice.size)}
    data["config"] = input_config_to_dict(entry.config)
    return data
