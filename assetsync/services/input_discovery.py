"""Input discovery: expand config globs into a flat, uniquely named input set."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from assetsync.exceptions import OverlappingGlobsError, SyncIOError
from assetsync.filesystem.asset_name import AssetName

if TYPE_CHECKING:
    from collections.abc import Iterator

    from assetsync.filesystem.config_file import Config, InputConfig
    from assetsync.filesystem.manifest import ImageSlice

logger = logging.getLogger(__name__)


@dataclass
class SyncInput:
    """A file selected by some config's input declaration during this run."""

    # Absolute path on disk
    path: Path
    # (position in the session's config list, position in that config's inputs)
    config_index: tuple[int, int]
    config: Config
    input_config: InputConfig
    hash: str | None = None
    id: int | None = None
    slice: ImageSlice | None = None


def _raise_walk_error(exc: OSError) -> None:
    raise SyncIOError(Path(exc.filename or "."), exc) from exc


def walk_files(base: Path) -> Iterator[Path]:
    """Yield every file under ``base`` in sorted order; ``base`` may be a file."""
    if base.is_file():
        yield base
        return
    if not base.is_dir():
        logger.debug("Input search path %s does not exist", base)
        return
    for root, dirs, files in os.walk(base, onerror=_raise_walk_error):
        dirs.sort()
        for filename in sorted(files):
            yield Path(root) / filename


def discover_inputs(configs: list[Config]) -> dict[AssetName, SyncInput]:
    """Match every input declaration of every config against the filesystem.

    Raises OverlappingGlobsError when two files resolve to the same asset
    name, whether they come from one config or from different ones.
    """
    inputs: dict[AssetName, SyncInput] = {}

    for config_index, config in enumerate(configs):
        folder = config.folder

        for input_index, input_config in enumerate(config.inputs):
            base_path = folder / input_config.glob.prefix
            logger.debug(
                "Searching for inputs in '%s' matching '%s'", base_path, input_config.glob
            )

            for path in walk_files(base_path):
                name = AssetName.from_paths(folder, path)
                if not input_config.glob.is_match(name.value):
                    continue

                logger.debug("Found input %s", name)
                existing = inputs.get(name)
                if existing is not None:
                    raise OverlappingGlobsError(existing.path, path)

                inputs[name] = SyncInput(
                    path=path,
                    config_index=(config_index, input_index),
                    config=config,
                    input_config=input_config,
                )

    return inputs
