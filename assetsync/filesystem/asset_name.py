"""Canonical, path-independent asset names."""

from __future__ import annotations

import os
import posixpath
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, order=True)
class AssetName:
    """An asset's path relative to the folder of the config that owns it.

    Always uses ``/`` separators and has ``.`` and ``..`` segments collapsed,
    so the same file found through different spellings of its path gets the
    same name.
    """

    value: str

    @classmethod
    def from_paths(cls, root: Path, asset: Path) -> AssetName:
        relative = os.path.relpath(asset, root)
        return cls(posixpath.normpath(relative.replace(os.sep, "/")))

    def __str__(self) -> str:
        return self.value
