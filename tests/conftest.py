"""Shared test fixtures for assetsync."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from tests.helpers import RecordingStrategy, write_config, write_image

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture
def strategy() -> RecordingStrategy:
    return RecordingStrategy()


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """A root config with two PNGs under sprites/ and asset-url codegen."""
    root = tmp_path / "project"
    write_config(
        root,
        'name = "game"\n\n'
        "[[inputs]]\n"
        'glob = "sprites/**/*.png"\n'
        'codegen = "asset-url"\n',
    )
    write_image(root / "sprites" / "hero.png", b"hero")
    write_image(root / "sprites" / "enemy.png", b"enemy")
    return root.resolve()
