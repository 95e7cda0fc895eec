"""Shared helpers for building asset projects on disk."""

from __future__ import annotations

from typing import TYPE_CHECKING

from assetsync.exceptions import UploadError
from assetsync.upload.base import UploadData, UploadResponse

if TYPE_CHECKING:
    from pathlib import Path

# Smallest valid PNG header; contents only matter for hashing
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 8


class RecordingStrategy:
    """Upload strategy that hands out sequential IDs and remembers every call."""

    def __init__(self, first_id: int = 1000, fail_on: set[str] | None = None) -> None:
        self.next_id = first_id
        self.fail_on = fail_on or set()
        self.uploads: list[UploadData] = []
        self.closed = False

    def upload(self, data: UploadData) -> UploadResponse:
        if data.name.value in self.fail_on:
            raise UploadError(data.name.value, "simulated failure")
        self.uploads.append(data)
        asset_id = self.next_id
        self.next_id += 1
        return UploadResponse(id=asset_id)

    def close(self) -> None:
        self.closed = True

    @property
    def uploaded_names(self) -> list[str]:
        return [data.name.value for data in self.uploads]


def write_config(folder: Path, text: str) -> Path:
    """Write assetsync.toml into ``folder`` (created if needed)."""
    folder.mkdir(parents=True, exist_ok=True)
    path = folder / "assetsync.toml"
    path.write_text(text, encoding="utf-8")
    return path


def write_image(path: Path, payload: bytes = b"") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(PNG_BYTES + payload)
    return path
