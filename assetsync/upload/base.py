"""Base protocol and data classes for upload strategies."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from assetsync.filesystem.asset_name import AssetName


@dataclass
class UploadData:
    """An asset ready to be sent to a store."""

    name: AssetName
    contents: bytes
    hash: str


@dataclass
class UploadResponse:
    """Result of a successful upload."""

    id: int


@runtime_checkable
class UploadStrategy(Protocol):
    """Protocol for the mechanism that stores asset bytes and returns an identifier."""

    def upload(self, data: UploadData) -> UploadResponse:
        """Store the asset. Raises UploadError on failure."""
        ...

    def close(self) -> None:
        """Release any resources held by the strategy."""
        ...
