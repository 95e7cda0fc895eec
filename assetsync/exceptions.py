"""Sync error taxonomy.

Convention:
- Every failure that should stop a sync run and be shown to the user derives
  from ``SyncError``. The CLI catches it, prints ``str(exc)`` and exits 1.
- Soft problems (unsupported packing, unknown asset kinds, codegen tree
  conflicts) are logged, never raised.
- Anything else (assertions, programming errors) propagates unchanged.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path


class SyncError(Exception):
    """Base class for errors that abort a sync run."""


class ConfigError(SyncError):
    """A config file could not be read, parsed, or traversed."""

    def __init__(self, path: Path, message: str) -> None:
        self.path = path
        super().__init__(f"{path}: {message}")


class ConfigNotFoundError(ConfigError):
    """No config file exists at the searched location."""


class ManifestError(SyncError):
    """The manifest file exists but could not be read or parsed."""

    def __init__(self, path: Path, message: str) -> None:
        self.path = path
        super().__init__(f"{path}: {message}")


class OverlappingGlobsError(SyncError):
    """Two discovered files resolved to the same asset name."""

    def __init__(self, path: Path, other: Path | None = None) -> None:
        self.path = path
        self.other = other
        msg = f"Path {path} was described by more than one glob"
        if other is not None:
            msg += f" (conflicts with {other})"
        super().__init__(msg)


class SyncIOError(SyncError):
    """A filesystem operation failed."""

    def __init__(self, path: Path, source: OSError) -> None:
        self.path = path
        self.source = source
        super().__init__(f"I/O error at {path}: {source}")


class NoAuthError(SyncError):
    """The selected upload target needs a credential and none was given."""

    def __init__(self, target: str) -> None:
        super().__init__(f"Syncing to '{target}' requires an authentication credential")


class UploadError(SyncError):
    """The upload strategy failed to store an asset."""

    def __init__(self, name: str, message: str) -> None:
        self.name = name
        super().__init__(f"Failed to upload {name}: {message}")
