"""Upload target registry."""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING

from assetsync.exceptions import NoAuthError
from assetsync.upload.content_folder import ContentFolderUploadStrategy
from assetsync.upload.roblox import RobloxUploadStrategy

if TYPE_CHECKING:
    from assetsync.config import Settings
    from assetsync.upload.base import UploadStrategy


class SyncTarget(StrEnum):
    """Where ``assetsync sync`` sends assets."""

    ROBLOX = "roblox"
    CONTENT_FOLDER = "content-folder"


def get_strategy(target: SyncTarget, settings: Settings, auth: str | None = None) -> UploadStrategy:
    """Create the upload strategy for ``target``.

    ``auth`` overrides ``settings.auth``. Raises NoAuthError if the target
    needs a credential and none is available.
    """
    if target is SyncTarget.ROBLOX:
        credential = auth or settings.auth
        if not credential:
            raise NoAuthError(target.value)
        return RobloxUploadStrategy.from_settings(credential, settings)
    return ContentFolderUploadStrategy()


def list_targets() -> list[str]:
    """Return the names of the supported targets."""
    return [target.value for target in SyncTarget]
