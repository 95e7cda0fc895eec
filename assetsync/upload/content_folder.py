"""Upload strategy that copies assets into a local content folder."""

from __future__ import annotations

from assetsync.exceptions import UploadError
from assetsync.upload.base import UploadData, UploadResponse


class ContentFolderUploadStrategy:
    # TODO: locate the local install's content folder and copy assets into it
    def upload(self, data: UploadData) -> UploadResponse:
        raise UploadError(data.name.value, "uploading to a content folder is not implemented")

    def close(self) -> None:
        return None
