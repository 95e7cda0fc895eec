"""Upload strategy for the Roblox image asset store."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import httpx

from assetsync.exceptions import UploadError
from assetsync.upload.base import UploadData, UploadResponse

if TYPE_CHECKING:
    from assetsync.config import Settings

logger = logging.getLogger(__name__)

IMAGE_ASSET_TYPE_ID = 13
AUTH_COOKIE_NAME = ".ROBLOSECURITY"
CSRF_HEADER = "X-CSRF-Token"
UPLOAD_DESCRIPTION = "Uploaded by assetsync."


class RobloxUploadStrategy:
    """Uploads images as decals and returns the backing image asset ID.

    The store rejects the first write of a session with HTTP 403 and hands
    out a CSRF token in the response headers; the request is repeated once
    with that token attached.
    """

    def __init__(
        self,
        auth: str,
        upload_url: str,
        timeout: float = 60.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.upload_url = upload_url
        self.csrf_token: str | None = None
        self.client = httpx.Client(
            cookies={AUTH_COOKIE_NAME: auth},
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_settings(cls, auth: str, settings: Settings) -> RobloxUploadStrategy:
        return cls(auth, settings.upload_url, timeout=settings.upload_timeout)

    def close(self) -> None:
        """Close the HTTP client."""
        self.client.close()

    def __enter__(self) -> RobloxUploadStrategy:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def _post(self, data: UploadData) -> httpx.Response:
        headers = {"Content-Type": "application/octet-stream"}
        if self.csrf_token is not None:
            headers[CSRF_HEADER] = self.csrf_token
        return self.client.post(
            self.upload_url,
            params={
                "assetTypeId": IMAGE_ASSET_TYPE_ID,
                "name": data.name.value,
                "description": UPLOAD_DESCRIPTION,
            },
            headers=headers,
            content=data.contents,
        )

    def upload(self, data: UploadData) -> UploadResponse:
        logger.info("Uploading %s to Roblox", data.name)
        try:
            resp = self._post(data)
            if resp.status_code == 403 and CSRF_HEADER in resp.headers:
                logger.debug("Retrying upload of %s with a fresh CSRF token", data.name)
                self.csrf_token = resp.headers[CSRF_HEADER]
                resp = self._post(data)
            resp.raise_for_status()
        except httpx.HTTPError as exc:
            raise UploadError(data.name.value, str(exc)) from exc

        try:
            body: dict[str, Any] = resp.json()
        except ValueError as exc:
            raise UploadError(data.name.value, "response was not valid JSON") from exc

        if not body.get("Success", False):
            message = body.get("Message") or "store reported failure"
            raise UploadError(data.name.value, str(message))

        backing_id = body.get("BackingAssetId")
        if not isinstance(backing_id, int) or isinstance(backing_id, bool):
            raise UploadError(data.name.value, "response did not include BackingAssetId")

        logger.info("Uploaded %s to ID %d", data.name, backing_id)
        return UploadResponse(id=backing_id)
