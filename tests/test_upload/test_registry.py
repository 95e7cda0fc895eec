"""Tests for upload target selection."""

from __future__ import annotations

import pytest

from assetsync.config import Settings
from assetsync.exceptions import NoAuthError, UploadError
from assetsync.filesystem.asset_name import AssetName
from assetsync.upload.base import UploadData
from assetsync.upload.content_folder import ContentFolderUploadStrategy
from assetsync.upload.registry import SyncTarget, get_strategy, list_targets
from assetsync.upload.roblox import RobloxUploadStrategy


def _settings(**overrides: object) -> Settings:
    return Settings(_env_file=None, **overrides)  # type: ignore[call-arg]


class TestGetStrategy:
    def test_roblox_requires_credential(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("ASSETSYNC_AUTH", raising=False)
        with pytest.raises(NoAuthError, match="requires an authentication credential"):
            get_strategy(SyncTarget.ROBLOX, _settings())

    def test_roblox_uses_explicit_credential(self) -> None:
        strategy = get_strategy(SyncTarget.ROBLOX, _settings(), auth="cookie")
        assert isinstance(strategy, RobloxUploadStrategy)
        strategy.close()

    def test_roblox_falls_back_to_settings(self) -> None:
        settings = _settings(auth="from-env", upload_url="https://example.com/upload")
        strategy = get_strategy(SyncTarget.ROBLOX, settings)
        assert isinstance(strategy, RobloxUploadStrategy)
        assert strategy.upload_url == "https://example.com/upload"
        strategy.close()

    def test_content_folder_needs_no_credential(self) -> None:
        strategy = get_strategy(SyncTarget.CONTENT_FOLDER, _settings())
        assert isinstance(strategy, ContentFolderUploadStrategy)


def test_content_folder_upload_is_not_implemented() -> None:
    data = UploadData(name=AssetName("a.png"), contents=b"", hash="h")
    with pytest.raises(UploadError, match="not implemented"):
        ContentFolderUploadStrategy().upload(data)


def test_list_targets() -> None:
    assert list_targets() == ["roblox", "content-folder"]


def test_settings_read_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ASSETSYNC_AUTH", "env-cookie")
    monkeypatch.setenv("ASSETSYNC_UPLOAD_TIMEOUT", "5")
    settings = _settings()
    assert settings.auth == "env-cookie"
    assert settings.upload_timeout == 5.0
