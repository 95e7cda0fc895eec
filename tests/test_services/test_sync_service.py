"""Tests for upload decisions and the sync session lifecycle."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import pytest

from assetsync.config import MANIFEST_FILE
from assetsync.exceptions import UploadError
from assetsync.filesystem.asset_name import AssetName
from assetsync.filesystem.config_file import CodegenKind, InputConfig
from assetsync.filesystem.glob import Glob
from assetsync.filesystem.manifest import InputManifest, Manifest
from assetsync.services.sync_service import (
    SyncDecision,
    SyncSession,
    decide,
    hash_content,
    is_image_asset,
    run_sync,
)
from tests.helpers import PNG_BYTES, RecordingStrategy, write_config, write_image

if TYPE_CHECKING:
    from pathlib import Path

_CONFIG = InputConfig(glob=Glob("sprites/**/*.png"), codegen=CodegenKind.ASSET_URL)
_HERO = AssetName("sprites/hero.png")
_ENEMY = AssetName("sprites/enemy.png")


def _hero_hash() -> str:
    return hash_content(PNG_BYTES + b"hero")


def _write_manifest(folder: Path, entries: dict[AssetName, InputManifest]) -> None:
    Manifest(inputs=entries).write_to_folder(folder)


def _session(folder: Path) -> SyncSession:
    session = SyncSession.from_path(folder)
    session.discover_configs()
    session.discover_inputs()
    return session


class TestDecide:
    def test_no_previous_entry(self) -> None:
        assert decide(None, "h", _CONFIG) is SyncDecision.NEW_INPUT

    def test_hash_differs(self) -> None:
        previous = InputManifest(config=_CONFIG, hash="old", id=5)
        assert decide(previous, "new", _CONFIG) is SyncDecision.CONTENTS_CHANGED

    def test_never_uploaded(self) -> None:
        previous = InputManifest(config=_CONFIG, hash="h", id=None)
        assert decide(previous, "h", _CONFIG) is SyncDecision.NEVER_UPLOADED

    def test_config_changed(self) -> None:
        previous = InputManifest(config=_CONFIG, hash="h", id=5)
        changed = InputConfig(glob=_CONFIG.glob, codegen=CodegenKind.URL_AND_SLICE)
        assert decide(previous, "h", changed) is SyncDecision.CONFIG_CHANGED

    def test_unchanged(self) -> None:
        previous = InputManifest(config=_CONFIG, hash="h", id=5)
        # Equal by value, not identity
        current = InputConfig(glob=Glob("sprites/**/*.png"), codegen=CodegenKind.ASSET_URL)
        decision = decide(previous, "h", current)
        assert decision is SyncDecision.UNCHANGED
        assert not decision.needs_upload


class TestDecisionTableEndToEnd:
    """Each row of the decision table, driven through a real session."""

    @pytest.mark.parametrize(
        ("previous", "expect_upload"),
        [
            (None, True),
            (InputManifest(config=_CONFIG, hash="stale", id=7), True),
            (InputManifest(config=_CONFIG, hash="<current>", id=None), True),
            (
                InputManifest(config=InputConfig(glob=_CONFIG.glob), hash="<current>", id=7),
                True,
            ),
            (InputManifest(config=_CONFIG, hash="<current>", id=7), False),
        ],
        ids=["new", "contents-changed", "never-uploaded", "config-changed", "unchanged"],
    )
    def test_row(
        self,
        project: Path,
        strategy: RecordingStrategy,
        previous: InputManifest | None,
        expect_upload: bool,
    ) -> None:
        if previous is not None:
            if previous.hash == "<current>":
                previous = InputManifest(
                    config=previous.config, hash=_hero_hash(), id=previous.id
                )
            _write_manifest(project, {_HERO: previous})

        session = _session(project)
        session.sync(strategy)
        hero = session.inputs[_HERO]

        assert (_HERO.value in strategy.uploaded_names) is expect_upload
        assert hero.hash == _hero_hash()
        if expect_upload:
            assert hero.id == 1000 + strategy.uploaded_names.index(_HERO.value)
        else:
            assert hero.id == 7


class TestScenarios:
    def test_first_run_uploads_everything(
        self, project: Path, strategy: RecordingStrategy
    ) -> None:
        result = run_sync(project, strategy)

        assert strategy.uploaded_names == [_ENEMY.value, _HERO.value]
        assert result.stats.uploaded == 2
        manifest = Manifest.read_from_folder(project)
        assert set(manifest.inputs) == {_ENEMY, _HERO}
        assert manifest.inputs[_ENEMY].id == 1000
        assert manifest.inputs[_HERO].id == 1001
        assert manifest.inputs[_HERO].hash == _hero_hash()
        assert manifest.inputs[_HERO].config == _CONFIG

    def test_second_run_uploads_nothing_and_keeps_manifest(
        self, project: Path, strategy: RecordingStrategy
    ) -> None:
        run_sync(project, strategy)
        manifest_text = (project / MANIFEST_FILE).read_text()

        second = RecordingStrategy(first_id=5000)
        result = run_sync(project, second)

        assert second.uploads == []
        assert result.stats.reused == 2
        assert (project / MANIFEST_FILE).read_text() == manifest_text

    def test_changed_file_is_the_only_upload(
        self, project: Path, strategy: RecordingStrategy
    ) -> None:
        run_sync(project, strategy)
        write_image(project / "sprites" / "hero.png", b"hero v2")

        second = RecordingStrategy(first_id=5000)
        run_sync(project, second)

        assert second.uploaded_names == [_HERO.value]
        manifest = Manifest.read_from_folder(project)
        assert manifest.inputs[_HERO].id == 5000
        assert manifest.inputs[_ENEMY].id == 1000

    def test_upload_is_logged_with_previous_and_new_id(
        self, project: Path, strategy: RecordingStrategy, caplog: pytest.LogCaptureFixture
    ) -> None:
        run_sync(project, strategy)
        write_image(project / "sprites" / "hero.png", b"hero v2")

        with caplog.at_level(logging.INFO, logger="assetsync.services.sync_service"):
            run_sync(project, RecordingStrategy(first_id=5000))

        messages = [r.getMessage() for r in caplog.records if r.levelno == logging.INFO]
        assert any("previous ID 1001, new ID 5000" in m for m in messages)


class TestSoftWarnings:
    def test_packable_inputs_are_skipped_with_warning(
        self, tmp_path: Path, strategy: RecordingStrategy, caplog: pytest.LogCaptureFixture
    ) -> None:
        write_config(tmp_path, '[[inputs]]\nglob = "*.png"\npackable = true\n')
        write_image(tmp_path / "a.png")

        with caplog.at_level(logging.WARNING):
            run_sync(tmp_path, strategy)

        assert strategy.uploads == []
        assert any("Packing images is not supported" in r.getMessage() for r in caplog.records)
        manifest = Manifest.read_from_folder(tmp_path)
        assert manifest.inputs[AssetName("a.png")].id is None

    def test_non_images_are_skipped_with_warning(
        self, tmp_path: Path, strategy: RecordingStrategy, caplog: pytest.LogCaptureFixture
    ) -> None:
        write_config(tmp_path, '[[inputs]]\nglob = "data/*"\n')
        (tmp_path / "data").mkdir()
        (tmp_path / "data" / "notes.txt").write_text("hi")

        with caplog.at_level(logging.WARNING):
            result = run_sync(tmp_path, strategy)

        assert strategy.uploads == []
        assert result.stats.skipped == 1
        assert any("Didn't know what to do" in r.getMessage() for r in caplog.records)


class TestUploadFailure:
    def test_failure_aborts_and_writes_partial_manifest(self, project: Path) -> None:
        first = RecordingStrategy()
        run_sync(project, first)
        write_image(project / "sprites" / "enemy.png", b"enemy v2")
        write_image(project / "sprites" / "hero.png", b"hero v2")
        write_image(project / "sprites" / "new.png", b"new")

        failing = RecordingStrategy(first_id=9000, fail_on={"sprites/hero.png"})
        with pytest.raises(UploadError, match="simulated failure"):
            run_sync(project, failing)

        manifest = Manifest.read_from_folder(project)
        # Finished before the failure
        assert manifest.inputs[_ENEMY].id == 9000
        # Failed input keeps what the previous run knew
        assert manifest.inputs[_HERO].id == 1001
        assert manifest.inputs[_HERO].hash == _hero_hash()
        # Never reached and never uploaded before
        assert manifest.inputs[AssetName("sprites/new.png")].id is None

    def test_failure_skips_codegen(self, project: Path) -> None:
        failing = RecordingStrategy(fail_on={"sprites/enemy.png"})
        with pytest.raises(UploadError):
            run_sync(project, failing)
        assert not (project / "sprites" / "hero.lua").exists()


def test_session_reads_existing_manifest(project: Path) -> None:
    _write_manifest(project, {_HERO: InputManifest(config=_CONFIG, hash="h", id=3)})
    session = SyncSession.from_path(project / "assetsync.toml")
    assert session.original_manifest.inputs[_HERO].id == 3
    assert session.root_config.folder == project


@pytest.mark.parametrize(
    ("name", "expected"),
    [("a.png", True), ("a.JPG", True), ("a.jpeg", True), ("a.gif", False), ("png", False)],
)
def test_is_image_asset(tmp_path: Path, name: str, expected: bool) -> None:
    assert is_image_asset(tmp_path / name) is expected
