"""Sync session: discovery, upload decisions, manifest and codegen for one run."""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

from assetsync.exceptions import SyncError, SyncIOError
from assetsync.filesystem.config_file import Config
from assetsync.filesystem.manifest import InputManifest, Manifest
from assetsync.services.codegen_service import perform_codegen
from assetsync.services.config_discovery import discover_configs
from assetsync.services.input_discovery import discover_inputs
from assetsync.upload.base import UploadData

if TYPE_CHECKING:
    from pathlib import Path

    from assetsync.filesystem.asset_name import AssetName
    from assetsync.filesystem.config_file import InputConfig
    from assetsync.services.input_discovery import SyncInput
    from assetsync.upload.base import UploadStrategy

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = frozenset({".png", ".jpg", ".jpeg"})


class SyncDecision(StrEnum):
    """Why an input is or is not uploaded, checked in this order."""

    NEW_INPUT = "new_input"
    CONTENTS_CHANGED = "contents_changed"
    NEVER_UPLOADED = "never_uploaded"
    CONFIG_CHANGED = "config_changed"
    UNCHANGED = "unchanged"

    @property
    def needs_upload(self) -> bool:
        return self is not SyncDecision.UNCHANGED


@dataclass(frozen=True)
class InputCompatibility:
    """Inputs with equal compatibility can be processed together."""

    packable: bool


@dataclass
class SyncStats:
    uploaded: int = 0
    reused: int = 0
    skipped: int = 0


def hash_content(content: bytes) -> str:
    """Compute SHA-256 hash of content."""
    return hashlib.sha256(content).hexdigest()


def is_image_asset(path: Path) -> bool:
    return path.suffix.lower() in IMAGE_EXTENSIONS


def decide(
    previous: InputManifest | None, content_hash: str, input_config: InputConfig
) -> SyncDecision:
    """Compare an input's current state with the previous run's manifest entry."""
    if previous is None:
        return SyncDecision.NEW_INPUT
    if previous.hash != content_hash:
        return SyncDecision.CONTENTS_CHANGED
    if previous.id is None:
        return SyncDecision.NEVER_UPLOADED
    # TODO: a codegen-only change should not need a re-upload
    if previous.config != input_config:
        return SyncDecision.CONFIG_CHANGED
    return SyncDecision.UNCHANGED


class SyncSession:
    """All of the state for a single run of ``assetsync sync``.

    ``original_manifest`` is the manifest as it was when the run started and
    is only ever read; the new manifest is built from ``inputs`` at the end.
    """

    def __init__(self, root_config: Config, original_manifest: Manifest) -> None:
        # Always at least one element long; the first entry is the root config
        self.configs: list[Config] = [root_config]
        self.original_manifest = original_manifest
        self.inputs: dict[AssetName, SyncInput] = {}
        # Inputs the sync pass has finished with, uploaded or not
        self.processed: set[AssetName] = set()
        self.stats = SyncStats()

    @classmethod
    def from_path(cls, fuzzy_config_path: Path) -> SyncSession:
        """Start a session from a config file or a folder containing one."""
        logger.debug("Starting new sync session")
        root_config = Config.read_from_folder_or_file(fuzzy_config_path)
        logger.debug("Starting from config %r", root_config.name)
        return cls(root_config, Manifest.read_from_folder(root_config.folder))

    @property
    def root_config(self) -> Config:
        return self.configs[0]

    def discover_configs(self) -> None:
        """Locate every config connected to the root config through ``includes``."""
        self.configs = discover_configs(self.root_config)

    def discover_inputs(self) -> None:
        """Find all files on the filesystem referenced as inputs by our configs."""
        self.inputs = discover_inputs(self.configs)

    def sync(self, strategy: UploadStrategy) -> SyncStats:
        groups: dict[InputCompatibility, list[AssetName]] = {}
        for name, input_ in self.inputs.items():
            compatibility = InputCompatibility(packable=input_.input_config.packable)
            groups.setdefault(compatibility, []).append(name)

        for compatibility in sorted(groups, key=lambda c: c.packable):
            names = sorted(groups[compatibility])
            if compatibility.packable:
                logger.warning(
                    "Packing images is not supported yet, skipping %d packable input(s)",
                    len(names),
                )
                self.stats.skipped += len(names)
                self.processed.update(names)
                continue

            for name in names:
                input_ = self.inputs[name]
                logger.debug("Syncing %s", name)
                if is_image_asset(input_.path):
                    self.sync_unpackable_image(strategy, name)
                else:
                    logger.warning("Didn't know what to do with asset %s", input_.path)
                    self.stats.skipped += 1
                self.processed.add(name)

        # TODO: clean up generated code for inputs that existed in the previous
        # manifest but are gone now
        return self.stats

    def sync_unpackable_image(self, strategy: UploadStrategy, name: AssetName) -> None:
        input_ = self.inputs[name]
        try:
            contents = input_.path.read_bytes()
        except OSError as exc:
            raise SyncIOError(input_.path, exc) from exc
        content_hash = hash_content(contents)

        previous = self.original_manifest.inputs.get(name)
        decision = decide(previous, content_hash, input_.input_config)
        logger.debug("Decision for %s: %s", name, decision)

        if not decision.needs_upload:
            assert previous is not None
            input_.hash = previous.hash
            input_.id = previous.id
            self.stats.reused += 1
            return

        previous_id = previous.id if previous is not None else None
        response = strategy.upload(UploadData(name=name, contents=contents, hash=content_hash))
        logger.info(
            "Uploaded %s (%s): previous ID %s, new ID %d",
            name,
            decision,
            previous_id if previous_id is not None else "none",
            response.id,
        )
        input_.hash = content_hash
        input_.id = response.id
        self.stats.uploaded += 1

    def build_manifest(self, carry_forward_pending: bool = False) -> Manifest:
        """Project the current inputs into a new manifest.

        With ``carry_forward_pending`` (used after an aborted sync), inputs the
        sync pass never reached keep their previous manifest entry so no
        knowledge about already-uploaded assets is lost.
        """
        manifest = Manifest()
        for name, input_ in self.inputs.items():
            previous = self.original_manifest.inputs.get(name)
            if carry_forward_pending and name not in self.processed and previous is not None:
                manifest.inputs[name] = previous
                continue
            manifest.inputs[name] = InputManifest(
                config=input_.input_config,
                hash=input_.hash,
                id=input_.id,
                slice=None,
            )
        return manifest

    def write_manifest(self, carry_forward_pending: bool = False) -> None:
        logger.debug("Generating new manifest")
        self.build_manifest(carry_forward_pending).write_to_folder(self.root_config.folder)

    def codegen(self) -> None:
        logger.debug("Starting codegen")
        groups: dict[Path | None, list[SyncInput]] = {}
        for name in sorted(self.inputs):
            input_ = self.inputs[name]
            output_path = input_.config.codegen_output(input_.input_config)
            logger.debug("Using codegen '%s' for %s", input_.input_config.codegen, name)
            groups.setdefault(output_path, []).append(input_)

        for output_path in sorted(groups, key=lambda p: (p is not None, str(p))):
            perform_codegen(output_path, groups[output_path])


@dataclass
class SyncResult:
    session: SyncSession
    stats: SyncStats = field(default_factory=SyncStats)


def run_sync(fuzzy_config_path: Path, strategy: UploadStrategy) -> SyncResult:
    """Run the whole pipeline: discover, sync, persist the manifest, generate code.

    If syncing fails part way, a manifest covering the finished inputs is
    still written before the error propagates.
    """
    session = SyncSession.from_path(fuzzy_config_path)
    session.discover_configs()
    session.discover_inputs()
    logger.debug(
        "Discovered %d config(s) and %d input(s)", len(session.configs), len(session.inputs)
    )

    try:
        stats = session.sync(strategy)
    except SyncError:
        logger.debug("Sync aborted, writing partial manifest")
        session.write_manifest(carry_forward_pending=True)
        raise

    session.write_manifest()
    session.codegen()
    return SyncResult(session=session, stats=stats)
