"""Config discovery: collect every config reachable from a root config."""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

from assetsync.exceptions import ConfigError, ConfigNotFoundError, SyncIOError
from assetsync.filesystem.config_file import Config

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)


class SearchKind(StrEnum):
    FILE = "file"
    DIRECTORY = "directory"


@dataclass(frozen=True)
class SearchPath:
    """A pending search and the config file whose ``includes`` queued it."""

    kind: SearchKind
    path: Path
    included_by: Path


def _classify(path: Path, included_by: Path) -> SearchPath:
    try:
        is_dir = path.is_dir()
        if not is_dir and not path.exists():
            raise FileNotFoundError(f"No such file or directory: '{path}'")
    except OSError as exc:
        raise SyncIOError(path, exc) from exc
    return SearchPath(SearchKind.DIRECTORY if is_dir else SearchKind.FILE, path, included_by)


def _include_searches(config: Config) -> list[SearchPath]:
    return [_classify(include.path, config.file_path) for include in config.includes]


def _child_directories(directory: Path) -> list[Path]:
    try:
        # is_dir follows symlinks, so linked folders are searched too
        return sorted(entry for entry in directory.iterdir() if entry.is_dir())
    except OSError as exc:
        raise SyncIOError(directory, exc) from exc


def _include_path(edges: dict[Path, set[Path]], start: Path, goal: Path) -> list[Path] | None:
    """Configs along an include path from ``start`` to ``goal``, if there is one."""
    parents: dict[Path, Path | None] = {start: None}
    stack = [start]
    while stack:
        node = stack.pop()
        if node == goal:
            path = [node]
            while (parent := parents[path[-1]]) is not None:
                path.append(parent)
            return path[::-1]
        for child in sorted(edges.get(node, ())):
            if child not in parents:
                parents[child] = node
                stack.append(child)
    return None


def discover_configs(root: Config) -> list[Config]:
    """Breadth-first search over ``includes`` starting at ``root``.

    A file include is read as a config unconditionally. A directory include
    is searched for a config of its own; when one is found the search stops
    there, otherwise each immediate subdirectory is queued. Returns the root
    followed by the discovered configs in discovery order.

    Raises ConfigError when a config (indirectly) includes itself.
    """
    configs = [root]
    loaded = {root.file_path}
    # Searched directories and the config found in each, if any
    searched: dict[Path, Path | None] = {root.folder.resolve(): root.file_path}
    edges: dict[Path, set[Path]] = {}
    to_search: deque[SearchPath] = deque(_include_searches(root))

    def link(parent: Path, child: Path) -> None:
        cycle = _include_path(edges, child, parent)
        if cycle is not None:
            rendered = " -> ".join(str(p) for p in (*cycle, child))
            raise ConfigError(child, f"include cycle detected: {rendered}")
        edges.setdefault(parent, set()).add(child)

    def register(config: Config, search: SearchPath) -> None:
        link(search.included_by, config.file_path)
        if config.file_path in loaded:
            logger.debug("Config %s was already included, skipping", config.file_path)
            return
        logger.debug("Found config %r at %s", config.name, config.file_path)
        loaded.add(config.file_path)
        configs.append(config)
        to_search.extend(_include_searches(config))

    while to_search:
        search = to_search.popleft()

        if search.kind is SearchKind.FILE:
            register(Config.read_from_file(search.path), search)
            continue

        directory = search.path.resolve()
        if directory in searched:
            owner = searched[directory]
            if owner is not None:
                link(search.included_by, owner)
            logger.debug("Directory %s was already searched, skipping", directory)
            continue

        try:
            config = Config.read_from_folder(search.path)
        except ConfigNotFoundError:
            searched[directory] = None
            logger.debug("No config in %s, searching subdirectories", search.path)
            to_search.extend(
                SearchPath(SearchKind.DIRECTORY, child, search.included_by)
                for child in _child_directories(search.path)
            )
            continue

        searched[directory] = config.file_path
        register(config, search)

    return configs
