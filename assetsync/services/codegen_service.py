"""Codegen: write Lua files that map asset paths to uploaded asset URLs."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import PurePath
from typing import TYPE_CHECKING

from assetsync.codegen.lua_ast import LuaTable, render_return
from assetsync.codegen.templates import CODEGEN_HEADER, render_template
from assetsync.exceptions import SyncIOError
from assetsync.filesystem.config_file import CodegenKind

if TYPE_CHECKING:
    from pathlib import Path

    from assetsync.codegen.lua_ast import Expression
    from assetsync.services.input_discovery import SyncInput

logger = logging.getLogger(__name__)

GENERATED_SUFFIX = ".lua"


class ConflictKind(StrEnum):
    FILE_AS_FOLDER = "file_as_folder"
    NAME_TAKEN = "name_taken"


@dataclass
class InsertConflict:
    """Why ``path`` could not be placed in the tree at ``segment``."""

    kind: ConflictKind
    segment: str
    path: Path


@dataclass
class Folder:
    children: dict[str, Folder | SyncInput] = field(default_factory=dict)


def relative_segments(input_: SyncInput) -> list[str]:
    """Path of ``input_`` below its config's base path, as collapsed segments.

    Raises ValueError if the input does not live under the base path.
    """
    relative = PurePath(input_.path).relative_to(input_.config.base_path)

    segments: list[str] = []
    for part in relative.parts:
        if part == ".":
            continue
        if part == "..":
            assert segments, f"{input_.path} climbs above {input_.config.base_path}"
            segments.pop()
        else:
            segments.append(part)
    return segments


class NamespaceTree:
    """Nested folders built from relative paths; leaves are inputs.

    ``insert`` never modifies the tree when it reports a conflict.
    """

    def __init__(self) -> None:
        self.root = Folder()

    def insert(self, segments: list[str], input_: SyncInput) -> InsertConflict | None:
        *folders, file_name = segments
        leaf = PurePath(file_name).stem

        # Check the existing part of the path before creating anything
        node = self.root
        for segment in folders:
            child = node.children.get(segment)
            if child is None:
                break
            if not isinstance(child, Folder):
                return InsertConflict(ConflictKind.FILE_AS_FOLDER, segment, input_.path)
            node = child
        else:
            if leaf in node.children:
                return InsertConflict(ConflictKind.NAME_TAKEN, leaf, input_.path)

        # This is an in-memory `mkdir -p` followed by `touch`
        node = self.root
        for segment in folders:
            child = node.children.setdefault(segment, Folder())
            assert isinstance(child, Folder)
            node = child
        node.children[leaf] = input_
        return None

    def render(self) -> LuaTable:
        table = _render_node(self.root)
        assert isinstance(table, LuaTable)
        return table


def _render_node(node: Folder | SyncInput) -> Expression | None:
    if isinstance(node, Folder):
        table = LuaTable()
        for name in sorted(node.children):
            rendered = _render_node(node.children[name])
            if rendered is not None:
                table.add_entry(name, rendered)
        return table
    return render_template(node.input_config.codegen, node.id, node.slice)


def build_tree(inputs: list[SyncInput]) -> NamespaceTree:
    """Insert inputs in path order; conflicting paths are logged and skipped."""
    tree = NamespaceTree()
    for input_ in sorted(inputs, key=lambda i: i.path.as_posix()):
        try:
            segments = relative_segments(input_)
        except ValueError:
            logger.error(
                "Input %s is not inside its base path %s, skipping codegen for it",
                input_.path,
                input_.config.base_path,
            )
            continue
        if not segments:
            logger.error("Input %s has an empty path below its base path", input_.path)
            continue

        conflict = tree.insert(segments, input_)
        if conflict is None:
            continue
        if conflict.kind is ConflictKind.FILE_AS_FOLDER:
            logger.error(
                "A path tried to traverse through a file as if it were a folder: %s",
                conflict.path,
            )
            logger.error(
                "The path segment '%s' is already used by a previous input.",
                conflict.segment,
            )
        else:
            logger.error(
                "The name '%s' for %s is already used by a previous input, skipping it",
                conflict.segment,
                conflict.path,
            )
    return tree


def generated_text(expression: Expression) -> str:
    return f"{CODEGEN_HEADER}\n{render_return(expression)}"


def write_generated(path: Path, expression: Expression) -> bool:
    """Write a generated file, skipping the write when the text is unchanged."""
    text = generated_text(expression)
    try:
        if path.exists() and path.read_text(encoding="utf-8") == text:
            logger.debug("Generated code at %s is up to date", path)
            return False
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    except OSError as exc:
        raise SyncIOError(path, exc) from exc
    logger.debug("Generated code at %s", path)
    return True


def codegen_grouped(output_path: Path, inputs: list[SyncInput]) -> None:
    """Write one file holding nested tables that mirror the inputs' relative paths."""
    write_generated(output_path, build_tree(inputs).render())


def codegen_individual(inputs: list[SyncInput]) -> None:
    """Write one file next to each uploaded input that has a codegen kind."""
    for input_ in inputs:
        if input_.input_config.codegen is CodegenKind.NONE:
            continue
        expression = render_template(input_.input_config.codegen, input_.id, input_.slice)
        if expression is None:
            logger.debug("Skipping codegen for %s because it was not uploaded", input_.path)
            continue
        write_generated(input_.path.with_suffix(GENERATED_SUFFIX), expression)


def perform_codegen(output_path: Path | None, inputs: list[SyncInput]) -> None:
    if output_path is not None:
        codegen_grouped(output_path, inputs)
    else:
        codegen_individual(inputs)
