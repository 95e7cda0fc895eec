"""Codegen templates for each CodegenKind."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from assetsync.codegen.lua_ast import LuaRaw, LuaString, LuaTable
from assetsync.filesystem.config_file import CodegenKind

if TYPE_CHECKING:
    from assetsync.codegen.lua_ast import Expression
    from assetsync.filesystem.manifest import ImageSlice

CODEGEN_HEADER = "-- This file was @generated by assetsync. It is not intended for manual editing."
ASSET_URL_PREFIX = "rbxassetid://"


def asset_url(asset_id: int) -> str:
    return f"{ASSET_URL_PREFIX}{asset_id}"


@dataclass
class AssetUrlTemplate:
    """CodegenKind.ASSET_URL: just the asset URL string."""

    id: int

    def to_lua(self) -> Expression:
        return LuaString(asset_url(self.id))


@dataclass
class UrlAndSliceTemplate:
    """CodegenKind.URL_AND_SLICE: image properties ready to assign to an image object.

    Offset and size are only emitted when the asset lives in a packed image.
    """

    id: int
    slice: ImageSlice | None = None

    def to_lua(self) -> Expression:
        table = LuaTable()
        table.add_entry("Image", asset_url(self.id))

        if self.slice is not None:
            offset = self.slice.min
            size = self.slice.size
            table.add_entry("ImageRectOffset", LuaRaw(f"Vector2.new({offset[0]}, {offset[1]})"))
            table.add_entry("ImageRectSize", LuaRaw(f"Vector2.new({size[0]}, {size[1]})"))

        return table


def render_template(
    kind: CodegenKind, asset_id: int | None, image_slice: ImageSlice | None = None
) -> Expression | None:
    """Pick the template for ``kind``; None when there is nothing to emit.

    Inputs that were never uploaded have no ID and produce no code.
    """
    if asset_id is None:
        return None
    if kind is CodegenKind.ASSET_URL:
        return AssetUrlTemplate(asset_id).to_lua()
    if kind is CodegenKind.URL_AND_SLICE:
        return UrlAndSliceTemplate(asset_id, image_slice).to_lua()
    return None
