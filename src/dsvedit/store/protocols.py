"""
Interfaces of the external collaborators used by the level core.

The record store owns the extracted game files and the ROM write-back; the
renderer rasterizes tilesets and overworld maps. Both are provided by the
host application. Renderer calls are treated as deterministic functions of
their arguments, which is what makes the file-backed tileset cache safe.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, Sequence

from ..levels.models import Area, Map, Room


@dataclass(frozen=True)
class AreaHeader:
    """Area entry listed before the area itself is loaded."""
    area_index: int
    name: str

    @property
    def label(self) -> str:
        return "%02d %s" % (self.area_index, self.name)


class RecordStore(Protocol):
    """Access to the extracted game image."""

    def open_and_extract_rom(self, rom_path: Path, folder: Path) -> None:
        ...

    def open_directory(self, folder: Path) -> None:
        ...

    def load_overlay(self, overlay_id: int) -> None:
        """Make an overlay resident. Must be idempotent."""
        ...

    def constant_overlays(self) -> list[int]:
        ...

    def list_areas(self) -> list[AreaHeader]:
        ...

    def load_area(self, area_index: int) -> Area:
        """Build a fresh record tree for one area."""
        ...

    def update_room(self, room: Room) -> None:
        """Stage edited room contents for the next commit."""
        ...

    def commit_file_changes(self) -> None:
        ...

    def write_to_rom(self, out_path: Path) -> None:
        ...


class Renderer(Protocol):
    """Rasterizer for tilesets and overworld maps."""

    def render_tileset(
        self,
        tileset_pointer: int,
        palette_offset: int,
        graphic_tilesets: Sequence[int],
        colors_per_palette: int,
        collision_tileset_pointer: int,
        output_path: Path,
    ) -> None:
        """Write a 256x256 tileset PNG to output_path."""
        ...

    def render_map(self, area_map: Map) -> bytes:
        """Return the whole-area map raster as encoded image bytes."""
        ...
