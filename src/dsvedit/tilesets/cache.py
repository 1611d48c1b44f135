"""
File-backed cache of rasterized tilesets.

A tileset raster is keyed by (game, area name, tileset filename) and lives
under the export folder. Rendering is expensive and needs the sector's
overlay resident, so both only happen on a cache miss. Files persist
across sessions and are never invalidated.
"""

import logging
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from ..errors import TilesetMaterializationError
from ..export_paths import ExportPaths
from ..levels.models import Layer, Room
from ..store.protocols import RecordStore, Renderer


class TilesetCache:
    """Ensures a tileset raster exists for a layer and loads it."""

    def __init__(self, paths: ExportPaths, store: RecordStore, renderer: Renderer):
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.paths = paths
        self.store = store
        self.renderer = renderer

    def tileset_path(self, room: Room, layer: Layer) -> Path:
        """Cache file location for a layer's tileset."""
        return self.paths.tileset_path(room, layer)

    def is_cached(self, room: Room, layer: Layer) -> bool:
        return self.tileset_path(room, layer).is_file()

    def ensure_tileset(self, room: Room, layer: Layer) -> Path:
        """Materialize the tileset file if missing and return its path.

        On a miss the owning sector's overlay is loaded and the external
        renderer writes the file. On a hit nothing else is called.
        """
        path = self.tileset_path(room, layer)
        if path.is_file():
            self.logger.debug(f"Tileset cache hit: {path.name}")
            return path

        self.logger.info(f"Rendering tileset {room.tileset_filename(layer)} for {room.area_name}")
        path.parent.mkdir(parents=True, exist_ok=True)
        self.store.load_overlay(room.overlay_id)
        self.renderer.render_tileset(
            layer.tileset_pointer,
            room.palette_offset,
            room.graphic_tilesets_for_room,
            layer.colors_per_palette,
            layer.collision_tileset_pointer,
            path,
        )
        if not path.is_file():
            raise TilesetMaterializationError(
                f"Renderer did not produce tileset {path}"
            )
        return path

    def get_tileset(self, room: Room, layer: Layer) -> Image.Image:
        """Return the layer's tileset as an RGBA image, rendering it if needed.

        Raises:
            TilesetMaterializationError: If the file cannot be produced or read
        """
        path = self.ensure_tileset(room, layer)
        try:
            with Image.open(path) as image:
                return image.convert("RGBA")
        except (UnidentifiedImageError, OSError) as e:
            raise TilesetMaterializationError(f"Unreadable tileset {path}: {e}") from e

    def ensure_tilesets_exist(self, room: Room) -> dict[str, Path]:
        """Materialize every layer's tileset of a room.

        Returns:
            Mapping of tileset filename to raster path, in first-use order
        """
        result: dict[str, Path] = {}
        for layer in room.layers:
            name = room.tileset_filename(layer)
            if name not in result:
                result[name] = self.ensure_tileset(room, layer)
        return result
