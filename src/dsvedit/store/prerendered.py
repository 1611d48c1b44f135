"""Renderer over rasters exported together with a level dump.

The dump tool writes one PNG per (tileset, palette) pair and one PNG per
area map next to `levels.json`:

    <folder>/graphics/tilesets/tileset_<pointer>_<palette>.png
    <folder>/graphics/maps/area_<index>.png
"""

import io
import logging
from pathlib import Path
from typing import Sequence

from PIL import Image, UnidentifiedImageError

from ..errors import StoreError
from ..levels.models import Map

TILESET_RASTER_FOLDER = Path("graphics") / "tilesets"
MAP_RASTER_FOLDER = Path("graphics") / "maps"


class PrerenderedRenderer:
    """Serves pre-rendered rasters from an extracted folder."""

    def __init__(self, folder: Path):
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.folder = Path(folder)

    def tileset_source(self, tileset_pointer: int, palette_offset: int) -> Path:
        name = "tileset_%08X_%08X.png" % (tileset_pointer, palette_offset)
        return self.folder / TILESET_RASTER_FOLDER / name

    def map_source(self, area_index: int) -> Path:
        return self.folder / MAP_RASTER_FOLDER / ("area_%02X.png" % area_index)

    def render_tileset(
        self,
        tileset_pointer: int,
        palette_offset: int,
        graphic_tilesets: Sequence[int],
        colors_per_palette: int,
        collision_tileset_pointer: int,
        output_path: Path,
    ) -> None:
        """Copy the matching tileset raster to output_path as RGBA PNG.

        Raises:
            StoreError: If no raster was exported for this tileset
        """
        source = self.tileset_source(tileset_pointer, palette_offset)
        try:
            with Image.open(source) as image:
                image.convert("RGBA").save(output_path, format="PNG")
        except FileNotFoundError as e:
            raise StoreError(f"No pre-rendered tileset at {source}") from e
        except UnidentifiedImageError as e:
            raise StoreError(f"Unreadable tileset raster {source}") from e
        self.logger.debug(f"Tileset {source.name} -> {output_path}")

    def render_map(self, area_map: Map) -> bytes:
        """Return the encoded map raster of an area.

        Raises:
            StoreError: If no raster was exported for this area
        """
        source = self.map_source(area_map.area_index)
        if not source.is_file():
            raise StoreError(f"No pre-rendered map at {source}")
        data = source.read_bytes()
        # Reject garbage early so the error names the file
        try:
            with Image.open(io.BytesIO(data)) as image:
                image.verify()
        except (UnidentifiedImageError, OSError) as e:
            raise StoreError(f"Unreadable map raster {source}") from e
        return data
