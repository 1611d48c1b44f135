"""Overworld map composition.

The whole-area map raster comes from the external renderer. On top of it
every map tile becomes an interactive unit placed on a 4 pixel grid.
"""

import io
import logging
from dataclasses import dataclass, field

from PIL import Image

from ..levels.models import Map, MapTile
from ..store.protocols import Renderer

# Map grid step in pixels
MAP_UNIT_SPACING = 4
# Units are one pixel larger than the grid step so neighbours overlap by one pixel
MAP_UNIT_SIZE = MAP_UNIT_SPACING + 1

MAP_GRID_WIDTH = 64
MAP_GRID_HEIGHT = 48
MAP_SCENE_WIDTH = MAP_GRID_WIDTH * MAP_UNIT_SPACING + 1
MAP_SCENE_HEIGHT = MAP_GRID_HEIGHT * MAP_UNIT_SPACING + 1


@dataclass(frozen=True)
class MapUnit:
    """Interactive map cell.

    Holds the plain map tile values rather than a reference to any room, so
    a unit can outlive the record tree it was built from.
    """
    map_tile: MapTile

    @property
    def pixel_x(self) -> int:
        return self.map_tile.x_pos * MAP_UNIT_SPACING

    @property
    def pixel_y(self) -> int:
        return self.map_tile.y_pos * MAP_UNIT_SPACING

    @property
    def bounding_rect(self) -> tuple[int, int, int, int]:
        """(x, y, width, height) in map scene pixels."""
        return (self.pixel_x, self.pixel_y, MAP_UNIT_SIZE, MAP_UNIT_SIZE)

    @property
    def is_interactive(self) -> bool:
        return not self.map_tile.is_blank

    def contains(self, x: int, y: int) -> bool:
        return (
            self.pixel_x <= x < self.pixel_x + MAP_UNIT_SIZE
            and self.pixel_y <= y < self.pixel_y + MAP_UNIT_SIZE
        )


@dataclass
class MapScene:
    """Map background plus its units in paint order (later units on top)."""
    background: Image.Image
    units: list[MapUnit] = field(default_factory=lambda: [])
    size: tuple[int, int] = (MAP_SCENE_WIDTH, MAP_SCENE_HEIGHT)

    def interactive_units(self) -> list[MapUnit]:
        return [unit for unit in self.units if unit.is_interactive]


class MapCompositor:
    """Builds the map scene of an area."""

    def __init__(self, renderer: Renderer):
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.renderer = renderer

    def build(self, area_map: Map) -> MapScene:
        """Render the map background and create one unit per map tile.

        Blank tiles still get a unit so the layout is complete; they are
        simply never interactive.
        """
        raster_bytes = self.renderer.render_map(area_map)
        with Image.open(io.BytesIO(raster_bytes)) as raster:
            background = raster.convert("RGBA")

        scene = MapScene(background=background)
        scene.units = [MapUnit(map_tile) for map_tile in area_map.tiles]

        self.logger.debug(
            f"Built map for area {area_map.area_index}: {len(scene.units)} units, "
            f"{len(scene.interactive_units())} interactive"
        )
        return scene
