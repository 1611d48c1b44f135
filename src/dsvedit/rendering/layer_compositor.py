"""Room layer composition.

Turns the flat tile sequences of a room's layers into one raster per layer,
placing each 16x16 tileset cell at its grid position with its flips
applied. Layers keep their paint depth (-z_index) and opacity so a view
can stack them, or `ComposedRoom.flatten` blends them into one image.
"""

import logging
from dataclasses import dataclass, field

from PIL import Image

from ..levels.models import TILE_SIZE, Layer, Room, Tile
from ..tilesets.cache import TilesetCache


@dataclass
class ComposedLayer:
    """Rendered raster of one layer.

    Attributes:
        layer: Source layer record
        image: RGBA raster, layer.width x layer.height tiles
        z_value: Paint depth, higher values paint on top
        opacity: 0.0-1.0 opacity applied when stacking
    """
    layer: Layer
    image: Image.Image
    z_value: int
    opacity: float


@dataclass
class ComposedRoom:
    """All composed layers of a room in record order."""
    room: Room
    size: tuple[int, int]
    layers: list[ComposedLayer] = field(default_factory=lambda: [])

    def paint_order(self) -> list[ComposedLayer]:
        """Layers from back to front.

        Sorting is stable, so layers with equal depth keep record order and
        the later one paints on top.
        """
        return sorted(self.layers, key=lambda composed: composed.z_value)

    def flatten(self) -> Image.Image:
        """Alpha-blend all layers into a single RGBA image of the room size."""
        canvas = Image.new("RGBA", self.size, (0, 0, 0, 0))
        for composed in self.paint_order():
            layer_image = composed.image
            if composed.opacity < 1.0:
                layer_image = _apply_opacity(layer_image, composed.opacity)

            overlay = Image.new("RGBA", self.size, (0, 0, 0, 0))
            overlay.paste(layer_image, (0, 0))
            canvas = Image.alpha_composite(canvas, overlay)
        return canvas


def _apply_opacity(image: Image.Image, opacity: float) -> Image.Image:
    """Scale the alpha channel of an RGBA image."""
    result = image.copy()
    alpha = result.getchannel("A").point(lambda a: int(round(a * opacity)))
    result.putalpha(alpha)
    return result


class LayerCompositor:
    """Builds layer rasters for rooms from their tileset sheets."""

    def __init__(self, tileset_cache: TilesetCache):
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.tileset_cache = tileset_cache

    @staticmethod
    def cut_tile(tileset: Image.Image, tile: Tile) -> Image.Image:
        """Cut a tile's cell out of its tileset and apply its flips.

        Mirrors commute, so applying horizontal before vertical is arbitrary.
        """
        left = tile.tileset_column * TILE_SIZE
        top = tile.tileset_row * TILE_SIZE
        tile_gfx = tileset.crop((left, top, left + TILE_SIZE, top + TILE_SIZE))

        if tile.horizontal_flip:
            tile_gfx = tile_gfx.transpose(Image.Transpose.FLIP_LEFT_RIGHT)
        if tile.vertical_flip:
            tile_gfx = tile_gfx.transpose(Image.Transpose.FLIP_TOP_BOTTOM)
        return tile_gfx

    def compose_layer(self, layer: Layer, tileset: Image.Image) -> Image.Image:
        """Place every tile of a layer on a transparent raster."""
        image = Image.new(
            "RGBA", (layer.width * TILE_SIZE, layer.height * TILE_SIZE), (0, 0, 0, 0)
        )
        for index_on_level, tile in enumerate(layer.tiles):
            x_on_level, y_on_level = layer.tile_position(index_on_level)
            image.paste(
                self.cut_tile(tileset, tile), (x_on_level * TILE_SIZE, y_on_level * TILE_SIZE)
            )
        return image

    def compose_room(self, room: Room) -> ComposedRoom:
        """Compose every layer of a room.

        May render missing tilesets through the cache. The room records
        are only read.

        Raises:
            TilesetMaterializationError: If a layer's tileset cannot be produced
        """
        composed = ComposedRoom(room=room, size=room.scene_size)
        tilesets: dict[str, Image.Image] = {}

        for layer in room.layers:
            name = room.tileset_filename(layer)
            tileset = tilesets.get(name)
            if tileset is None:
                tileset = self.tileset_cache.get_tileset(room, layer)
                tilesets[name] = tileset

            composed.layers.append(
                ComposedLayer(
                    layer=layer,
                    image=self.compose_layer(layer, tileset),
                    z_value=-layer.z_index,
                    opacity=layer.opacity_factor,
                )
            )

        self.logger.debug(
            f"Composed {len(composed.layers)} layer(s) for {room.filename}"
        )
        return composed
