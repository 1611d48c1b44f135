"""
Data models for level records.

Contains the value structures of the level hierarchy
(area -> sector -> room -> layer -> tile) and of the overworld map.
Each model is intentionally lightweight: no file-system or rendering logic.
The whole tree is rebuilt by the record store on every area change.
"""

from dataclasses import dataclass, field
from typing import Any, Optional, cast


# Tileset sheet geometry: 256 cells in a 16x16 grid of 16x16 pixel cells
TILE_SIZE = 16
TILESET_COLUMNS = 16
TILESET_CELL_COUNT = 256

# One screen is 16x12 tiles (256x192 pixels)
SCREEN_WIDTH_IN_TILES = 16
SCREEN_HEIGHT_IN_TILES = 12
SCREEN_WIDTH_IN_PIXELS = SCREEN_WIDTH_IN_TILES * TILE_SIZE
SCREEN_HEIGHT_IN_PIXELS = SCREEN_HEIGHT_IN_TILES * TILE_SIZE

MAX_OPACITY = 31

# Door coordinate meaning "undefined"
DOOR_UNDEFINED = 0xFF


# =============================================================================
# Room contents
# =============================================================================

@dataclass(frozen=True)
class Tile:
    """A single cell of a layer.

    `index` addresses a cell in the layer's tileset sheet:
    column = index % 16, row = index // 16.
    """
    index: int
    horizontal_flip: bool = False
    vertical_flip: bool = False

    def __post_init__(self) -> None:
        if not 0 <= self.index < TILESET_CELL_COUNT:
            raise ValueError(f"Tile index out of range: {self.index}")

    @property
    def tileset_column(self) -> int:
        return self.index % TILESET_COLUMNS

    @property
    def tileset_row(self) -> int:
        return self.index // TILESET_COLUMNS

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Tile":
        """Create Tile from a level dump dict."""
        return cls(
            index=int(data.get("index", 0)),
            horizontal_flip=bool(data.get("h", False)),
            vertical_flip=bool(data.get("v", False)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"index": self.index, "h": self.horizontal_flip, "v": self.vertical_flip}


@dataclass
class Layer:
    """Tile layer of a room.

    Width and height are always counted in tiles. Record sources that
    describe layers in screens go through `from_screens`, which applies
    the 16 (horizontal) and 12 (vertical) tiles-per-screen factors.
    """
    width: int
    height: int
    opacity: int = MAX_OPACITY
    z_index: int = 0
    tileset_pointer: int = 0
    collision_tileset_pointer: int = 0
    colors_per_palette: int = 16
    tiles: list[Tile] = field(default_factory=lambda: [])

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Invalid layer size: {self.width}x{self.height}")
        if not 0 <= self.opacity <= MAX_OPACITY:
            raise ValueError(f"Layer opacity out of range: {self.opacity}")
        if self.tiles and len(self.tiles) != self.tile_count:
            raise ValueError(
                f"Layer has {len(self.tiles)} tiles, expected {self.tile_count}"
            )

    @classmethod
    def from_screens(
        cls, width_in_screens: int, height_in_screens: int, **kwargs: Any
    ) -> "Layer":
        """Create a layer sized in screens."""
        return cls(
            width=width_in_screens * SCREEN_WIDTH_IN_TILES,
            height=height_in_screens * SCREEN_HEIGHT_IN_TILES,
            **kwargs,
        )

    @property
    def tile_count(self) -> int:
        return self.width * self.height

    @property
    def width_in_screens(self) -> int:
        return -(-self.width // SCREEN_WIDTH_IN_TILES)

    @property
    def height_in_screens(self) -> int:
        return -(-self.height // SCREEN_HEIGHT_IN_TILES)

    @property
    def opacity_factor(self) -> float:
        """Opacity as a 0.0-1.0 factor (31 is fully opaque)."""
        return self.opacity / 31.0

    def tile_position(self, index_on_level: int) -> tuple[int, int]:
        """Return (column, row) in tiles for a flat tile position."""
        return (index_on_level % self.width, index_on_level // self.width)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Layer":
        """Create Layer from a level dump dict (sizes in screens)."""
        raw_tiles: list[Any] = list(data.get("tiles", []))
        return cls.from_screens(
            int(data["width"]),
            int(data["height"]),
            opacity=int(data.get("opacity", MAX_OPACITY)),
            z_index=int(data.get("z_index", 0)),
            tileset_pointer=int(data.get("tileset_pointer", 0)),
            collision_tileset_pointer=int(data.get("collision_tileset_pointer", 0)),
            colors_per_palette=int(data.get("colors_per_palette", 16)),
            tiles=[Tile.from_dict(cast(dict[str, Any], t)) for t in raw_tiles],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "width": self.width_in_screens,
            "height": self.height_in_screens,
            "opacity": self.opacity,
            "z_index": self.z_index,
            "tileset_pointer": self.tileset_pointer,
            "collision_tileset_pointer": self.collision_tileset_pointer,
            "colors_per_palette": self.colors_per_palette,
            "tiles": [t.to_dict() for t in self.tiles],
        }


@dataclass(frozen=True)
class Door:
    """Room exit. Coordinates are in screens, 0xFF means undefined."""
    x_pos: int
    y_pos: int
    destination_room_pointer: int = 0

    @property
    def is_defined(self) -> bool:
        return self.x_pos != DOOR_UNDEFINED and self.y_pos != DOOR_UNDEFINED

    def screen_position(self) -> Optional[tuple[int, int]]:
        """Return the door's top-left pixel position, or None if undefined."""
        if not self.is_defined:
            return None
        return (self.x_pos * SCREEN_WIDTH_IN_PIXELS, self.y_pos * SCREEN_HEIGHT_IN_PIXELS)


@dataclass
class Room:
    """A single room; `room_metadata_ram_pointer` is its identity key."""
    room_metadata_ram_pointer: int
    area_index: int
    sector_index: int
    room_index: int
    area_name: str
    layers: list[Layer] = field(default_factory=lambda: [])
    doors: list[Door] = field(default_factory=lambda: [])
    palette_offset: int = 0
    graphic_tilesets_for_room: tuple[int, ...] = ()
    # Overlay of the owning sector, needed before its tilesets can be rendered
    overlay_id: int = 0

    @property
    def filename(self) -> str:
        """File stem used for interchange documents of this room."""
        return "room_%02X-%02X-%02X_%08X" % (
            self.area_index,
            self.sector_index,
            self.room_index,
            self.room_metadata_ram_pointer,
        )

    @property
    def max_layer_width(self) -> int:
        """Widest layer, in screens."""
        return max((layer.width_in_screens for layer in self.layers), default=1)

    @property
    def max_layer_height(self) -> int:
        """Tallest layer, in screens."""
        return max((layer.height_in_screens for layer in self.layers), default=1)

    @property
    def scene_size(self) -> tuple[int, int]:
        """Pixel size of the composed room."""
        return (
            self.max_layer_width * SCREEN_WIDTH_IN_PIXELS,
            self.max_layer_height * SCREEN_HEIGHT_IN_PIXELS,
        )

    def tileset_filename(self, layer: Layer) -> str:
        """File stem of the rasterized tileset a layer of this room uses.

        Rooms share a raster only when both the tileset and the room
        palette it is drawn with are the same.
        """
        return "tileset_%08X_%08X" % (layer.tileset_pointer, self.palette_offset)

    def tileset_filenames(self) -> list[str]:
        """Distinct tileset file stems in first-use layer order."""
        return list(dict.fromkeys(self.tileset_filename(layer) for layer in self.layers))

    def defined_doors(self) -> list[Door]:
        """Doors with both coordinates defined."""
        return [door for door in self.doors if door.is_defined]


# =============================================================================
# Area structure
# =============================================================================

@dataclass
class Sector:
    """Group of rooms that share one overlay."""
    sector_index: int
    overlay_id: int
    rooms: list[Room] = field(default_factory=lambda: [])
    name: Optional[str] = None

    @property
    def label(self) -> str:
        if self.name:
            return "%02d %s" % (self.sector_index, self.name)
        return "%02d" % self.sector_index


@dataclass(frozen=True)
class MapTile:
    """One unit of the overworld map grid (4 pixels per grid step)."""
    x_pos: int
    y_pos: int
    sector_index: int = 0
    room_index: int = 0
    is_blank: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MapTile":
        return cls(
            x_pos=int(data["x"]),
            y_pos=int(data["y"]),
            sector_index=int(data.get("sector", 0)),
            room_index=int(data.get("room", 0)),
            is_blank=bool(data.get("blank", False)),
        )


@dataclass
class Map:
    """Overworld map of an area."""
    area_index: int
    tiles: list[MapTile] = field(default_factory=lambda: [])


@dataclass
class Area:
    """Top-level level grouping."""
    area_index: int
    name: str
    sectors: list[Sector] = field(default_factory=lambda: [])
    map: Optional[Map] = None

    def __post_init__(self) -> None:
        if self.map is None:
            self.map = Map(area_index=self.area_index)

    @property
    def label(self) -> str:
        return "%02d %s" % (self.area_index, self.name)
