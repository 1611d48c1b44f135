"""Tests for level record models and game detection."""

from pathlib import Path

import pytest

from dsvedit.errors import UnknownGameError
from dsvedit.levels import (
    Area,
    Door,
    Layer,
    MapTile,
    Room,
    Sector,
    Tile,
    detect_game,
)


class TestTile:
    """Tile addressing into the 16x16 tileset grid."""

    def test_cell_of_index(self) -> None:
        """Tile index maps to column index % 16, row index // 16."""
        assert (Tile(0).tileset_column, Tile(0).tileset_row) == (0, 0)
        assert (Tile(17).tileset_column, Tile(17).tileset_row) == (1, 1)
        assert (Tile(255).tileset_column, Tile(255).tileset_row) == (15, 15)

    def test_index_out_of_range(self) -> None:
        """Indices outside 0-255 are rejected."""
        with pytest.raises(ValueError):
            Tile(256)
        with pytest.raises(ValueError):
            Tile(-1)

    def test_dict_round_trip(self) -> None:
        """Dump dicts rebuild the same tile."""
        tile = Tile(42, horizontal_flip=True)
        assert Tile.from_dict(tile.to_dict()) == tile

    def test_immutable(self) -> None:
        """Tiles are frozen values."""
        tile = Tile(1)
        with pytest.raises(AttributeError):
            tile.index = 2  # type: ignore[misc]


class TestLayer:
    """Layer sizes, positions and derived names."""

    def test_from_screens_converts_to_tiles(self) -> None:
        """Screen sizes become 16 x 12 tiles per screen."""
        layer = Layer.from_screens(2, 3)
        assert (layer.width, layer.height) == (32, 36)
        assert (layer.width_in_screens, layer.height_in_screens) == (2, 3)
        assert layer.tile_count == 32 * 36

    def test_tile_position_uses_width_in_tiles(self) -> None:
        """Flat positions wrap at the width in tiles."""
        layer = Layer.from_screens(2, 1)
        assert layer.tile_position(0) == (0, 0)
        assert layer.tile_position(31) == (31, 0)
        assert layer.tile_position(32) == (0, 1)

    def test_opacity_factor(self) -> None:
        """Opacity 31 is opaque and 0 is invisible."""
        assert Layer(width=16, height=12, opacity=31).opacity_factor == 1.0
        assert Layer(width=16, height=12, opacity=0).opacity_factor == 0.0

    def test_invalid_opacity(self) -> None:
        """Opacity above 31 is rejected."""
        with pytest.raises(ValueError):
            Layer(width=16, height=12, opacity=32)

    def test_tile_count_must_match(self) -> None:
        """Tile data must cover width x height."""
        with pytest.raises(ValueError):
            Layer(width=2, height=2, tiles=[Tile(0)] * 3)

    def test_from_dict_reads_screens(self) -> None:
        """Dump layers are sized in screens."""
        data = {
            "width": 1,
            "height": 1,
            "opacity": 20,
            "z_index": 2,
            "tileset_pointer": 5,
            "tiles": [{"index": 3, "h": True, "v": False}] * 192,
        }
        layer = Layer.from_dict(data)
        assert (layer.width, layer.height) == (16, 12)
        assert layer.tiles[0] == Tile(3, horizontal_flip=True)
        assert layer.to_dict()["width"] == 1


class TestDoor:
    """Undefined door coordinates."""

    def test_defined_door_position(self) -> None:
        """Door coordinates are in screens."""
        assert Door(2, 1).screen_position() == (512, 192)

    def test_undefined_door_is_skipped(self) -> None:
        """0xFF marks an undefined door coordinate."""
        door = Door(0xFF, 3)
        assert not door.is_defined
        assert door.screen_position() is None

    def test_room_defined_doors(self) -> None:
        """Rooms only list doors with both coordinates defined."""
        room = Room(1, 0, 0, 0, "Castle", doors=[Door(0, 0), Door(1, 0xFF)])
        assert room.defined_doors() == [Door(0, 0)]


class TestRoom:
    """Room identity and scene geometry."""

    def test_filename(self) -> None:
        """Room file stems encode area, sector, room and pointer."""
        room = Room(0x020F6DA4, 1, 2, 10, "Castle")
        assert room.filename == "room_01-02-0A_020F6DA4"

    def test_scene_size_uses_largest_layer(self) -> None:
        """The composed room is as large as its largest layer."""
        room = Room(
            1, 0, 0, 0, "Castle",
            layers=[Layer.from_screens(1, 1), Layer.from_screens(3, 2)],
        )
        assert (room.max_layer_width, room.max_layer_height) == (3, 2)
        assert room.scene_size == (768, 384)

    def test_tileset_filename_uses_room_palette(self) -> None:
        """Tileset file stems combine the layer's tileset and the room's palette."""
        layer = Layer(width=16, height=12, tileset_pointer=0x0220ABCD)
        room = Room(1, 0, 0, 0, "Castle", layers=[layer], palette_offset=0x40)
        assert room.tileset_filename(layer) == "tileset_0220ABCD_00000040"

    def test_tileset_filenames_in_first_use_order(self) -> None:
        """Each tileset file is listed once, in layer order."""
        layers = [
            Layer(width=16, height=12, tileset_pointer=2),
            Layer(width=16, height=12, tileset_pointer=1),
            Layer(width=16, height=12, tileset_pointer=2),
        ]
        room = Room(1, 0, 0, 0, "Castle", layers=layers)
        assert room.tileset_filenames() == ["tileset_00000002_00000000", "tileset_00000001_00000000"]

    def test_scene_size_without_layers(self) -> None:
        """A room without layers is one screen large."""
        assert Room(1, 0, 0, 0, "Castle").scene_size == (256, 192)


class TestAreaStructure:
    """Labels and defaults of areas, sectors and map tiles."""

    def test_area_creates_empty_map(self) -> None:
        """Areas get an empty map for their own index."""
        area = Area(area_index=3, name="Garden")
        assert area.map is not None
        assert area.map.area_index == 3
        assert area.label == "03 Garden"

    def test_sector_label(self) -> None:
        """Sector labels carry the index and optional name."""
        assert Sector(sector_index=1, overlay_id=0).label == "01"
        assert Sector(sector_index=1, overlay_id=0, name="Hall").label == "01 Hall"

    def test_map_tile_from_dict(self) -> None:
        """Map tiles read short dump keys."""
        tile = MapTile.from_dict({"x": 4, "y": 5, "sector": 1, "room": 2})
        assert tile == MapTile(4, 5, sector_index=1, room_index=2, is_blank=False)


class TestGameDetection:
    """Header signature detection."""

    @pytest.mark.parametrize(
        "signature,code",
        [(b"CASTLEVANIA1", "dos"), (b"CASTLEVANIA2", "por"), (b"CASTLEVANIA3", "ooe")],
    )
    def test_known_signatures(self, tmp_path: Path, signature: bytes, code: str) -> None:
        """Each game is recognized from its header signature."""
        header = tmp_path / "ndsheader.bin"
        header.write_bytes(signature + b"ACVE")
        assert detect_game(header).code == code

    def test_unknown_signature(self, tmp_path: Path) -> None:
        """Other cartridges raise UnknownGameError."""
        header = tmp_path / "ndsheader.bin"
        header.write_bytes(b"POKEMON DIAM")
        with pytest.raises(UnknownGameError):
            detect_game(header)
