"""Shared fixtures: in-memory record store, counting renderer and sample levels."""

import io
from collections import Counter
from pathlib import Path
from typing import Callable, Optional, Sequence

import pytest
from PIL import Image

from dsvedit.export_paths import ExportPaths
from dsvedit.levels.models import Area, Door, Layer, Map, MapTile, Room, Sector, Tile
from dsvedit.maps.compositor import MAP_SCENE_HEIGHT, MAP_SCENE_WIDTH
from dsvedit.settings import AppSettings
from dsvedit.store.protocols import AreaHeader


def coordinate_tileset() -> Image.Image:
    """256x256 sheet where pixel (x, y) is (x, y, 0, 255)."""
    image = Image.new("RGBA", (256, 256))
    image.putdata([(x, y, 0, 255) for y in range(256) for x in range(256)])
    return image


class FakeRenderer:
    """Renderer that writes coordinate-encoded tilesets and counts calls."""

    def __init__(self) -> None:
        self.tileset_calls: list[tuple] = []
        self.map_calls: list[Map] = []
        self.produce_file = True

    def render_tileset(
        self,
        tileset_pointer: int,
        palette_offset: int,
        graphic_tilesets: Sequence[int],
        colors_per_palette: int,
        collision_tileset_pointer: int,
        output_path: Path,
    ) -> None:
        self.tileset_calls.append(
            (
                tileset_pointer,
                palette_offset,
                tuple(graphic_tilesets),
                colors_per_palette,
                collision_tileset_pointer,
                Path(output_path),
            )
        )
        if self.produce_file:
            coordinate_tileset().save(output_path, format="PNG")

    def render_map(self, area_map: Map) -> bytes:
        self.map_calls.append(area_map)
        buffer = io.BytesIO()
        Image.new("RGBA", (MAP_SCENE_WIDTH, MAP_SCENE_HEIGHT), (0, 0, 64, 255)).save(
            buffer, format="PNG"
        )
        return buffer.getvalue()


class FakeRecordStore:
    """In-memory record store that counts every call."""

    def __init__(self, area_builders: dict[int, Callable[[], Area]], names: dict[int, str]):
        self.area_builders = area_builders
        self.names = names
        self.overlay_loads: list[int] = []
        self.loaded_overlays: set[int] = set()
        self.calls: Counter[str] = Counter()
        self.updated_rooms: list[Room] = []
        self.written_roms: list[Path] = []
        self.opened: Optional[Path] = None

    def open_and_extract_rom(self, rom_path: Path, folder: Path) -> None:
        self.calls["open_and_extract_rom"] += 1
        self.opened = Path(folder)

    def open_directory(self, folder: Path) -> None:
        self.calls["open_directory"] += 1
        self.opened = Path(folder)

    def load_overlay(self, overlay_id: int) -> None:
        self.overlay_loads.append(overlay_id)
        self.loaded_overlays.add(overlay_id)

    def constant_overlays(self) -> list[int]:
        return [0, 1]

    def list_areas(self) -> list[AreaHeader]:
        return [AreaHeader(index, self.names[index]) for index in sorted(self.area_builders)]

    def load_area(self, area_index: int) -> Area:
        self.calls["load_area"] += 1
        return self.area_builders[area_index]()

    def update_room(self, room: Room) -> None:
        self.updated_rooms.append(room)

    def commit_file_changes(self) -> None:
        self.calls["commit_file_changes"] += 1

    def write_to_rom(self, out_path: Path) -> None:
        self.written_roms.append(Path(out_path))
        Path(out_path).write_bytes(b"NDS")


def build_layer(
    width_in_screens: int = 1,
    height_in_screens: int = 1,
    tiles: Optional[list[Tile]] = None,
    **kwargs,
) -> Layer:
    """Layer filled with the given tiles, or with tile index = position % 256."""
    layer = Layer.from_screens(width_in_screens, height_in_screens, **kwargs)
    if tiles is None:
        tiles = [Tile(i % 256) for i in range(layer.tile_count)]
    layer.tiles = tiles
    return layer


def build_room(
    pointer: int = 0x020F6DA4,
    area_index: int = 0,
    sector_index: int = 0,
    room_index: int = 0,
    area_name: str = "Castle",
    layers: Optional[list[Layer]] = None,
    doors: Optional[list[Door]] = None,
    palette_offset: int = 0x20,
    overlay_id: int = 10,
) -> Room:
    if layers is None:
        layers = [build_layer(tileset_pointer=0x02200000)]
    return Room(
        room_metadata_ram_pointer=pointer,
        area_index=area_index,
        sector_index=sector_index,
        room_index=room_index,
        area_name=area_name,
        layers=layers,
        doors=doors or [],
        palette_offset=palette_offset,
        graphic_tilesets_for_room=(3, 4),
        overlay_id=overlay_id,
    )


def build_castle() -> Area:
    """Area 0: two sectors (2 and 3 rooms) and a map with one blank tile."""
    sectors = []
    for sector_index, room_count in ((0, 2), (1, 3)):
        rooms = [
            build_room(
                pointer=0x02100000 + sector_index * 0x100 + room_index * 0x10,
                sector_index=sector_index,
                room_index=room_index,
                overlay_id=10 + sector_index,
            )
            for room_index in range(room_count)
        ]
        sectors.append(Sector(sector_index=sector_index, overlay_id=10 + sector_index, rooms=rooms))
    area_map = Map(
        area_index=0,
        tiles=[
            MapTile(0, 0, sector_index=0, room_index=1),
            MapTile(1, 0, sector_index=1, room_index=2),
            MapTile(2, 0, is_blank=True),
        ],
    )
    return Area(area_index=0, name="Castle", sectors=sectors, map=area_map)


def build_village() -> Area:
    """Area 1: a single sector with a single room."""
    room = build_room(pointer=0x02300000, area_index=1, area_name="Village", overlay_id=20)
    return Area(
        area_index=1,
        name="Village",
        sectors=[Sector(sector_index=0, overlay_id=20, rooms=[room])],
        map=Map(area_index=1, tiles=[MapTile(5, 5, sector_index=0, room_index=0)]),
    )


@pytest.fixture
def renderer() -> FakeRenderer:
    return FakeRenderer()


@pytest.fixture
def store() -> FakeRecordStore:
    return FakeRecordStore({0: build_castle, 1: build_village}, {0: "Castle", 1: "Village"})


@pytest.fixture
def export_paths(tmp_path: Path) -> ExportPaths:
    return ExportPaths(tmp_path / "export", "dos")


@pytest.fixture
def settings(tmp_path: Path) -> AppSettings:
    """Settings stored in a throwaway INI file."""
    return AppSettings(profile="test", settings_file=tmp_path / "settings.ini")


@pytest.fixture
def game_folder(tmp_path: Path) -> Path:
    """Extracted folder with a Dawn of Sorrow header."""
    folder = tmp_path / "game"
    (folder / "ftc").mkdir(parents=True)
    (folder / "ftc" / "ndsheader.bin").write_bytes(b"CASTLEVANIA1ACVE" + bytes(16))
    return folder
