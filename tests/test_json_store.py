"""Tests for the level dump record store."""

from pathlib import Path
from typing import Any

import orjson
import pytest

from dsvedit.errors import StoreError
from dsvedit.levels.models import Tile
from dsvedit.store import AreaHeader, JsonRecordStore, LevelDumpSchema, LEVEL_DUMP_FILENAME


def sample_dump() -> dict[str, Any]:
    tiles = [{"index": i % 256, "h": False, "v": False} for i in range(16 * 12)]
    return {
        "constant_overlays": [0, 1],
        "areas": [
            {
                "index": 0,
                "name": "Castle",
                "sectors": [
                    {
                        "index": 0,
                        "overlay": 10,
                        "name": "Entrance",
                        "rooms": [
                            {
                                "pointer": 0x020F6DA4,
                                "palette_offset": 0x20,
                                "graphic_tilesets": [3, 4],
                                "layers": [
                                    {
                                        "width": 1,
                                        "height": 1,
                                        "opacity": 31,
                                        "z_index": 0,
                                        "tileset_pointer": 0x100,
                                        "tiles": tiles,
                                    }
                                ],
                                "doors": [{"x": 1, "y": 0, "destination": 5}, {"x": 255, "y": 0}],
                            }
                        ],
                    }
                ],
                "map": [{"x": 3, "y": 4, "sector": 0, "room": 0}, {"x": 4, "y": 4, "blank": True}],
            }
        ],
    }


@pytest.fixture
def dump_folder(tmp_path: Path) -> Path:
    (tmp_path / LEVEL_DUMP_FILENAME).write_bytes(orjson.dumps(sample_dump()))
    return tmp_path


@pytest.fixture
def json_store(dump_folder: Path) -> JsonRecordStore:
    store = JsonRecordStore()
    store.open_directory(dump_folder)
    return store


class TestOpenDirectory:
    """Loading and validating the dump."""

    def test_lists_areas(self, json_store: JsonRecordStore) -> None:
        """Opening a dump lists its areas and constant overlays."""
        assert json_store.list_areas() == [AreaHeader(0, "Castle")]
        assert json_store.constant_overlays() == [0, 1]

    def test_missing_dump(self, tmp_path: Path) -> None:
        """A folder without levels.json is a StoreError."""
        with pytest.raises(StoreError):
            JsonRecordStore().open_directory(tmp_path)

    def test_invalid_json(self, tmp_path: Path) -> None:
        """Unparseable dumps are a StoreError."""
        (tmp_path / LEVEL_DUMP_FILENAME).write_text("{not json")
        with pytest.raises(StoreError):
            JsonRecordStore().open_directory(tmp_path)

    def test_schema_errors_name_the_location(self, tmp_path: Path) -> None:
        """Schema errors point at the offending record."""
        data = sample_dump()
        del data["areas"][0]["sectors"][0]["overlay"]
        (tmp_path / LEVEL_DUMP_FILENAME).write_bytes(orjson.dumps(data))
        with pytest.raises(StoreError, match=r"areas\[0\]\.sectors\[0\] is missing 'overlay'"):
            JsonRecordStore().open_directory(tmp_path)

    def test_schema_accepts_sample(self) -> None:
        """A complete dump validates cleanly."""
        assert LevelDumpSchema.validate(sample_dump()) == []

    def test_schema_rejects_non_object(self) -> None:
        """The dump must be a JSON object."""
        assert LevelDumpSchema.validate([]) == ["Top-level value must be an object"]


class TestLoadArea:
    """Record tree construction."""

    def test_builds_fresh_tree(self, json_store: JsonRecordStore) -> None:
        """Each load builds a new record tree from the dump."""
        area = json_store.load_area(0)
        room = area.sectors[0].rooms[0]

        assert area.sectors[0].label == "00 Entrance"
        assert room.filename == "room_00-00-00_020F6DA4"
        assert room.area_name == "Castle"
        assert room.overlay_id == 10
        assert room.graphic_tilesets_for_room == (3, 4)
        assert (room.layers[0].width, room.layers[0].height) == (16, 12)
        assert room.tileset_filename(room.layers[0]) == "tileset_00000100_00000020"
        assert [door.is_defined for door in room.doors] == [True, False]
        assert area.map is not None and len(area.map.tiles) == 2
        assert area.map.tiles[1].is_blank

        assert json_store.load_area(0) is not area

    def test_unknown_area(self, json_store: JsonRecordStore) -> None:
        """Unknown area indexes are a StoreError."""
        with pytest.raises(StoreError):
            json_store.load_area(7)


class TestOverlays:
    """Overlay loading is idempotent."""

    def test_repeated_load(self, json_store: JsonRecordStore) -> None:
        """Loading an overlay twice keeps one entry."""
        json_store.load_overlay(10)
        json_store.load_overlay(10)
        assert json_store.loaded_overlays == {10}


class TestCommit:
    """Staged room edits are written back to the dump."""

    def test_update_and_commit(self, json_store: JsonRecordStore, dump_folder: Path) -> None:
        """Staged room edits are written on commit."""
        room = json_store.load_area(0).sectors[0].rooms[0]
        room.layers[0].tiles = [Tile(9, horizontal_flip=True)] * room.layers[0].tile_count

        json_store.update_room(room)
        assert json_store.has_uncommitted_changes
        json_store.commit_file_changes()
        assert not json_store.has_uncommitted_changes

        reopened = JsonRecordStore()
        reopened.open_directory(dump_folder)
        reloaded = reopened.load_area(0).sectors[0].rooms[0]
        assert reloaded.layers[0].tiles[0] == Tile(9, horizontal_flip=True)

    def test_commit_without_changes_keeps_file(self, json_store, dump_folder: Path) -> None:
        """Committing with nothing staged leaves the dump untouched."""
        before = (dump_folder / LEVEL_DUMP_FILENAME).read_bytes()
        json_store.commit_file_changes()
        assert (dump_folder / LEVEL_DUMP_FILENAME).read_bytes() == before

    def test_rom_operations_are_unavailable(self, json_store, tmp_path: Path) -> None:
        """ROM extraction and writing are not served by a dump."""
        with pytest.raises(StoreError):
            json_store.write_to_rom(tmp_path / "out.nds")
        with pytest.raises(StoreError):
            json_store.open_and_extract_rom(tmp_path / "in.nds", tmp_path / "out")
