"""Record store backed by an extracted level dump.

Reads `levels.json` from an extracted game folder, builds fresh level
record trees on demand and writes staged room edits back to the dump.
"""

import logging
from pathlib import Path
from typing import Any, Optional, cast

import orjson

from ..errors import StoreError
from ..levels.models import Area, Door, Layer, Map, MapTile, Room, Sector
from .protocols import AreaHeader

LEVEL_DUMP_FILENAME = "levels.json"


class LevelDumpSchema:
    """Structural checks for level dump files."""

    AREA_KEYS = ("index", "name", "sectors")
    SECTOR_KEYS = ("index", "overlay", "rooms")
    ROOM_KEYS = ("pointer", "layers")
    LAYER_KEYS = ("width", "height", "tiles")

    @classmethod
    def validate(cls, data: Any) -> list[str]:
        """Return a list of problems, empty when the dump is usable."""
        if not isinstance(data, dict):
            return ["Top-level value must be an object"]

        errors: list[str] = []
        areas = cast(dict[str, Any], data).get("areas")
        if not isinstance(areas, list):
            return ["Missing 'areas' list"]

        for a, area in enumerate(cast(list[Any], areas)):
            errors.extend(cls._missing(area, cls.AREA_KEYS, f"areas[{a}]"))
            if not isinstance(area, dict):
                continue
            for s, sector in enumerate(area.get("sectors", [])):
                where = f"areas[{a}].sectors[{s}]"
                errors.extend(cls._missing(sector, cls.SECTOR_KEYS, where))
                if not isinstance(sector, dict):
                    continue
                for r, room in enumerate(sector.get("rooms", [])):
                    room_where = f"{where}.rooms[{r}]"
                    errors.extend(cls._missing(room, cls.ROOM_KEYS, room_where))
                    if not isinstance(room, dict):
                        continue
                    for i, layer in enumerate(room.get("layers", [])):
                        errors.extend(
                            cls._missing(layer, cls.LAYER_KEYS, f"{room_where}.layers[{i}]")
                        )
        return errors

    @staticmethod
    def _missing(obj: Any, keys: tuple[str, ...], where: str) -> list[str]:
        if not isinstance(obj, dict):
            return [f"{where} must be an object"]
        return [f"{where} is missing '{key}'" for key in keys if key not in obj]


class JsonRecordStore:
    """Directory store over an already extracted level dump.

    Extraction from a ROM image and ROM write-back belong to the full
    filesystem tool; this store only serves folders that already contain
    a level dump.
    """

    def __init__(self):
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.folder: Optional[Path] = None
        self.loaded_overlays: set[int] = set()
        self._data: dict[str, Any] = {}
        self._dirty = False

    @property
    def dump_path(self) -> Path:
        if self.folder is None:
            raise StoreError("No folder opened")
        return self.folder / LEVEL_DUMP_FILENAME

    @property
    def has_uncommitted_changes(self) -> bool:
        return self._dirty

    def open_and_extract_rom(self, rom_path: Path, folder: Path) -> None:
        raise StoreError(
            f"Cannot extract {rom_path}: the level dump store only opens extracted folders"
        )

    def open_directory(self, folder: Path) -> None:
        """Load the level dump from an extracted folder.

        Raises:
            StoreError: If the dump is missing, unreadable or malformed
        """
        dump_path = Path(folder) / LEVEL_DUMP_FILENAME
        if not dump_path.is_file():
            raise StoreError(f"Level dump not found: {dump_path}")

        try:
            data = orjson.loads(dump_path.read_bytes())
        except orjson.JSONDecodeError as e:
            raise StoreError(f"Failed to parse level dump {dump_path}: {e}") from e

        errors = LevelDumpSchema.validate(data)
        if errors:
            error_msg = "\n  - ".join(errors)
            raise StoreError(f"Invalid level dump {dump_path}:\n  - {error_msg}")

        self.folder = Path(folder)
        self._data = cast(dict[str, Any], data)
        self.loaded_overlays.clear()
        self._dirty = False
        self.logger.info(
            f"Opened level dump {dump_path} with {len(self._data['areas'])} area(s)"
        )

    def load_overlay(self, overlay_id: int) -> None:
        if overlay_id in self.loaded_overlays:
            return
        self.loaded_overlays.add(overlay_id)
        self.logger.debug(f"Overlay {overlay_id} loaded")

    def constant_overlays(self) -> list[int]:
        return [int(o) for o in self._data.get("constant_overlays", [])]

    def list_areas(self) -> list[AreaHeader]:
        return [
            AreaHeader(area_index=int(area["index"]), name=str(area["name"]))
            for area in self._data.get("areas", [])
        ]

    def load_area(self, area_index: int) -> Area:
        """Build a fresh Area tree from the dump."""
        raw_area = self._raw_area(area_index)
        area_name = str(raw_area["name"])

        sectors: list[Sector] = []
        for raw_sector in raw_area["sectors"]:
            sector_index = int(raw_sector["index"])
            overlay_id = int(raw_sector["overlay"])
            rooms = [
                self._build_room(
                    raw_room, area_index, sector_index, room_index, area_name, overlay_id
                )
                for room_index, raw_room in enumerate(raw_sector["rooms"])
            ]
            sectors.append(
                Sector(
                    sector_index=sector_index,
                    overlay_id=overlay_id,
                    rooms=rooms,
                    name=raw_sector.get("name"),
                )
            )

        area_map = Map(
            area_index=area_index,
            tiles=[MapTile.from_dict(t) for t in raw_area.get("map", [])],
        )
        return Area(area_index=area_index, name=area_name, sectors=sectors, map=area_map)

    def update_room(self, room: Room) -> None:
        """Stage a room's layer contents for the next commit."""
        raw_room = self._raw_room(room)
        raw_layers: list[dict[str, Any]] = raw_room["layers"]
        if len(raw_layers) != len(room.layers):
            raise StoreError(
                f"Room {room.filename} has {len(room.layers)} layers, dump has {len(raw_layers)}"
            )
        for raw_layer, layer in zip(raw_layers, room.layers):
            raw_layer["tiles"] = [tile.to_dict() for tile in layer.tiles]
        self._dirty = True
        self.logger.debug(f"Staged changes for {room.filename}")

    def commit_file_changes(self) -> None:
        if not self._dirty:
            self.logger.debug("No pending changes to commit")
            return
        self.dump_path.write_bytes(orjson.dumps(self._data, option=orjson.OPT_INDENT_2))
        self._dirty = False
        self.logger.info(f"Committed level changes to {self.dump_path}")

    def write_to_rom(self, out_path: Path) -> None:
        raise StoreError(
            f"Cannot build {out_path}: the level dump store has no ROM write-back"
        )

    def _raw_area(self, area_index: int) -> dict[str, Any]:
        for raw_area in self._data.get("areas", []):
            if int(raw_area["index"]) == area_index:
                return cast(dict[str, Any], raw_area)
        raise StoreError(f"Area {area_index} not found in level dump")

    def _raw_room(self, room: Room) -> dict[str, Any]:
        raw_area = self._raw_area(room.area_index)
        for raw_sector in raw_area["sectors"]:
            if int(raw_sector["index"]) != room.sector_index:
                continue
            rooms: list[dict[str, Any]] = raw_sector["rooms"]
            if 0 <= room.room_index < len(rooms):
                return rooms[room.room_index]
        raise StoreError(f"Room {room.filename} not found in level dump")

    @staticmethod
    def _build_room(
        raw_room: dict[str, Any],
        area_index: int,
        sector_index: int,
        room_index: int,
        area_name: str,
        overlay_id: int,
    ) -> Room:
        palette_offset = int(raw_room.get("palette_offset", 0))
        try:
            layers = [Layer.from_dict(raw_layer) for raw_layer in raw_room["layers"]]
        except ValueError as e:
            raise StoreError(
                f"Invalid layer in area {area_index} sector {sector_index} room {room_index}: {e}"
            ) from e

        doors = [
            Door(
                x_pos=int(d.get("x", 0xFF)),
                y_pos=int(d.get("y", 0xFF)),
                destination_room_pointer=int(d.get("destination", 0)),
            )
            for d in raw_room.get("doors", [])
        ]
        return Room(
            room_metadata_ram_pointer=int(raw_room["pointer"]),
            area_index=area_index,
            sector_index=sector_index,
            room_index=room_index,
            area_name=area_name,
            layers=layers,
            doors=doors,
            palette_offset=palette_offset,
            graphic_tilesets_for_room=tuple(
                int(t) for t in raw_room.get("graphic_tilesets", [])
            ),
            overlay_id=overlay_id,
        )
