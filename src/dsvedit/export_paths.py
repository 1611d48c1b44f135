"""
Layout of the export folder shared by the tileset cache and Tiled interchange.

    <export root>/Exported <game>/rooms/<area name>/Tilesets/<tileset>.png
    <export root>/Exported <game>/rooms/<area name>/<room>.tmx
    <export root>/<game> hack.nds
"""

from dataclasses import dataclass
from pathlib import Path

from .levels.models import Layer, Room


@dataclass(frozen=True)
class ExportPaths:
    """Deterministic file locations for one game."""
    export_root: Path
    game: str

    @property
    def rooms_folder(self) -> Path:
        return self.export_root / f"Exported {self.game}" / "rooms"

    def area_folder(self, area_name: str) -> Path:
        return self.rooms_folder / area_name

    def tileset_path(self, room: Room, layer: Layer) -> Path:
        name = room.tileset_filename(layer)
        return self.area_folder(room.area_name) / "Tilesets" / f"{name}.png"

    def room_document_path(self, room: Room) -> Path:
        return self.area_folder(room.area_name) / f"{room.filename}.tmx"

    @property
    def hack_rom_path(self) -> Path:
        return self.export_root / f"{self.game} hack.nds"
