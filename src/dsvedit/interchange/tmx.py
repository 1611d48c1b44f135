"""
Tiled (TMX) interchange for rooms.

A room is written as an orthogonal map with one tile layer per room layer,
in room order, and one tileset per distinct tileset raster. Tile data is
CSV encoded. Flip state travels in Tiled's gid flag bits.

Reading goes the other way: layers are matched by position and every
layer is decoded before any of them is written back, so a document that
fails validation leaves the room untouched.
"""

import logging
import os
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Mapping, Union

from ..errors import TMXFormatError
from ..levels.models import TILE_SIZE, TILESET_CELL_COUNT, TILESET_COLUMNS, Room, Tile

TMX_VERSION = "1.10"

FLIPPED_HORIZONTALLY_FLAG = 0x80000000
FLIPPED_VERTICALLY_FLAG = 0x40000000
FLIPPED_DIAGONALLY_FLAG = 0x20000000
GID_MASK = 0x1FFFFFFF


def encode_gid(tile: Tile, firstgid: int) -> int:
    """Return the Tiled gid of a tile drawn from the tileset at `firstgid`."""
    gid = firstgid + tile.index
    if tile.horizontal_flip:
        gid |= FLIPPED_HORIZONTALLY_FLAG
    if tile.vertical_flip:
        gid |= FLIPPED_VERTICALLY_FLAG
    return gid


def decode_gid(gid: int, firstgids: list[int]) -> Tile:
    """Decode a Tiled gid back into a tile.

    Args:
        gid: Raw gid including flag bits
        firstgids: First gids of the document's tilesets

    Returns:
        Tile with index and flip flags. gid 0 (empty cell) gives tile 0.

    Raises:
        TMXFormatError: If the gid is diagonally flipped or not covered by
            any tileset
    """
    if gid & FLIPPED_DIAGONALLY_FLAG:
        raise TMXFormatError(f"Diagonal flip is not supported (gid {gid:#x})")

    raw_gid = gid & GID_MASK
    if raw_gid == 0:
        return Tile(0)

    for firstgid in firstgids:
        if firstgid <= raw_gid < firstgid + TILESET_CELL_COUNT:
            return Tile(
                index=raw_gid - firstgid,
                horizontal_flip=bool(gid & FLIPPED_HORIZONTALLY_FLAG),
                vertical_flip=bool(gid & FLIPPED_VERTICALLY_FLAG),
            )
    raise TMXFormatError(f"Unknown gid: {raw_gid}")


class TMXInterface:
    """Writes rooms to TMX documents and reads edited documents back."""

    def __init__(self) -> None:
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def create(
        self,
        path: Union[str, Path],
        room: Room,
        tileset_paths: Mapping[str, Union[str, Path]],
    ) -> None:
        """Write a room to a TMX document, overwriting any existing file.

        Args:
            path: Output document path
            room: Room to export
            tileset_paths: Tileset raster path per tileset filename; must
                cover every layer of the room

        Raises:
            KeyError: If a layer's tileset is not in `tileset_paths`
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        root = ET.Element("map")
        root.set("version", TMX_VERSION)
        root.set("orientation", "orthogonal")
        root.set("renderorder", "right-down")
        root.set("width", str(max((layer.width for layer in room.layers), default=0)))
        root.set("height", str(max((layer.height for layer in room.layers), default=0)))
        root.set("tilewidth", str(TILE_SIZE))
        root.set("tileheight", str(TILE_SIZE))

        # firstgid per tileset filename, in order of first use
        firstgids: dict[str, int] = {}
        for layer in room.layers:
            name = room.tileset_filename(layer)
            if name in firstgids:
                continue
            firstgid = 1 + len(firstgids) * TILESET_CELL_COUNT
            firstgids[name] = firstgid
            self._append_tileset(root, name, firstgid, Path(tileset_paths[name]), path.parent)

        for layer_index, layer in enumerate(room.layers):
            layer_elem = ET.SubElement(root, "layer")
            layer_elem.set("id", str(layer_index + 1))
            layer_elem.set("name", "Layer %d" % layer_index)
            layer_elem.set("width", str(layer.width))
            layer_elem.set("height", str(layer.height))
            if layer.opacity_factor < 1.0:
                layer_elem.set("opacity", "%.4g" % layer.opacity_factor)

            firstgid = firstgids[room.tileset_filename(layer)]
            tiles = layer.tiles or [Tile(0)] * layer.tile_count
            gids = [encode_gid(tile, firstgid) for tile in tiles]

            data_elem = ET.SubElement(layer_elem, "data")
            data_elem.set("encoding", "csv")
            rows = [
                ",".join(str(gid) for gid in gids[row * layer.width:(row + 1) * layer.width])
                for row in range(layer.height)
            ]
            data_elem.text = "\n" + ",\n".join(rows) + "\n"

        ET.indent(root)
        ET.ElementTree(root).write(path, encoding="utf-8", xml_declaration=True)
        self.logger.info(f"Exported {room.filename} to {path}")

    @staticmethod
    def _append_tileset(
        root: ET.Element, name: str, firstgid: int, image_path: Path, document_folder: Path
    ) -> None:
        tileset_elem = ET.SubElement(root, "tileset")
        tileset_elem.set("firstgid", str(firstgid))
        tileset_elem.set("name", name)
        tileset_elem.set("tilewidth", str(TILE_SIZE))
        tileset_elem.set("tileheight", str(TILE_SIZE))
        tileset_elem.set("tilecount", str(TILESET_CELL_COUNT))
        tileset_elem.set("columns", str(TILESET_COLUMNS))

        image_elem = ET.SubElement(tileset_elem, "image")
        source = Path(os.path.relpath(image_path, document_folder)).as_posix()
        image_elem.set("source", source)
        image_elem.set("width", str(TILESET_COLUMNS * TILE_SIZE))
        image_elem.set("height", str(TILESET_CELL_COUNT // TILESET_COLUMNS * TILE_SIZE))

    def read(self, path: Union[str, Path], room: Room) -> None:
        """Replace the tile data of every room layer from a TMX document.

        Raises:
            FileNotFoundError: If the document does not exist
            TMXFormatError: If the document does not fit the room. The room
                is not modified in that case.
        """
        path = Path(path)
        try:
            root = ET.parse(path).getroot()
        except ET.ParseError as e:
            raise TMXFormatError(f"Malformed TMX document {path}: {e}") from e

        if root.tag != "map":
            raise TMXFormatError(f"Not a TMX map: {path}")

        firstgids = self._layer_firstgids(root, room, path)

        layer_elems = root.findall("layer")
        if len(layer_elems) != len(room.layers):
            raise TMXFormatError(
                f"{path} has {len(layer_elems)} layers, room {room.filename} has {len(room.layers)}"
            )

        decoded_layers: list[list[Tile]] = []
        for layer_index, (layer_elem, layer) in enumerate(zip(layer_elems, room.layers)):
            gids = self._read_layer_gids(layer_elem, layer_index)
            if len(gids) != layer.tile_count:
                raise TMXFormatError(
                    f"Layer {layer_index} has {len(gids)} tiles, expected {layer.tile_count}"
                )
            # A layer may only draw from its own tileset
            layer_firstgids = [firstgids[layer_index]]
            decoded_layers.append([decode_gid(gid, layer_firstgids) for gid in gids])

        for layer, tiles in zip(room.layers, decoded_layers):
            layer.tiles = tiles
        self.logger.info(f"Imported {room.filename} from {path}")

    @staticmethod
    def _layer_firstgids(root: ET.Element, room: Room, path: Path) -> list[int]:
        """Return the firstgid of each room layer's own tileset.

        Tilesets are matched to the room's tileset files by position, in
        the first-use order they are written in.
        """
        try:
            document_firstgids = [int(elem.get("firstgid", "")) for elem in root.findall("tileset")]
        except ValueError as e:
            raise TMXFormatError(f"Invalid tileset firstgid in {path}") from e

        names = room.tileset_filenames()
        if len(document_firstgids) != len(names):
            raise TMXFormatError(
                f"{path} has {len(document_firstgids)} tilesets, room {room.filename} uses {len(names)}"
            )
        firstgid_by_name = dict(zip(names, document_firstgids))
        return [firstgid_by_name[room.tileset_filename(layer)] for layer in room.layers]

    @staticmethod
    def _read_layer_gids(layer_elem: ET.Element, layer_index: int) -> list[int]:
        data_elem = layer_elem.find("data")
        if data_elem is None:
            raise TMXFormatError(f"Layer {layer_index} has no data")
        encoding = data_elem.get("encoding")
        if encoding != "csv":
            raise TMXFormatError(f"Layer {layer_index} uses unsupported encoding: {encoding}")

        csv_data = (data_elem.text or "").strip()
        try:
            return [int(value) for value in csv_data.replace("\n", "").split(",") if value.strip()]
        except ValueError as e:
            raise TMXFormatError(f"Layer {layer_index} has invalid tile data") from e
