"""
DSVEdit: level editor core for the Castlevania DS games

Composes rooms from their tile layers, builds the clickable area map and
exchanges rooms with the Tiled map editor.
"""

__version__ = "0.1.0"
__author__ = "DSVEdit Contributors"

from .errors import (
    DSVEditError,
    TilesetMaterializationError,
    TMXFormatError,
    StoreError,
    UnknownGameError,
)
from .levels import Area, Door, Layer, Map, MapTile, Room, Sector, Tile
from .utils.logging_config import setup_logging

__all__ = [
    # Errors
    'DSVEditError',
    'TilesetMaterializationError',
    'TMXFormatError',
    'StoreError',
    'UnknownGameError',

    # Logging
    'setup_logging',

    # Data models
    'Area',
    'Sector',
    'Room',
    'Layer',
    'Tile',
    'Door',
    'Map',
    'MapTile',
]
