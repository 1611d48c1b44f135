"""
Level record models and game detection.
"""

from .models import (
    Area, Sector, Room, Layer, Tile, Door, Map, MapTile,
    TILE_SIZE, TILESET_COLUMNS, TILESET_CELL_COUNT,
    SCREEN_WIDTH_IN_TILES, SCREEN_HEIGHT_IN_TILES,
    SCREEN_WIDTH_IN_PIXELS, SCREEN_HEIGHT_IN_PIXELS,
    MAX_OPACITY, DOOR_UNDEFINED,
)
from .games import GameProfile, GAME_PROFILES, detect_game

__all__ = [
    # Models
    'Area',
    'Sector',
    'Room',
    'Layer',
    'Tile',
    'Door',
    'Map',
    'MapTile',

    # Geometry
    'TILE_SIZE',
    'TILESET_COLUMNS',
    'TILESET_CELL_COUNT',
    'SCREEN_WIDTH_IN_TILES',
    'SCREEN_HEIGHT_IN_TILES',
    'SCREEN_WIDTH_IN_PIXELS',
    'SCREEN_HEIGHT_IN_PIXELS',
    'MAX_OPACITY',
    'DOOR_UNDEFINED',

    # Games
    'GameProfile',
    'GAME_PROFILES',
    'detect_game',
]
