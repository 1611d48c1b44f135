"""
Tileset raster cache.
"""

from .cache import TilesetCache

__all__ = [
    'TilesetCache',
]
