"""Overworld map scene and click navigation."""

from .compositor import (
    MapCompositor,
    MapScene,
    MapUnit,
    MAP_UNIT_SPACING,
    MAP_UNIT_SIZE,
    MAP_SCENE_WIDTH,
    MAP_SCENE_HEIGHT,
)
from .navigator import MapNavigator

__all__ = [
    "MapCompositor",
    "MapScene",
    "MapUnit",
    "MapNavigator",
    "MAP_UNIT_SPACING",
    "MAP_UNIT_SIZE",
    "MAP_SCENE_WIDTH",
    "MAP_SCENE_HEIGHT",
]
