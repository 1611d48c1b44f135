"""Selection state machine and navigation events."""

from .controller import (
    SelectionController,
    NavigationEvent,
    SelectArea,
    SelectSector,
    SelectRoom,
    SelectSectorAndRoom,
)

__all__ = [
    "SelectionController",
    "NavigationEvent",
    "SelectArea",
    "SelectSector",
    "SelectRoom",
    "SelectSectorAndRoom",
]
