"""Area / sector / room selection state machine.

Owns the active (area, sector, room) triple and drives the rebuild
cascade. Dropdowns and map clicks feed it through the same entry points,
either by calling the setters or by dispatching navigation events.
"""

import logging
from collections import Counter
from dataclasses import dataclass
from typing import Callable, Optional, Union

from PySide6.QtCore import QObject, Signal

from ..levels.models import Area, Room, Sector
from ..store.protocols import AreaHeader


# =============================================================================
# Navigation events
# =============================================================================

@dataclass(frozen=True)
class SelectArea:
    area_index: int


@dataclass(frozen=True)
class SelectSector:
    sector_index: int


@dataclass(frozen=True)
class SelectRoom:
    room_index: int


@dataclass(frozen=True)
class SelectSectorAndRoom:
    """Combined event emitted by map navigation."""
    sector_index: int
    room_index: int


NavigationEvent = Union[SelectArea, SelectSector, SelectRoom, SelectSectorAndRoom]


# =============================================================================
# Controller
# =============================================================================

class SelectionController(QObject):
    """Selection state and rebuild cascade.

    Signals are emitted synchronously in cascade order:
    area_changed -> sector_changed -> room_changed -> room_labels_changed
    -> sector_labels_changed -> map_rebuild_requested.
    Room layers are rebuilt through the `room_builder` callback before
    `room_changed` fires; slots cannot report errors back to the caller.
    """

    PLACEHOLDER_LABEL = "Select Area"

    area_changed = Signal(object)
    sector_changed = Signal(object)
    room_changed = Signal(object)
    area_labels_changed = Signal(list)
    sector_labels_changed = Signal(list)
    room_labels_changed = Signal(list)
    map_rebuild_requested = Signal(object)

    def __init__(
        self,
        area_loader: Callable[[int], Area],
        room_builder: Optional[Callable[[Room], None]] = None,
        parent: Optional[QObject] = None,
    ):
        """Initialize the controller.

        Args:
            area_loader: Builds a fresh Area record tree for an area index
            room_builder: Rebuilds a newly selected room's layers. Called
                directly, so its errors reach whoever changed the selection
            parent: Qt parent object
        """
        super().__init__(parent)
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self._area_loader = area_loader
        self._room_builder = room_builder

        self._area_headers: list[AreaHeader] = []
        self.area_labels: list[str] = []
        self.sector_labels: list[str] = []
        self.room_labels: list[str] = []
        self.has_placeholder = False

        self.area_index: Optional[int] = None
        self.sector_index: Optional[int] = None
        self.room_index: Optional[int] = None
        self.area: Optional[Area] = None
        self.sector: Optional[Sector] = None
        self.room: Optional[Room] = None

        self.rebuild_counts: Counter[str] = Counter()

    @property
    def state(self) -> tuple[Optional[int], Optional[int], Optional[int]]:
        return (self.area_index, self.sector_index, self.room_index)

    def initialize_areas(self, area_headers: list[AreaHeader]) -> None:
        """Fill the area list behind a placeholder and select the first area."""
        self._area_headers = list(area_headers)
        self.area_labels = [self.PLACEHOLDER_LABEL] + [h.label for h in self._area_headers]
        self.has_placeholder = True
        self.area_index = self.sector_index = self.room_index = None
        self.area = self.sector = self.room = None
        self.area_labels_changed.emit(list(self.area_labels))
        self.set_area(0)

    def set_area(self, new_area_index: int) -> None:
        """Select an area. Always rebuilds, even for the current index.

        While the placeholder occupies slot 0 it is removed first and the
        selection is re-applied against the corrected list.
        """
        if self.has_placeholder:
            self.has_placeholder = False
            self.area_labels.pop(0)
            self.area_labels_changed.emit(list(self.area_labels))
            self.set_area(max(new_area_index - 1, 0))
            return

        if not 0 <= new_area_index < len(self._area_headers):
            raise IndexError(f"Area index out of range: {new_area_index}")

        self.area_index = new_area_index
        self.area = self._area_loader(self._area_headers[new_area_index].area_index)
        self.rebuild_counts["area"] += 1
        self.logger.info(f"Area selected: {self.area.label}")
        self.area_changed.emit(self.area)

        self.set_sector(0, force=True)
        self.sector_labels = [sector.label for sector in self.area.sectors]
        self.sector_labels_changed.emit(list(self.sector_labels))

        self.map_rebuild_requested.emit(self.area.map)

    def set_sector(self, new_sector_index: int, force: bool = False) -> None:
        """Select a sector of the current area; resets the room to 0."""
        if new_sector_index == self.sector_index and not force:
            return
        if self.area is None:
            raise RuntimeError("No area selected")

        if not 0 <= new_sector_index < len(self.area.sectors):
            raise IndexError(f"Sector index out of range: {new_sector_index}")

        self.sector = self.area.sectors[new_sector_index]
        self.sector_index = new_sector_index
        self.rebuild_counts["sector"] += 1
        self.logger.debug(f"Sector selected: {self.sector.label}")
        self.sector_changed.emit(self.sector)

        self.set_room(0, force=True)
        self.room_labels = [
            "%02d %08X" % (room_index, room.room_metadata_ram_pointer)
            for room_index, room in enumerate(self.sector.rooms)
        ]
        self.room_labels_changed.emit(list(self.room_labels))

    def set_room(self, new_room_index: int, force: bool = False) -> None:
        """Select a room of the current sector and rebuild its layers."""
        if new_room_index == self.room_index and not force:
            return
        if self.sector is None:
            raise RuntimeError("No sector selected")

        if not self.sector.rooms:
            self.logger.warning(f"Sector {self.sector.label} has no rooms")
            self.room_index = new_room_index
            self.room = None
            return
        if not 0 <= new_room_index < len(self.sector.rooms):
            raise IndexError(f"Room index out of range: {new_room_index}")

        self.room = self.sector.rooms[new_room_index]
        self.room_index = new_room_index
        self.rebuild_counts["room"] += 1
        self.logger.debug(f"Room selected: {self.room.filename}")
        if self._room_builder is not None:
            self._room_builder(self.room)
        self.room_changed.emit(self.room)

    def set_sector_and_room(self, new_sector_index: int, new_room_index: int) -> None:
        """Apply a map navigation event.

        The sector goes first (which resets the room to 0), then the
        requested room.
        """
        self.logger.debug(f"Navigate to sector {new_sector_index}, room {new_room_index}")
        self.set_sector(new_sector_index)
        self.set_room(new_room_index)

    def dispatch(self, event: NavigationEvent) -> None:
        """Route a navigation event to its transition."""
        if isinstance(event, SelectArea):
            self.set_area(event.area_index)
        elif isinstance(event, SelectSector):
            self.set_sector(event.sector_index)
        elif isinstance(event, SelectRoom):
            self.set_room(event.room_index)
        elif isinstance(event, SelectSectorAndRoom):
            self.set_sector_and_room(event.sector_index, event.room_index)
        else:
            raise TypeError(f"Unknown navigation event: {event!r}")
