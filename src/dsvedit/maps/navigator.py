"""Map click navigation.

Translates presses on map units into (sector_index, room_index) events.
"""

import logging
from typing import Callable, Optional

from PySide6.QtCore import QObject, Signal

from .compositor import MapScene, MapUnit


class MapNavigator(QObject):
    """Hit-tests map units and forwards their rooms.

    The `navigate` callback must be the same selection entry point used by
    manual navigation. It is called directly, so a failed room rebuild
    propagates out of `press`. `room_clicked` fires afterwards for
    observers.
    """

    room_clicked = Signal(int, int)

    def __init__(
        self,
        parent: Optional[QObject] = None,
        navigate: Optional[Callable[[int, int], None]] = None,
    ):
        super().__init__(parent)
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.scene: Optional[MapScene] = None
        self.navigate = navigate

    def set_scene(self, scene: Optional[MapScene]) -> None:
        self.scene = scene

    def unit_at(self, x: int, y: int) -> Optional[MapUnit]:
        """Return the topmost interactive unit containing a scene pixel."""
        if self.scene is None:
            return None
        for unit in reversed(self.scene.units):
            if unit.is_interactive and unit.contains(x, y):
                return unit
        return None

    def press(self, unit: MapUnit) -> bool:
        """Navigate to the unit's room. Blank units are ignored.

        Returns:
            True if the unit was interactive
        """
        if not unit.is_interactive:
            return False
        tile = unit.map_tile
        self.logger.debug(f"Map unit pressed: sector {tile.sector_index}, room {tile.room_index}")
        if self.navigate is not None:
            self.navigate(tile.sector_index, tile.room_index)
        self.room_clicked.emit(tile.sector_index, tile.room_index)
        return True

    def press_at(self, x: int, y: int) -> bool:
        """Press whatever interactive unit lies under a scene pixel."""
        unit = self.unit_at(x, y)
        if unit is None:
            return False
        return self.press(unit)
