"""
Graphics scenes showing a composed room and an area map.
"""

import logging
from typing import Callable, Optional

from PIL import Image
from PIL.ImageQt import ImageQt
from PySide6.QtCore import Qt
from PySide6.QtGui import QBrush, QColor, QPen, QPixmap
from PySide6.QtWidgets import (
    QGraphicsPixmapItem,
    QGraphicsRectItem,
    QGraphicsScene,
    QGraphicsSceneMouseEvent,
)

from ..levels.models import SCREEN_HEIGHT_IN_PIXELS, SCREEN_WIDTH_IN_PIXELS
from ..maps.compositor import MAP_SCENE_HEIGHT, MAP_SCENE_WIDTH, MapScene, MapUnit
from ..maps.navigator import MapNavigator
from ..rendering.layer_compositor import ComposedRoom


def to_pixmap(image: Image.Image) -> QPixmap:
    """Convert a PIL image to a QPixmap."""
    if image.mode != "RGBA":
        image = image.convert("RGBA")
    return QPixmap.fromImage(ImageQt(image))


class RoomGraphicsScene(QGraphicsScene):
    """One pixmap item per composed layer, with the layer's depth and opacity."""

    def __init__(self, parent=None):
        super().__init__(parent)
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def show_room(self, composed: Optional[ComposedRoom]) -> None:
        self.clear()
        if composed is None:
            return
        for composed_layer in composed.layers:
            item = QGraphicsPixmapItem(to_pixmap(composed_layer.image))
            item.setZValue(composed_layer.z_value)
            item.setOpacity(composed_layer.opacity)
            self.addItem(item)

        # Door markers
        pen = QPen(QColor(255, 128, 0))
        for door in composed.room.defined_doors():
            position = door.screen_position()
            if position is None:
                continue
            marker = self.addRect(
                position[0], position[1], SCREEN_WIDTH_IN_PIXELS, SCREEN_HEIGHT_IN_PIXELS, pen
            )
            marker.setZValue(1000)

        width, height = composed.size
        self.setSceneRect(0, 0, width, height)


class MapUnitItem(QGraphicsRectItem):
    """Clickable map cell. Blank cells ignore presses."""

    def __init__(self, unit: MapUnit, press: Callable[[MapUnit], bool]):
        x, y, width, height = unit.bounding_rect
        super().__init__(x, y, width, height)
        self.unit = unit
        self.press = press
        self.setPen(QPen(Qt.PenStyle.NoPen))
        self.setBrush(QBrush(Qt.BrushStyle.NoBrush))
        if unit.is_interactive:
            self.setCursor(Qt.CursorShape.PointingHandCursor)

    def mousePressEvent(self, event: QGraphicsSceneMouseEvent) -> None:
        if not self.press(self.unit):
            event.ignore()


class MapGraphicsScene(QGraphicsScene):
    """Area map background with one item per map unit."""

    def __init__(
        self,
        navigator: MapNavigator,
        parent=None,
        press_handler: Optional[Callable[[MapUnit], bool]] = None,
    ):
        super().__init__(parent)
        self.navigator = navigator
        # Lets the window report failed navigation instead of Qt swallowing it
        self.press_handler = press_handler or navigator.press
        self.setSceneRect(0, 0, MAP_SCENE_WIDTH, MAP_SCENE_HEIGHT)

    def show_map(self, scene: Optional[MapScene]) -> None:
        self.clear()
        if scene is None:
            return
        self.addPixmap(to_pixmap(scene.background))
        for unit in scene.units:
            self.addItem(MapUnitItem(unit, self.press_handler))
