"""
Main application window for DSVEdit.
"""

import logging
from pathlib import Path
from typing import Optional

import qtawesome as qta  # type: ignore
from PySide6.QtCore import Qt
from PySide6.QtGui import QAction, QCloseEvent
from PySide6.QtWidgets import (
    QComboBox,
    QFileDialog,
    QGraphicsView,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QSplitter,
    QVBoxLayout,
    QWidget,
)

from ..errors import DSVEditError
from ..levels.games import GameProfile
from ..maps.compositor import MapUnit
from ..selection.controller import NavigationEvent, SelectArea, SelectRoom, SelectSector
from ..session import EditorSession
from ..settings import AppSettings
from .menu import MenuBuilder
from .scenes import MapGraphicsScene, RoomGraphicsScene


class MainWindow(QMainWindow):
    """Main application window."""

    # Menu actions (created by MenuBuilder)
    action_open_rom: QAction
    action_open_folder: QAction
    action_save: QAction
    action_exit: QAction
    action_build: QAction
    action_build_and_run: QAction
    action_set_tiled_path: QAction
    action_set_emulator_path: QAction

    def __init__(
        self,
        settings: AppSettings,
        session: Optional[EditorSession] = None,
        parent: Optional[QWidget] = None,
    ) -> None:
        super().__init__(parent)

        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

        self.setObjectName("main_window")
        self.settings = settings
        self.session = session if session is not None else EditorSession(settings, parent=self)

        self.menu_builder = MenuBuilder(self)
        self.menu_builder.setup_actions()
        self.menu_builder.setup_menus()
        self._setup_central_widget()
        self._connect_session()

        self.resize(1200, 800)
        self.setWindowTitle("DSVEdit")
        self.statusBar().showMessage("Open a ROM or an extracted folder", 5000)

        self.logger.info("Main window initialized")

    # === LAYOUT ===

    def _setup_central_widget(self) -> None:
        central = QWidget(self)
        layout = QVBoxLayout(central)

        selectors = QHBoxLayout()
        self.area_combo = QComboBox()
        self.sector_combo = QComboBox()
        self.room_combo = QComboBox()
        for label, combo in (
            ("Area", self.area_combo),
            ("Sector", self.sector_combo),
            ("Room", self.room_combo),
        ):
            selectors.addWidget(QLabel(label))
            combo.setMinimumWidth(160)
            selectors.addWidget(combo)
        selectors.addStretch(1)

        self.export_button = QPushButton(qta.icon("mdi.export"), "Edit in Tiled")
        self.export_button.setToolTip("Export the room to Tiled and open it")
        self.import_button = QPushButton(qta.icon("mdi.import"), "Import from Tiled")
        self.import_button.setToolTip("Read the edited room back from Tiled")
        selectors.addWidget(self.export_button)
        selectors.addWidget(self.import_button)
        layout.addLayout(selectors)

        self.room_scene = RoomGraphicsScene(self)
        self.room_view = QGraphicsView(self.room_scene)
        self.room_view.setDragMode(QGraphicsView.DragMode.ScrollHandDrag)

        self.map_scene = MapGraphicsScene(
            self.session.navigator, self, press_handler=self._press_map_unit
        )
        self.map_view = QGraphicsView(self.map_scene)
        self.map_view.scale(2, 2)

        splitter = QSplitter(Qt.Orientation.Horizontal)
        splitter.addWidget(self.room_view)
        splitter.addWidget(self.map_view)
        splitter.setStretchFactor(0, 3)
        splitter.setStretchFactor(1, 1)
        layout.addWidget(splitter, 1)

        self.setCentralWidget(central)
        self._set_game_actions_enabled(False)

    def _connect_session(self) -> None:
        session = self.session
        selection = session.selection

        # activated only fires for user changes, not for programmatic ones
        self.area_combo.activated.connect(lambda i: self.navigate(SelectArea(i)))
        self.sector_combo.activated.connect(lambda i: self.navigate(SelectSector(i)))
        self.room_combo.activated.connect(lambda i: self.navigate(SelectRoom(i)))

        selection.area_labels_changed.connect(
            lambda labels: self._fill_combo(self.area_combo, labels, selection.area_index)
        )
        selection.sector_labels_changed.connect(
            lambda labels: self._fill_combo(self.sector_combo, labels, selection.sector_index)
        )
        selection.room_labels_changed.connect(
            lambda labels: self._fill_combo(self.room_combo, labels, selection.room_index)
        )
        selection.room_changed.connect(lambda _room: self._sync_combo_indexes())

        session.room_composed.connect(self.room_scene.show_room)
        session.map_built.connect(self.map_scene.show_map)
        session.warning.connect(self._show_warning)
        session.game_opened.connect(self._on_game_opened)

        self.export_button.clicked.connect(self.export_to_tiled)
        self.import_button.clicked.connect(self.import_from_tiled)

    def _fill_combo(self, combo: QComboBox, labels: list, current: Optional[int]) -> None:
        combo.clear()
        combo.addItems(labels)
        if combo is self.area_combo and self.session.selection.has_placeholder:
            # Placeholder shows until the first area loads but cannot be picked
            combo.model().item(0).setEnabled(False)
        if current is not None and current < len(labels):
            combo.setCurrentIndex(current)

    def _sync_combo_indexes(self) -> None:
        selection = self.session.selection
        for combo, index in (
            (self.area_combo, selection.area_index),
            (self.sector_combo, selection.sector_index),
            (self.room_combo, selection.room_index),
        ):
            if index is not None and index < combo.count():
                combo.setCurrentIndex(index)

    def _set_game_actions_enabled(self, enabled: bool) -> None:
        for widget in (
            self.action_save,
            self.action_build,
            self.action_build_and_run,
            self.export_button,
            self.import_button,
        ):
            widget.setEnabled(enabled)

    # === SESSION CALLBACKS ===

    def _on_game_opened(self, game: GameProfile) -> None:
        self.setWindowTitle(f"DSVEdit - {game.title}")
        self._set_game_actions_enabled(True)

    def _show_warning(self, title: str, message: str) -> None:
        QMessageBox.warning(self, title, message)

    def _show_error(self, title: str, error: Exception) -> None:
        self.logger.error(f"{title}: {error}")
        QMessageBox.critical(self, title, str(error))

    # === NAVIGATION ===

    def navigate(self, event: NavigationEvent) -> None:
        """Apply a dropdown selection, reporting rooms that fail to render."""
        try:
            self.session.selection.dispatch(event)
        except (OSError, DSVEditError) as e:
            self._show_error("Cannot show room", e)
        self._sync_combo_indexes()

    def _press_map_unit(self, unit: MapUnit) -> bool:
        try:
            return self.session.navigator.press(unit)
        except (OSError, DSVEditError) as e:
            self._show_error("Cannot show room", e)
            self._sync_combo_indexes()
            return True

    # === ACTIONS ===

    def open_last_folder(self) -> None:
        """Reopen the folder from the previous run, if it still exists."""
        try:
            game = self.session.open_last_folder()
        except (OSError, DSVEditError) as e:
            self._show_error("Cannot reopen last folder", e)
            return
        if game is not None:
            self.statusBar().showMessage(f"Reopened {self.session.folder}", 5000)

    def open_rom(self) -> None:
        start = str(self.settings.last_used_folder or Path.home())
        rom_path, _ = QFileDialog.getOpenFileName(self, "Open ROM", start, "NDS ROM (*.nds)")
        if not rom_path:
            return
        try:
            self.session.open_rom(rom_path)
        except (OSError, DSVEditError) as e:
            self._show_error("Cannot open ROM", e)

    def open_folder(self) -> None:
        start = str(self.settings.last_used_folder or Path.home())
        folder = QFileDialog.getExistingDirectory(self, "Open extracted folder", start)
        if not folder:
            return
        try:
            self.session.open_folder(folder)
        except (OSError, DSVEditError) as e:
            self._show_error("Cannot open folder", e)

    def export_to_tiled(self) -> None:
        try:
            document_path = self.session.export_to_tiled()
        except (OSError, DSVEditError) as e:
            self._show_error("Export failed", e)
            return
        if document_path:
            self.statusBar().showMessage(f"Exported {document_path.name}", 5000)

    def import_from_tiled(self) -> None:
        try:
            imported = self.session.import_from_tiled()
        except (OSError, DSVEditError) as e:
            self._show_error("Import failed", e)
            return
        if imported:
            self.statusBar().showMessage("Room imported from Tiled", 5000)

    def save_files(self) -> None:
        try:
            self.session.save_files()
        except (OSError, DSVEditError) as e:
            self._show_error("Save failed", e)
            return
        self.statusBar().showMessage("Files saved", 5000)

    def write_to_rom(self) -> None:
        try:
            out_path = self.session.write_to_rom()
        except (OSError, DSVEditError) as e:
            self._show_error("Build failed", e)
            return
        self.statusBar().showMessage(f"Wrote {out_path}", 5000)

    def build_and_run(self) -> None:
        try:
            self.session.build_and_run()
        except (OSError, DSVEditError) as e:
            self._show_error("Build failed", e)

    def choose_tiled_path(self) -> None:
        path, _ = QFileDialog.getOpenFileName(self, "Locate Tiled")
        if path:
            self.settings.tiled_path = Path(path)

    def choose_emulator_path(self) -> None:
        path, _ = QFileDialog.getOpenFileName(self, "Locate emulator")
        if path:
            self.settings.emulator_path = Path(path)

    def closeEvent(self, event: QCloseEvent) -> None:
        store = self.session.store
        if getattr(store, "has_uncommitted_changes", False):
            reply = QMessageBox.question(
                self,
                "Unsaved changes",
                "Save edited rooms before closing?",
                QMessageBox.StandardButton.Yes
                | QMessageBox.StandardButton.No
                | QMessageBox.StandardButton.Cancel,
            )
            if reply == QMessageBox.StandardButton.Cancel:
                event.ignore()
                return
            if reply == QMessageBox.StandardButton.Yes:
                self.save_files()
        self.settings.sync()
        super().closeEvent(event)
