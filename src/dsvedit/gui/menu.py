"""
Menu builder for main application window.
"""

import logging
from typing import TYPE_CHECKING

from PySide6.QtWidgets import QMenuBar
from PySide6.QtGui import QAction, QKeySequence

if TYPE_CHECKING:
    from .main_window import MainWindow


class MenuBuilder:
    """Builds and manages the application menu bar."""

    def __init__(self, main_window: "MainWindow") -> None:
        """
        Initialize menu builder.

        Args:
            main_window: MainWindow instance that owns the menus
        """
        self.main_window = main_window
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def setup_actions(self) -> None:
        """Create all actions for menus and toolbar."""
        self._setup_file_actions()
        self._setup_build_actions()
        self._setup_settings_actions()

        self.logger.debug("Actions created")

    def _setup_file_actions(self) -> None:
        mw = self.main_window

        mw.action_open_rom = QAction("Open &ROM...", mw)
        mw.action_open_rom.setShortcut(QKeySequence.StandardKey.Open)
        mw.action_open_rom.setStatusTip("Extract and open a ROM image")
        mw.action_open_rom.triggered.connect(mw.open_rom)

        mw.action_open_folder = QAction("Open &Folder...", mw)
        mw.action_open_folder.setStatusTip("Open an already extracted game folder")
        mw.action_open_folder.triggered.connect(mw.open_folder)

        mw.action_save = QAction("&Save Files", mw)
        mw.action_save.setShortcut(QKeySequence.StandardKey.Save)
        mw.action_save.setStatusTip("Write edited rooms back to the extracted files")
        mw.action_save.triggered.connect(mw.save_files)
        mw.action_save.setEnabled(False)  # Disabled until a game is opened

        mw.action_exit = QAction("E&xit", mw)
        mw.action_exit.setShortcut(QKeySequence.StandardKey.Quit)
        mw.action_exit.triggered.connect(mw.close)

    def _setup_build_actions(self) -> None:
        mw = self.main_window

        mw.action_build = QAction("&Build", mw)
        mw.action_build.setStatusTip("Write the hack ROM")
        mw.action_build.triggered.connect(mw.write_to_rom)
        mw.action_build.setEnabled(False)

        mw.action_build_and_run = QAction("Build and &Run", mw)
        mw.action_build_and_run.setShortcut(QKeySequence("F7"))
        mw.action_build_and_run.setStatusTip("Save, write the hack ROM and start the emulator")
        mw.action_build_and_run.triggered.connect(mw.build_and_run)
        mw.action_build_and_run.setEnabled(False)

    def _setup_settings_actions(self) -> None:
        mw = self.main_window

        mw.action_set_tiled_path = QAction("Set &Tiled Path...", mw)
        mw.action_set_tiled_path.triggered.connect(mw.choose_tiled_path)

        mw.action_set_emulator_path = QAction("Set &Emulator Path...", mw)
        mw.action_set_emulator_path.triggered.connect(mw.choose_emulator_path)

    def setup_menus(self) -> None:
        """Setup the menu bar."""
        menubar = self.main_window.menuBar()

        self._setup_file_menu(menubar)
        self._setup_build_menu(menubar)
        self._setup_settings_menu(menubar)

        self.logger.debug("Menus created")

    def _setup_file_menu(self, menubar: QMenuBar) -> None:
        mw = self.main_window
        file_menu = menubar.addMenu("&File")
        file_menu.addAction(mw.action_open_rom)
        file_menu.addAction(mw.action_open_folder)
        file_menu.addSeparator()
        file_menu.addAction(mw.action_save)
        file_menu.addSeparator()
        file_menu.addAction(mw.action_exit)

    def _setup_build_menu(self, menubar: QMenuBar) -> None:
        mw = self.main_window
        build_menu = menubar.addMenu("&Build")
        build_menu.addAction(mw.action_build)
        build_menu.addAction(mw.action_build_and_run)

    def _setup_settings_menu(self, menubar: QMenuBar) -> None:
        mw = self.main_window
        settings_menu = menubar.addMenu("&Settings")
        settings_menu.addAction(mw.action_set_tiled_path)
        settings_menu.addAction(mw.action_set_emulator_path)
