"""
Editor session: one opened game image and everything wired around it.

The session owns the record store and renderer for the opened folder, the
tileset cache, both compositors, the map navigator, the selection state
machine and the Tiled interchange. Widgets only talk to the session and
listen to its signals.
"""

import logging
import subprocess
from pathlib import Path
from typing import Callable, Optional, Union

from PySide6.QtCore import QObject, Signal

from .errors import StoreError, UnknownGameError
from .export_paths import ExportPaths
from .interchange.tmx import TMXInterface
from .levels.games import GameProfile, detect_game
from .levels.models import Area, Map, Room
from .maps.compositor import MapCompositor, MapScene
from .maps.navigator import MapNavigator
from .rendering.layer_compositor import ComposedRoom, LayerCompositor
from .selection.controller import SelectionController
from .settings import AppSettings
from .store.json_store import JsonRecordStore
from .store.prerendered import PrerenderedRenderer
from .store.protocols import RecordStore, Renderer
from .tilesets.cache import TilesetCache

# Builds the store and renderer serving one extracted folder
BackendFactory = Callable[[Path], tuple[RecordStore, Renderer]]

HEADER_RELATIVE_PATH = Path("ftc") / "ndsheader.bin"
EXTRACTED_FOLDER_FORMAT = "Extracted files {stem}"


def default_backend(folder: Path) -> tuple[RecordStore, Renderer]:
    """Level dump store with its pre-rendered rasters."""
    return JsonRecordStore(), PrerenderedRenderer(folder)


class EditorSession(QObject):
    """Opened game image plus the level composition pipeline."""

    # (title, message) for conditions the user has to act on
    warning = Signal(str, str)
    game_opened = Signal(object)
    room_composed = Signal(object)
    map_built = Signal(object)

    def __init__(
        self,
        settings: AppSettings,
        backend_factory: BackendFactory = default_backend,
        parent: Optional[QObject] = None,
    ):
        super().__init__(parent)
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.settings = settings
        self.backend_factory = backend_factory

        self.game: Optional[GameProfile] = None
        self.folder: Optional[Path] = None
        self.store: Optional[RecordStore] = None
        self.renderer: Optional[Renderer] = None
        self.paths: Optional[ExportPaths] = None
        self.tileset_cache: Optional[TilesetCache] = None
        self.layer_compositor: Optional[LayerCompositor] = None
        self.map_compositor: Optional[MapCompositor] = None
        self.composed_room: Optional[ComposedRoom] = None
        self.map_scene: Optional[MapScene] = None

        self.tmx = TMXInterface()
        self.selection = SelectionController(self._load_area, self._compose_room, self)
        # Map clicks take the same path as the dropdowns
        self.navigator = MapNavigator(self, navigate=self.selection.set_sector_and_room)

        self.selection.map_rebuild_requested.connect(self._on_map_rebuild_requested)

    @property
    def is_open(self) -> bool:
        return self.store is not None

    @property
    def current_room(self) -> Optional[Room]:
        return self.selection.room

    # === OPENING ===

    def open_rom(self, rom_path: Union[str, Path]) -> Optional[GameProfile]:
        """Extract a ROM image next to itself and open the result.

        Returns:
            The detected game, or None if the image is not a supported game

        Raises:
            FileNotFoundError: If the image does not exist
        """
        rom_path = Path(rom_path)
        if not rom_path.is_file():
            raise FileNotFoundError(f"ROM image not found: {rom_path}")

        game = self._detect_game(rom_path)
        if game is None:
            return None

        folder = rom_path.parent / EXTRACTED_FOLDER_FORMAT.format(stem=rom_path.stem)
        store, renderer = self.backend_factory(folder)
        self.logger.info(f"Extracting {rom_path} to {folder}")
        store.open_and_extract_rom(rom_path, folder)
        self._bind(game, folder, store, renderer)
        return game

    def open_folder(self, folder: Union[str, Path]) -> Optional[GameProfile]:
        """Open an already extracted game folder.

        Returns:
            The detected game, or None if the folder is not a supported game

        Raises:
            NotADirectoryError: If the folder does not exist
            FileNotFoundError: If the folder has no cartridge header
        """
        folder = Path(folder)
        if not folder.is_dir():
            raise NotADirectoryError(f"Not a folder: {folder}")

        header_path = folder / HEADER_RELATIVE_PATH
        if not header_path.is_file():
            raise FileNotFoundError(f"No {HEADER_RELATIVE_PATH} in {folder}")

        game = self._detect_game(header_path)
        if game is None:
            return None

        store, renderer = self.backend_factory(folder)
        store.open_directory(folder)
        self._bind(game, folder, store, renderer)
        return game

    def open_last_folder(self) -> Optional[GameProfile]:
        """Reopen the previously used folder if it is still a directory."""
        folder = self.settings.last_used_folder
        if folder is None or not folder.is_dir():
            return None
        self.logger.info(f"Reopening last used folder {folder}")
        return self.open_folder(folder)

    def _detect_game(self, header_path: Path) -> Optional[GameProfile]:
        try:
            return detect_game(header_path)
        except UnknownGameError as e:
            self.logger.warning(str(e))
            self.warning.emit("Invalid game", str(e))
            return None

    def _bind(
        self, game: GameProfile, folder: Path, store: RecordStore, renderer: Renderer
    ) -> None:
        """Adopt a freshly opened store and select the first area."""
        for overlay_id in store.constant_overlays():
            store.load_overlay(overlay_id)

        export_root = self.settings.paths.resolve_export_root(folder)
        paths = ExportPaths(export_root, game.code)

        self.game = game
        self.folder = folder
        self.store = store
        self.renderer = renderer
        self.paths = paths
        self.tileset_cache = TilesetCache(paths, store, renderer)
        self.layer_compositor = LayerCompositor(self.tileset_cache)
        self.map_compositor = MapCompositor(renderer)
        self.composed_room = None
        self.map_scene = None
        self.navigator.set_scene(None)

        self.settings.last_used_folder = folder
        self.logger.info(f"Opened {game.title} from {folder}, exporting to {export_root}")
        self.game_opened.emit(game)

        self.selection.initialize_areas(store.list_areas())

    def _require_store(self) -> RecordStore:
        if self.store is None:
            raise RuntimeError("No game opened")
        return self.store

    def _load_area(self, area_index: int) -> Area:
        return self._require_store().load_area(area_index)

    # === REBUILD HOOKS ===

    def _compose_room(self, room: Room) -> None:
        """Rebuild the selected room's layers.

        Raises:
            TilesetMaterializationError: If a layer's tileset cannot be
                rendered. The previous composition is dropped first, so
                no stale room stays on screen.
        """
        if self.layer_compositor is None:
            return
        self.composed_room = None
        try:
            self.composed_room = self.layer_compositor.compose_room(room)
        finally:
            self.room_composed.emit(self.composed_room)

    def _on_map_rebuild_requested(self, area_map: Map) -> None:
        if self.map_compositor is None:
            return
        try:
            scene = self.map_compositor.build(area_map)
        except StoreError as e:
            self.logger.warning(f"Map unavailable: {e}")
            self.warning.emit("Map unavailable", str(e))
            scene = None
        self.map_scene = scene
        self.navigator.set_scene(scene)
        self.map_built.emit(scene)

    # === TILED WORKFLOW ===

    def export_to_tiled(self, launch: bool = True) -> Optional[Path]:
        """Write the current room to its TMX document.

        Args:
            launch: Open the document in Tiled afterwards

        Returns:
            Path of the written document, or None if no room is selected
        """
        room = self.current_room
        if room is None or self.tileset_cache is None or self.paths is None:
            self.warning.emit("Nothing to export", "Select a room first.")
            return None

        tileset_paths = self.tileset_cache.ensure_tilesets_exist(room)
        document_path = self.paths.room_document_path(room)
        self.tmx.create(document_path, room, tileset_paths)

        if launch:
            self.launch_tiled(document_path)
        return document_path

    def import_from_tiled(self) -> bool:
        """Read the current room's TMX document back into the room.

        Returns:
            True if the room was updated

        Raises:
            TMXFormatError: If the document does not fit the room
        """
        room = self.current_room
        if room is None or self.paths is None:
            self.warning.emit("Nothing to import", "Select a room first.")
            return False

        document_path = self.paths.room_document_path(room)
        if not document_path.is_file():
            self.warning.emit(
                "Room not exported",
                f"Room has not been exported yet. Export it to Tiled first.\n{document_path}",
            )
            return False

        self.tmx.read(document_path, room)
        self._require_store().update_room(room)
        self._compose_room(room)
        return True

    def _tool_path(self, path: Optional[Path], tool: str) -> Optional[Path]:
        """Return a configured tool executable, warning if it is unusable."""
        if path is None:
            self.warning.emit(
                f"{tool} not configured", f"Set the path to {tool} in the settings first."
            )
            return None
        if not path.is_file():
            self.logger.warning(f"{tool} executable not found: {path}")
            self.warning.emit(f"Can't find {tool}", f"No {tool} executable at {path}.")
            return None
        return path

    def launch_tiled(self, document_path: Path) -> bool:
        tiled_path = self._tool_path(self.settings.tiled_path, "Tiled")
        if tiled_path is None:
            return False
        self.logger.info(f"Launching Tiled for {document_path}")
        subprocess.Popen([str(tiled_path), str(document_path)])
        return True

    # === BUILD ===

    def save_files(self) -> None:
        """Commit staged edits to the extracted files."""
        self._require_store().commit_file_changes()
        self.logger.info("Files saved")

    def write_to_rom(self, launch_emulator: bool = False) -> Path:
        """Build the hack ROM into the export root.

        Returns:
            Path of the written ROM
        """
        store = self._require_store()
        if self.paths is None:
            raise RuntimeError("No game opened")
        out_path = self.paths.hack_rom_path
        out_path.parent.mkdir(parents=True, exist_ok=True)
        store.write_to_rom(out_path)
        self.logger.info(f"Wrote {out_path}")

        if launch_emulator:
            self.launch_emulator(out_path)
        return out_path

    def build_and_run(self) -> Path:
        """Save, build the ROM and start it in the emulator."""
        self.save_files()
        return self.write_to_rom(launch_emulator=True)

    def launch_emulator(self, rom_path: Path) -> bool:
        emulator_path = self._tool_path(self.settings.emulator_path, "Emulator")
        if emulator_path is None:
            return False
        self.logger.info(f"Launching emulator with {rom_path}")
        subprocess.Popen([str(emulator_path), str(rom_path)])
        return True
