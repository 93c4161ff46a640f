from __future__ import annotations

import json
import logging
from enum import Enum
from typing import Any, List, Optional, Protocol, Tuple

from src.core import config
from src.core.runtime_data_validation import RuntimeDataValidationError
from src.editor.coordinate_mapper import CoordinateMapper
from src.editor.editor_errors import EditorError
from src.editor.editor_ui import PaletteStripLayout, StripHit, available_palette_width
from src.editor.level_store import LevelStore, PersistedLevel
from src.editor.level_validator import validate_level
from src.editor.palette import Direction, PaletteNavigator
from src.editor.tile_map import LayerRole, TileMap

logger = logging.getLogger(__name__)

LAYER_ACTIONS = {
    "layer_terrain": LayerRole.TERRAIN,
    "layer_goals": LayerRole.GOALS,
    "layer_entities": LayerRole.ENTITIES,
}

PALETTE_ACTIONS = {
    "palette_up": Direction.UP,
    "palette_down": Direction.DOWN,
    "palette_left": Direction.LEFT,
    "palette_right": Direction.RIGHT,
}

CONFIRM_NEW = "Create a new level? Unsaved changes will be lost."
CONFIRM_EXIT = "You have unsaved changes. Are you sure you want to exit?"
CONFIRM_REPLACE = "Replace the current level? Unsaved changes will be lost."


class Dialogs(Protocol):
    def confirm(self, message: str) -> bool: ...

    def prompt(self, message: str, default: str = "") -> Optional[str]: ...

    def alert(self, message: str) -> None: ...

    def choose(self, message: str, options: List[str]) -> Optional[int]: ...


class GameplayEngine(Protocol):
    def test_custom_level(self, level_document: dict) -> None: ...


class EditorHost(Protocol):
    def return_from_editor(self) -> None: ...


class SessionState(Enum):
    INACTIVE = "inactive"
    ACTIVE = "active"


class EditorSession:
    """Owns the level being edited and turns pointer and keyboard input into edits.

    The session is INACTIVE until show() is called. While ACTIVE it is
    subscribed to its input hub; hide() unsubscribes it, and the next show()
    replaces the map with a fresh empty one.
    """

    def __init__(
        self,
        store: LevelStore,
        dialogs: Dialogs,
        gameplay: GameplayEngine,
        host: EditorHost,
        input_hub: Any = None,
        *,
        navigator: Optional[PaletteNavigator] = None,
        grid_size: Tuple[int, int] = (config.DEFAULT_GRID_WIDTH, config.DEFAULT_GRID_HEIGHT),
        viewport_size: Tuple[int, int] = (config.EDITOR_WIDTH, config.EDITOR_HEIGHT),
        tile_size: int = config.TILE_OUTPUT_SIZE,
    ) -> None:
        self.store = store
        self.dialogs = dialogs
        self.gameplay = gameplay
        self.host = host
        self.input_hub = input_hub
        self.navigator = navigator or PaletteNavigator()
        self.grid_size = grid_size
        self.tile_size = tile_size

        self.state = SessionState.INACTIVE
        self.tile_map = TileMap.create_empty(*grid_size)
        self.current_layer = LayerRole.TERRAIN
        self.current_tile = config.EMPTY_TILE_ID
        self.show_grid = True
        self.has_unsaved_changes = False
        self.pointer_held = False
        self.status_message = ""
        self.viewport_size = viewport_size
        self.relayout(*viewport_size)

    # Lifecycle ------------------------------------------------------------
    @property
    def is_active(self) -> bool:
        return self.state is SessionState.ACTIVE

    def show(self) -> None:
        if self.is_active:
            return
        self._replace_map(TileMap.create_empty(*self.grid_size))
        self.current_layer = LayerRole.TERRAIN
        self.current_tile = config.EMPTY_TILE_ID
        self.pointer_held = False
        self._refresh_strip()
        self.state = SessionState.ACTIVE
        if self.input_hub is not None:
            self.input_hub.subscribe(self)
        self.status_message = "Editing a new level."
        logger.info("Level editor opened")

    def hide(self) -> None:
        if not self.is_active:
            return
        if self.input_hub is not None:
            self.input_hub.unsubscribe(self)
        self.state = SessionState.INACTIVE
        self.pointer_held = False
        logger.info("Level editor closed")

    # Layout ---------------------------------------------------------------
    def relayout(self, viewport_width: int, viewport_height: int) -> None:
        self.viewport_size = (viewport_width, viewport_height)
        self.mapper = CoordinateMapper.fit(
            self.tile_map.width,
            self.tile_map.height,
            viewport_width,
            viewport_height,
            tile_size=self.tile_size,
        )
        self.navigator.relayout(available_palette_width(viewport_width))
        self._refresh_strip()

    def _refresh_strip(self) -> None:
        width, height = self.viewport_size
        self.strip = PaletteStripLayout(width, height, self.palette, self.navigator.per_row)

    @property
    def scale_factor(self) -> float:
        return self.mapper.scale_factor

    @property
    def palette(self) -> Tuple[int, ...]:
        return self.navigator.palette(self.current_layer)

    # Pointer input --------------------------------------------------------
    def pointer_down(self, px: float, py: float) -> None:
        if not self.is_active:
            return
        self.pointer_held = True
        if self.mapper.in_reserved_strip(py):
            self._handle_strip_click(px, py)
            return
        self._paint_at(px, py)

    def pointer_move(self, px: float, py: float) -> None:
        if not self.is_active or not self.pointer_held:
            return
        if self.mapper.in_reserved_strip(py):
            return
        self._paint_at(px, py)

    def pointer_up(self, px: float = 0, py: float = 0) -> None:
        self.pointer_held = False

    def _paint_at(self, px: float, py: float) -> None:
        cell = self.mapper.to_cell(px, py)
        if cell is None:
            logger.debug("Pointer (%s, %s) is off the grid", px, py)
            return
        self.paint_cell(*cell)

    def _handle_strip_click(self, px: float, py: float) -> None:
        hit: Optional[StripHit] = self.strip.hit_test((px, py))
        if hit is None:
            return
        if hit.kind == "tile":
            self.select_tile(hit.value)
        elif hit.kind == "layer":
            self.select_layer(hit.value)
        elif hit.kind == "action":
            # Button presses never start a paint drag.
            self.pointer_held = False
            self.handle_action(hit.value)

    # Editing --------------------------------------------------------------
    def paint_cell(self, x: int, y: int, tile_id: Optional[int] = None) -> bool:
        """Write tile_id (default: the selected tile) on the current layer."""
        tile_id = self.current_tile if tile_id is None else tile_id
        role = self.current_layer
        if role is LayerRole.ENTITIES and tile_id == config.PLAYER_TILE_ID:
            changed = self._place_player(x, y)
        else:
            changed = self.tile_map.set_tile(role, x, y, tile_id)
        if changed:
            self.has_unsaved_changes = True
        return changed

    def _place_player(self, x: int, y: int) -> bool:
        if not self.tile_map.in_bounds(x, y):
            return False
        changed = False
        for cell in self.tile_map.positions(LayerRole.ENTITIES, config.PLAYER_TILE_ID):
            if cell != (x, y):
                changed |= self.tile_map.set_tile(LayerRole.ENTITIES, cell[0], cell[1], config.EMPTY_TILE_ID)
        if self.tile_map.get_tile(LayerRole.ENTITIES, x, y) == config.BOX_TILE_ID:
            self.status_message = f"Player placed over the box at ({x}, {y})."
            logger.info("Player marker replaced a box at (%d, %d)", x, y)
        changed |= self.tile_map.set_tile(LayerRole.ENTITIES, x, y, config.PLAYER_TILE_ID)
        return changed

    def select_layer(self, role: LayerRole) -> None:
        self.current_layer = role
        self.current_tile = config.EMPTY_TILE_ID
        self._refresh_strip()
        self.status_message = f"Editing layer: {role.label}"

    def select_tile(self, tile_id: int) -> bool:
        if not self.navigator.contains(self.current_layer, tile_id):
            return False
        self.current_tile = tile_id
        return True

    def navigate_palette(self, direction: Direction) -> int:
        self.current_tile = self.navigator.select_next(self.current_layer, direction, self.current_tile)
        return self.current_tile

    def toggle_grid(self) -> bool:
        self.show_grid = not self.show_grid
        return self.show_grid

    # Keyboard commands ----------------------------------------------------
    def handle_action(self, action: str) -> bool:
        if not self.is_active:
            return False
        if action in LAYER_ACTIONS:
            self.select_layer(LAYER_ACTIONS[action])
        elif action in PALETTE_ACTIONS:
            self.navigate_palette(PALETTE_ACTIONS[action])
        elif action == "toggle_grid":
            self.toggle_grid()
        elif action == "test_level":
            self.test_level()
        elif action == "save_level":
            self.save_level()
        elif action == "new_level":
            self.new_level()
        elif action == "exit_editor":
            self.exit_editor()
        elif action == "load_level":
            self.choose_saved_level()
        elif action == "import_level":
            self.import_level()
        elif action == "export_level":
            self.export_level()
        else:
            return False
        return True

    def test_level(self) -> bool:
        problem = validate_level(self.tile_map)
        if problem is not None:
            self._report(problem.message)
            return False
        self.gameplay.test_custom_level(self.tile_map.clone().to_dict())
        self.status_message = "Testing level."
        logger.info("Trial run started")
        return True

    def save_level(self) -> Optional[PersistedLevel]:
        problem = validate_level(self.tile_map)
        if problem is not None:
            self._report(problem.message)
            return None
        name = self.dialogs.prompt("Enter a name for this level:", config.DEFAULT_LEVEL_NAME)
        if name is None:
            self.status_message = "Save cancelled."
            return None
        try:
            level = self.store.save(self.tile_map, name)
        except EditorError as exc:
            self._report(str(exc))
            return None
        self.has_unsaved_changes = False
        self._report("Level saved successfully!")
        return level

    def new_level(self) -> bool:
        if self.has_unsaved_changes and not self.dialogs.confirm(CONFIRM_NEW):
            return False
        self._replace_map(TileMap.create_empty(*self.grid_size))
        self.status_message = "Started a new level."
        return True

    def exit_editor(self) -> bool:
        if self.has_unsaved_changes and not self.dialogs.confirm(CONFIRM_EXIT):
            return False
        self.hide()
        self.host.return_from_editor()
        return True

    # Loading and file exchange --------------------------------------------
    def saved_levels(self) -> List[PersistedLevel]:
        return self.store.load_all()

    def load_level(self, level: PersistedLevel) -> bool:
        if self.has_unsaved_changes and not self.dialogs.confirm(CONFIRM_REPLACE):
            return False
        self._replace_map(level.tile_map.clone())
        self.status_message = f"Loaded '{level.level_name}' by {level.author_name}."
        logger.info("Loaded saved level '%s'", level.level_name)
        return True

    def choose_saved_level(self) -> bool:
        levels = self.saved_levels()
        if not levels:
            self._report("No saved levels yet.")
            return False
        labels = [f"{level.level_name} ({level.author_name})" for level in levels]
        choice = self.dialogs.choose("Load which level?", labels)
        if choice is None:
            return False
        return self.load_level(levels[choice])

    def import_level(self, path: Optional[str] = None) -> bool:
        if path is None:
            path = self.dialogs.prompt("Import level from file:", config.TRIAL_LEVEL_PATH)
            if not path:
                return False
        if self.has_unsaved_changes and not self.dialogs.confirm(CONFIRM_REPLACE):
            return False
        try:
            tile_map = TileMap.load(path)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError, RuntimeDataValidationError, EditorError) as exc:
            self._report(f"Could not import {path}: {exc}")
            return False
        self._replace_map(tile_map)
        self.status_message = f"Imported {path}."
        return True

    def export_level(self, path: Optional[str] = None) -> bool:
        if path is None:
            path = self.dialogs.prompt("Export level to file:", config.TRIAL_LEVEL_PATH)
            if not path:
                return False
        try:
            self.tile_map.save(path)
        except OSError as exc:
            self._report(f"Could not export {path}: {exc}")
            return False
        self.status_message = f"Exported {path}."
        logger.info("Exported level to %s", path)
        return True

    # Helpers --------------------------------------------------------------
    def _replace_map(self, tile_map: TileMap) -> None:
        self.tile_map = tile_map
        self.has_unsaved_changes = False
        self.pointer_held = False
        self.relayout(*self.viewport_size)

    def _report(self, message: str) -> None:
        self.status_message = message
        logger.info(message)
        self.dialogs.alert(message)
