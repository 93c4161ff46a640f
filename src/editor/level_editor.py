from __future__ import annotations

import argparse
import logging
from typing import Optional

import pygame

from src.core import config
from src.core.input_actions import load_action_map
from src.core.scene_manager import Scene, SceneManager
from src.core.storage import JsonFileStorage
from src.core.tilesheet import TileSheet
from src.editor.dialogs import PygameDialogs
from src.editor.editor_renderer import EditorRenderer
from src.editor.editor_errors import LevelStoreError
from src.editor.editor_session import EditorSession
from src.editor.input_dispatch import EditorInputHub
from src.editor.level_store import LevelStore
from src.ui.game_app import GameApp

logger = logging.getLogger(__name__)


class EditorScene(Scene):
    """Hosts an EditorSession inside the app's scene stack."""

    name = "level_editor"

    def __init__(self, session: EditorSession, hub: EditorInputHub, renderer: EditorRenderer) -> None:
        self.session = session
        self.hub = hub
        self.renderer = renderer

    def on_enter(self, manager: SceneManager) -> None:
        if not self.session.is_active:
            self.session.show()

    def on_exit(self, manager: SceneManager) -> None:
        if self.session.is_active:
            self.session.hide()

    def handle_event(self, manager: SceneManager, event: object) -> None:
        if event.type == pygame.VIDEORESIZE:
            self.hub.viewport_size = (event.w, event.h)
            self.session.relayout(event.w, event.h)
            return
        self.hub.dispatch(event)

    def draw(self, manager: SceneManager, screen: object) -> None:
        self.renderer.draw(screen, self.session)


def build_editor_scene(
    app: GameApp,
    *,
    storage_path: Optional[str] = None,
    tileset_path: Optional[str] = None,
    grid_size: tuple[int, int] = (config.DEFAULT_GRID_WIDTH, config.DEFAULT_GRID_HEIGHT),
    author: Optional[str] = None,
) -> EditorScene:
    viewport = app.screen.get_size()
    store = LevelStore(JsonFileStorage(storage_path))
    if author:
        try:
            store.remember_author(author)
        except LevelStoreError as exc:
            logger.warning("%s", exc)
    action_map = load_action_map()
    hub = EditorInputHub(action_map, viewport_size=viewport)
    session = EditorSession(
        store,
        PygameDialogs(app.screen, action_map),
        app,
        app,
        hub,
        grid_size=grid_size,
        viewport_size=viewport,
    )
    return EditorScene(session, hub, EditorRenderer(TileSheet.load(tileset_path)))


def _positive_int(text: str) -> int:
    value = int(text)
    if value <= 0 or value > config.MAX_MAP_DIMENSION:
        raise argparse.ArgumentTypeError(f"expected 1..{config.MAX_MAP_DIMENSION}, got {text}")
    return value


def _author_name(text: str) -> str:
    name = text.strip()
    if not name:
        raise argparse.ArgumentTypeError("author name must not be blank")
    return name


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Sokoban level editor.")
    parser.add_argument(
        "--storage",
        help="Path of the JSON file that holds saved levels.",
    )
    parser.add_argument(
        "--tileset",
        help="Tileset image with 96x96 tiles (placeholder colours are used when missing).",
    )
    parser.add_argument(
        "--import",
        dest="import_path",
        help="Level document to open instead of an empty grid.",
    )
    parser.add_argument(
        "--author",
        type=_author_name,
        help="Author recorded on saved levels; remembered for later sessions.",
    )
    parser.add_argument("--width", type=_positive_int, default=config.DEFAULT_GRID_WIDTH, help="Grid width of new levels.")
    parser.add_argument("--height", type=_positive_int, default=config.DEFAULT_GRID_HEIGHT, help="Grid height of new levels.")
    parser.add_argument("--verbose", action="store_true", help="Log debug output.")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    app = GameApp()
    scene = build_editor_scene(
        app,
        storage_path=args.storage,
        tileset_path=args.tileset,
        grid_size=(args.width, args.height),
        author=args.author,
    )
    app.open_editor(scene)
    if args.import_path:
        scene.session.import_level(args.import_path)
    app.run()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
