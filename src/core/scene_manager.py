from __future__ import annotations

import logging
from typing import List, Optional

logger = logging.getLogger(__name__)


class Scene:
    """One screen of the app. The manager calls these hooks; all are optional."""

    name = "scene"

    def on_enter(self, manager: "SceneManager") -> None:
        return

    def on_exit(self, manager: "SceneManager") -> None:
        return

    def handle_event(self, manager: "SceneManager", event: object) -> None:
        return

    def update(self, manager: "SceneManager", dt_seconds: float) -> None:
        return

    def draw(self, manager: "SceneManager", screen: object) -> None:
        return


class SceneManager:
    """Stack of scenes; only the top one receives events and draws.

    A scene that gets covered by a push is exited, and entered again when
    it becomes the top of the stack after a pop. The manager stops once
    the stack empties.
    """

    def __init__(self, *, screen: object | None = None) -> None:
        self.screen = screen
        self._stack: List[Scene] = []
        self._running = True

    @property
    def current_scene(self) -> Optional[Scene]:
        return self._stack[-1] if self._stack else None

    @property
    def is_running(self) -> bool:
        return self._running and bool(self._stack)

    def stop(self) -> None:
        self._running = False

    def push(self, scene: Scene) -> None:
        self._leave_top(pop=False)
        self._enter(scene)

    def pop(self) -> Optional[Scene]:
        exiting = self._leave_top(pop=True)
        if self.current_scene is None:
            self._running = False
        else:
            self.current_scene.on_enter(self)
        return exiting

    def clear(self) -> None:
        while self._stack:
            self._leave_top(pop=True)
        self._running = False

    def _enter(self, scene: Scene) -> None:
        self._stack.append(scene)
        logger.debug("Entering scene %s", scene.name)
        scene.on_enter(self)

    def _leave_top(self, *, pop: bool) -> Optional[Scene]:
        scene = self.current_scene
        if scene is None:
            return None
        if pop:
            self._stack.pop()
        logger.debug("Leaving scene %s", scene.name)
        scene.on_exit(self)
        return scene

    def handle_event(self, event: object) -> None:
        if self.current_scene is not None:
            self.current_scene.handle_event(self, event)

    def update(self, dt_seconds: float) -> None:
        if self.current_scene is not None:
            self.current_scene.update(self, dt_seconds)

    def draw(self, screen: object | None = None) -> None:
        target = screen if screen is not None else self.screen
        if self.current_scene is not None and target is not None:
            self.current_scene.draw(self, target)
