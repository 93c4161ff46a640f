from __future__ import annotations

import json
import logging
import os
import subprocess
from typing import Optional

import pygame

from src.core import config
from src.core.launcher import spawn_module
from src.core.scene_manager import Scene, SceneManager

logger = logging.getLogger(__name__)


class GameApp:
    """Top-level runtime owning the pygame window, the scene stack and the main loop.

    It is also the editor's host (return_from_editor) and its gameplay
    collaborator (test_custom_level): trial runs write the level document to
    disk and, when a gameplay module is configured, launch it as a child process.
    """

    def __init__(
        self,
        initial_scene: Optional[Scene] = None,
        *,
        title: str = "Sokoclone Level Editor",
        window_size: tuple[int, int] = (config.EDITOR_WIDTH, config.EDITOR_HEIGHT),
        trial_level_path: str = config.TRIAL_LEVEL_PATH,
        gameplay_module: Optional[str] = config.GAMEPLAY_MODULE,
    ) -> None:
        pygame.init()
        self.screen = pygame.display.set_mode(window_size, pygame.RESIZABLE)
        pygame.display.set_caption(title)
        self.clock = pygame.time.Clock()
        self.scene_manager = SceneManager(screen=self.screen)
        self.trial_level_path = trial_level_path
        self.gameplay_module = gameplay_module
        self.trial_process: Optional[subprocess.Popen] = None
        self.editor_scene: Optional[Scene] = None
        if initial_scene is not None:
            self.scene_manager.push(initial_scene)

    # Host -----------------------------------------------------------------
    def open_editor(self, scene: Scene) -> None:
        self.editor_scene = scene
        self.scene_manager.push(scene)

    def return_from_editor(self) -> None:
        if self.editor_scene is not None and self.scene_manager.current_scene is self.editor_scene:
            self.scene_manager.pop()
        self.editor_scene = None

    # Gameplay -------------------------------------------------------------
    def test_custom_level(self, level_document: dict) -> None:
        directory = os.path.dirname(self.trial_level_path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(self.trial_level_path, "w", encoding="utf-8") as f:
            json.dump(level_document, f, indent=2)
        logger.info("Trial level written to %s", self.trial_level_path)
        if self.gameplay_module:
            self.trial_process = spawn_module(self.gameplay_module, [self.trial_level_path])
        else:
            logger.info("No gameplay module configured; trial level left on disk")

    # Main loop ------------------------------------------------------------
    def run(self) -> None:
        while self.scene_manager.is_running:
            dt_seconds = self.clock.tick(config.FPS) / 1000.0

            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    self.scene_manager.stop()
                    break
                self.scene_manager.handle_event(event)
                if not self.scene_manager.is_running:
                    break

            if not self.scene_manager.is_running:
                break

            self.scene_manager.update(dt_seconds)
            self.scene_manager.draw(self.screen)
            pygame.display.flip()

        self.scene_manager.clear()
        pygame.quit()
