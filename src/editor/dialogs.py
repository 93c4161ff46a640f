from typing import List, Optional

import pygame

from src.core import config
from src.core.input_actions import InputActionMap

MAX_INPUT_LENGTH = 64


class PygameDialogs:
    """Blocking modal dialogs drawn over the current editor frame.

    Each call runs its own small event loop and returns once the user
    answers, so the editor's handlers stay synchronous.
    """

    def __init__(self, screen: pygame.Surface, action_map: Optional[InputActionMap] = None) -> None:
        self.screen = screen
        self.action_map = action_map or InputActionMap()
        self.font = pygame.font.Font(config.DEFAULT_FONT, config.DIALOG_FONT_SIZE)
        self.clock = pygame.time.Clock()

    def confirm(self, message: str) -> bool:
        while True:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    return False
                if self.action_map.matches(event, "confirm"):
                    return True
                if self.action_map.matches(event, "cancel"):
                    return False
            self._draw_lines([message, "Y / Enter to confirm, N / Esc to cancel"])

    def prompt(self, message: str, default: str = "") -> Optional[str]:
        input_text = default
        while True:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    return None
                if event.type != pygame.KEYDOWN:
                    continue
                if event.key in (pygame.K_RETURN, pygame.K_KP_ENTER):
                    return input_text
                if event.key == pygame.K_ESCAPE:
                    return None
                if event.key == pygame.K_BACKSPACE:
                    input_text = input_text[:-1]
                elif event.unicode and event.unicode.isprintable() and len(input_text) < MAX_INPUT_LENGTH:
                    input_text += event.unicode
            self._draw_lines([message, "> " + input_text, "Enter to confirm, Esc to cancel"])

    def alert(self, message: str) -> None:
        while True:
            for event in pygame.event.get():
                if event.type in (pygame.QUIT, pygame.KEYDOWN, pygame.MOUSEBUTTONDOWN, pygame.FINGERDOWN):
                    return
            self._draw_lines([message, "Press any key to continue"])

    def choose(self, message: str, options: List[str]) -> Optional[int]:
        if not options:
            return None
        selected = 0
        while True:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    return None
                if event.type != pygame.KEYDOWN:
                    continue
                if event.key == pygame.K_UP:
                    selected = max(0, selected - 1)
                elif event.key == pygame.K_DOWN:
                    selected = min(len(options) - 1, selected + 1)
                elif event.key in (pygame.K_RETURN, pygame.K_KP_ENTER):
                    return selected
                elif event.key == pygame.K_ESCAPE:
                    return None
            # Show a window of options around the selection.
            first = max(0, min(selected - 4, len(options) - 9))
            visible = [
                ("> " if index == selected else "  ") + label
                for index, label in enumerate(options[first:first + 9], start=first)
            ]
            self._draw_lines([message, *visible, "Up/Down to pick, Enter to load, Esc to cancel"])

    def _draw_lines(self, lines: List[str]) -> None:
        overlay = pygame.Surface(self.screen.get_size(), pygame.SRCALPHA)
        overlay.fill(config.DIALOG_OVERLAY_COLOR)
        self.screen.blit(overlay, (0, 0))
        line_height = self.font.get_linesize() + 4
        top = self.screen.get_height() // 2 - (len(lines) * line_height) // 2
        for idx, line in enumerate(lines):
            surf = self.font.render(line, True, config.WHITE)
            rect = surf.get_rect(center=(self.screen.get_width() // 2, top + idx * line_height))
            self.screen.blit(surf, rect)
        pygame.display.flip()
        self.clock.tick(30)
