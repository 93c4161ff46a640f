from __future__ import annotations

from typing import List, Optional

import pygame

from src.core import config
from src.core.tilesheet import TileSheet
from src.editor.editor_session import EditorSession


class EditorRenderer:
    """Draws an EditorSession: canvas, layers, palette strip and HUD."""

    def __init__(self, tilesheet: Optional[TileSheet] = None) -> None:
        self.tilesheet = tilesheet or TileSheet.placeholder()
        self.hud_font = pygame.font.Font(config.DEFAULT_FONT, config.HUD_FONT_SIZE)
        self.palette_font = pygame.font.Font(config.DEFAULT_FONT, config.PALETTE_FONT_SIZE)
        self.button_font = pygame.font.Font(config.DEFAULT_FONT, config.BUTTON_FONT_SIZE)

    def draw(self, surface: pygame.Surface, session: EditorSession) -> None:
        surface.fill(config.EDITOR_BG_COLOR)
        if session.show_grid:
            self._draw_grid(surface, session)
        self._draw_layers(surface, session)
        self._draw_strip(surface, session)
        self._draw_hud(surface, session)

    def _draw_grid(self, surface: pygame.Surface, session: EditorSession) -> None:
        mapper = session.mapper
        x0, y0, width, height = mapper.grid_rect
        cell = mapper.cell_size
        overlay = pygame.Surface(surface.get_size(), pygame.SRCALPHA)
        for col in range(mapper.grid_width + 1):
            x = x0 + col * cell
            pygame.draw.line(overlay, config.GRID_LINE_COLOR, (x, y0), (x, y0 + height))
        for row in range(mapper.grid_height + 1):
            y = y0 + row * cell
            pygame.draw.line(overlay, config.GRID_LINE_COLOR, (x0, y), (x0 + width, y))
        surface.blit(overlay, (0, 0))

    def _draw_layers(self, surface: pygame.Surface, session: EditorSession) -> None:
        mapper = session.mapper
        cell = mapper.cell_size
        tile_map = session.tile_map
        tint = pygame.Surface((cell, cell), pygame.SRCALPHA)
        tint.fill(config.ACTIVE_LAYER_TINT)
        for layer in tile_map.layers:
            active = layer.role is session.current_layer
            for index, tile_id in enumerate(layer.data):
                image = self.tilesheet.tile_surface(tile_id, cell)
                if image is None:
                    continue
                dest = mapper.to_screen(index % tile_map.width, index // tile_map.width)
                surface.blit(image, dest)
                if active:
                    surface.blit(tint, dest)

    def _draw_strip(self, surface: pygame.Surface, session: EditorSession) -> None:
        strip = session.strip
        background = pygame.Surface(strip.strip_rect.size, pygame.SRCALPHA)
        background.fill(config.STRIP_BG_COLOR)
        surface.blit(background, strip.strip_rect.topleft)

        size = config.PALETTE_TILE_SIZE
        for cell in strip.cells:
            selected = cell.tile_id == session.current_tile
            backdrop = pygame.Surface((size, size), pygame.SRCALPHA)
            backdrop.fill(config.PALETTE_SELECTED_COLOR if selected else config.PALETTE_CELL_COLOR)
            surface.blit(backdrop, cell.rect.topleft)
            image = self.tilesheet.tile_surface(cell.tile_id, size)
            if image is None:
                # Empty tile: an X.
                r = cell.rect.inflate(-10, -10)
                pygame.draw.line(surface, config.GRAY_LIGHT, r.topleft, r.bottomright)
                pygame.draw.line(surface, config.GRAY_LIGHT, r.topright, r.bottomleft)
            else:
                surface.blit(image, cell.rect.topleft)
                label = self.palette_font.render(str(cell.tile_id), True, config.WHITE)
                surface.blit(label, label.get_rect(bottomright=(cell.rect.right - 2, cell.rect.bottom - 2)))
            if selected:
                pygame.draw.rect(surface, config.SELECTION_HIGHLIGHT_COLOR, cell.rect, 2)

        for button in strip.layer_buttons:
            button.draw(surface, self.button_font, active=button.value is session.current_layer, hint_font=self.palette_font)
        for button in strip.action_buttons:
            button.draw(surface, self.button_font)

    def _draw_hud(self, surface: pygame.Surface, session: EditorSession) -> None:
        for y, text, color in self.hud_lines(session):
            surface.blit(self.hud_font.render(text, True, color), (10, y))

    def hud_lines(self, session: EditorSession) -> List[tuple]:
        """(y, text, color) for each HUD line, top to bottom."""
        tile_map = session.tile_map
        lines = [
            (10, f"Editing Layer: {session.current_layer.label}", config.WHITE),
            (30, f"Grid: {tile_map.width}x{tile_map.height}", config.WHITE),
            (50, f"Tile Size: {session.mapper.cell_size}px ({tile_map.tile_width}px in game)", config.WHITE),
        ]
        y = 70
        if session.has_unsaved_changes:
            lines.append((y, "Unsaved Changes", config.YELLOW))
            y += 20
        if session.status_message:
            lines.append((y, session.status_message, config.GRAY_LIGHT))
        return lines
