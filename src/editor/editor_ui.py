from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, Tuple

import pygame

from src.core import config
from src.editor.tile_map import LayerRole

ACTION_BUTTONS: Tuple[Tuple[str, str], ...] = (
    ("test_level", "Test [T]"),
    ("save_level", "Save [S]"),
    ("new_level", "New [N]"),
    ("exit_editor", "Exit [Esc]"),
)


class Button:
    """
    A clickable labelled rectangle in the palette strip.

    Attributes:
        rect (pygame.Rect): Position and size of the button.
        text (str): Label drawn centred on the button.
        value: Payload returned by hit-testing (a LayerRole or an action name).
        hint (str): Optional second line, e.g. the keyboard shortcut.
    """

    def __init__(self, rect, text, value=None, hint="", color=config.BUTTON_COLOR):
        self.rect = pygame.Rect(rect)
        self.text = text
        self.value = value
        self.hint = hint
        self.color = color
        self.active_color = config.BUTTON_ACTIVE_COLOR

    def draw(self, surface, font, active=False, hint_font=None):
        """
        Draw the button on a given surface.

        Args:
            surface (pygame.Surface): Target surface.
            font (pygame.font.Font): Font for the label.
            active (bool): Draw with the highlight color.
            hint_font (pygame.font.Font, optional): Font for the hint line under the button.
        """
        color = self.active_color if active else self.color
        pygame.draw.rect(surface, color, self.rect)
        text_surf = font.render(self.text, True, config.WHITE)
        surface.blit(text_surf, text_surf.get_rect(center=self.rect.center))
        if self.hint and hint_font is not None:
            hint_surf = hint_font.render(self.hint, True, config.WHITE)
            surface.blit(hint_surf, hint_surf.get_rect(midtop=(self.rect.centerx, self.rect.bottom + 1)))

    def collides(self, pos):
        return self.rect.collidepoint(pos)


@dataclass(frozen=True)
class PaletteCell:
    rect: pygame.Rect
    tile_id: int


@dataclass(frozen=True)
class StripHit:
    kind: str  # "tile", "layer" or "action"
    value: Any


class PaletteStripLayout:
    """Geometry of the reserved strip along the bottom of the editor viewport."""

    def __init__(
        self,
        viewport_width: int,
        viewport_height: int,
        palette: Sequence[int],
        per_row: int,
        strip_height: int = config.PALETTE_STRIP_HEIGHT,
    ) -> None:
        self.viewport_width = viewport_width
        self.viewport_height = viewport_height
        self.strip_top = viewport_height - strip_height
        self.strip_rect = pygame.Rect(0, self.strip_top, viewport_width, strip_height)
        self.button_area_x = available_palette_width(viewport_width)
        self.per_row = max(1, per_row)
        self.cells = self._layout_cells(palette)
        self.layer_buttons = self._layout_layer_buttons()
        self.action_buttons = self._layout_action_buttons()

    def _layout_cells(self, palette: Sequence[int]) -> List[PaletteCell]:
        size = config.PALETTE_TILE_SIZE
        stride = size + config.PALETTE_TILE_MARGIN
        cells: List[PaletteCell] = []
        for index, tile_id in enumerate(palette):
            row, col = divmod(index, self.per_row)
            x = config.PALETTE_PADDING + col * stride
            y = self.strip_top + config.PALETTE_PADDING + row * stride
            # Rows that would overflow the viewport are not shown.
            if y + size > self.viewport_height:
                continue
            cells.append(PaletteCell(pygame.Rect(x, y, size, size), tile_id))
        return cells

    def _button_x(self, index: int, count: int) -> int:
        return self.viewport_width - (count - index) * config.STRIP_BUTTON_WIDTH - config.STRIP_BUTTON_GAP

    def _layout_layer_buttons(self) -> List[Button]:
        roles = list(LayerRole)
        width = config.STRIP_BUTTON_WIDTH - config.STRIP_BUTTON_GAP
        return [
            Button(
                (self._button_x(i, len(roles)), self.strip_top + 10, width, config.LAYER_BUTTON_HEIGHT),
                role.label,
                value=role,
                hint=f"[{i + 1}]",
            )
            for i, role in enumerate(roles)
        ]

    def _layout_action_buttons(self) -> List[Button]:
        width = config.STRIP_BUTTON_WIDTH - config.STRIP_BUTTON_GAP
        return [
            Button(
                (self._button_x(i, len(ACTION_BUTTONS)), self.strip_top + 60, width, config.ACTION_BUTTON_HEIGHT),
                label,
                value=action,
                color=config.ACTION_BUTTON_COLOR,
            )
            for i, (action, label) in enumerate(ACTION_BUTTONS)
        ]

    def hit_test(self, pos: Tuple[float, float]) -> Optional[StripHit]:
        x, y = int(pos[0]), int(pos[1])
        pos = (x, y)
        if y < self.strip_top:
            return None
        if x > self.button_area_x:
            for button in self.layer_buttons:
                if button.collides(pos):
                    return StripHit("layer", button.value)
            for button in self.action_buttons:
                if button.collides(pos):
                    return StripHit("action", button.value)
            return None
        for cell in self.cells:
            if cell.rect.collidepoint(pos):
                return StripHit("tile", cell.tile_id)
        return None


def available_palette_width(viewport_width: int) -> int:
    return max(0, viewport_width - config.PALETTE_BUTTON_AREA_WIDTH)
