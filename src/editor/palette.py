from __future__ import annotations

import math
from enum import Enum
from typing import Dict, Mapping, Optional, Sequence, Tuple

from src.core import config
from src.editor.tile_map import LayerRole


class Direction(Enum):
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"


DEFAULT_PALETTES: Dict[LayerRole, Tuple[int, ...]] = {
    LayerRole.TERRAIN: tuple(config.TERRAIN_PALETTE),
    LayerRole.GOALS: tuple(config.GOALS_PALETTE),
    LayerRole.ENTITIES: tuple(config.ENTITIES_PALETTE),
}


def tiles_per_row(
    available_width: float,
    tile_cell: int = config.PALETTE_TILE_SIZE,
    margin: int = config.PALETTE_TILE_MARGIN,
) -> int:
    return max(1, math.floor(available_width / (tile_cell + margin)))


def next_palette_index(direction: Direction, current_index: int, length: int, per_row: int) -> Optional[int]:
    """Index reached from current_index, or None when the move is rejected.

    Up and Down move a whole row and stop at the edges. Left and Right step
    one cell and continue on the neighbouring row when they run off the
    current one.
    """
    row = current_index // per_row
    if direction is Direction.UP:
        candidate = current_index - per_row
    elif direction is Direction.DOWN:
        candidate = current_index + per_row
    elif direction is Direction.LEFT:
        candidate = current_index - 1
        if candidate >= 0 and candidate // per_row != row:
            candidate = min((row - 1) * per_row + per_row - 1, length - 1)
    else:
        candidate = current_index + 1
        if candidate // per_row != row:
            candidate = (row + 1) * per_row
    if 0 <= candidate < length:
        return candidate
    return None


class PaletteNavigator:
    """Per-layer tile palettes laid out as rows of ``per_row`` cells."""

    def __init__(self, palettes: Optional[Mapping[LayerRole, Sequence[int]]] = None, per_row: int = 1) -> None:
        source = palettes if palettes is not None else DEFAULT_PALETTES
        self._palettes: Dict[LayerRole, Tuple[int, ...]] = {role: tuple(source[role]) for role in LayerRole}
        self.per_row = max(1, per_row)

    def palette(self, role: LayerRole) -> Tuple[int, ...]:
        return self._palettes[role]

    def relayout(self, available_width: float) -> int:
        self.per_row = tiles_per_row(available_width)
        return self.per_row

    def contains(self, role: LayerRole, tile_id: int) -> bool:
        return tile_id in self._palettes[role]

    def select_next(self, role: LayerRole, direction: Direction, current_tile_id: int) -> int:
        palette = self._palettes[role]
        if not palette:
            return current_tile_id
        if current_tile_id not in palette:
            return palette[0]
        new_index = next_palette_index(direction, palette.index(current_tile_id), len(palette), self.per_row)
        if new_index is None:
            return current_tile_id
        return palette[new_index]
