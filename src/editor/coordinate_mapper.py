from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Tuple

from src.core import config


def clamp(value: float, minimum: float, maximum: float) -> float:
    return max(minimum, min(maximum, value))


def compute_scale_factor(
    grid_width: int,
    grid_height: int,
    available_width: float,
    available_height: float,
    tile_size: int,
) -> float:
    """Largest whole-pixel cell that fits the grid, as a clamped multiple of tile_size."""
    fitted_cell = math.floor(min(available_width / grid_width, available_height / grid_height))
    return clamp(fitted_cell / tile_size, config.MIN_SCALE_FACTOR, config.MAX_SCALE_FACTOR)


def cell_pixels(tile_size: int, scale_factor: float) -> int:
    # round() first so 40 * (58 / 40) lands on 58, not 57.
    return max(1, math.floor(round(tile_size * scale_factor, 9)))


def centered_origin(available: float, cells: int, cell_size: int) -> int:
    return max(0, math.floor((available - cells * cell_size) / 2))


@dataclass(frozen=True)
class CoordinateMapper:
    """Maps viewport pixels to grid cells for one layout of the editor canvas."""

    grid_width: int
    grid_height: int
    tile_size: int
    scale_factor: float
    origin_x: int
    origin_y: int
    viewport_width: int
    viewport_height: int
    reserved_height: int = config.PALETTE_STRIP_HEIGHT

    @classmethod
    def fit(
        cls,
        grid_width: int,
        grid_height: int,
        viewport_width: int,
        viewport_height: int,
        tile_size: int = config.TILE_OUTPUT_SIZE,
        reserved_height: int = config.PALETTE_STRIP_HEIGHT,
    ) -> "CoordinateMapper":
        available_height = viewport_height - reserved_height
        scale = compute_scale_factor(grid_width, grid_height, viewport_width, available_height, tile_size)
        cell = cell_pixels(tile_size, scale)
        return cls(
            grid_width=grid_width,
            grid_height=grid_height,
            tile_size=tile_size,
            scale_factor=scale,
            origin_x=centered_origin(viewport_width, grid_width, cell),
            origin_y=centered_origin(available_height, grid_height, cell),
            viewport_width=viewport_width,
            viewport_height=viewport_height,
            reserved_height=reserved_height,
        )

    @property
    def cell_size(self) -> int:
        # Cells are drawn on whole pixels, so hit-testing uses the same size.
        return cell_pixels(self.tile_size, self.scale_factor)

    @property
    def strip_top(self) -> int:
        return self.viewport_height - self.reserved_height

    @property
    def grid_rect(self) -> Tuple[int, int, int, int]:
        cell = self.cell_size
        return self.origin_x, self.origin_y, self.grid_width * cell, self.grid_height * cell

    def in_reserved_strip(self, py: float) -> bool:
        return py >= self.strip_top

    def to_cell(self, px: float, py: float) -> Optional[Tuple[int, int]]:
        if self.in_reserved_strip(py):
            return None
        cell = self.cell_size
        x = math.floor((px - self.origin_x) / cell)
        y = math.floor((py - self.origin_y) / cell)
        if 0 <= x < self.grid_width and 0 <= y < self.grid_height:
            return x, y
        return None

    def to_screen(self, cell_x: int, cell_y: int) -> Tuple[int, int]:
        cell = self.cell_size
        return self.origin_x + cell_x * cell, self.origin_y + cell_y * cell
