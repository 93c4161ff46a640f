import colorsys
import logging
import os
from typing import Dict, Optional, Tuple

import pygame

from src.core import config

logger = logging.getLogger(__name__)


def tile_index_to_source_rect(tile_id: int, tiles_per_row: int, size: int) -> Tuple[int, int, int]:
    """Top-left corner and edge length of tile_id inside a sheet of square tiles.

    Tile ids are 1-based; anything at or below zero maps to the first tile.
    """
    index = max(tile_id - 1, 0)
    per_row = max(1, tiles_per_row)
    return (index % per_row) * size, (index // per_row) * size, size


def _placeholder_color(tile_id: int) -> Tuple[int, int, int, int]:
    # Golden-ratio hue steps keep neighbouring ids visually distinct.
    hue = (tile_id * 0.618033988749895) % 1.0
    r, g, b = colorsys.hsv_to_rgb(hue, 0.55, 0.85)
    return int(r * 255), int(g * 255), int(b * 255), 255


class TileSheet:
    """A tileset image cut into square tiles addressed by 1-based tile id."""

    def __init__(self, image: pygame.Surface, source_size: int = config.TILE_SOURCE_SIZE) -> None:
        self.image = image
        self.source_size = source_size
        self.tiles_per_row = max(1, image.get_width() // source_size)
        self._scaled: Dict[Tuple[int, int], pygame.Surface] = {}

    @classmethod
    def load(cls, path: Optional[str] = None, source_size: int = config.TILE_SOURCE_SIZE) -> "TileSheet":
        path = path or config.TILESET_IMAGE_PATH
        if os.path.exists(path):
            try:
                return cls(pygame.image.load(path), source_size)
            except pygame.error as e:
                logger.warning("Failed to load tileset %s: %s", path, e)
        else:
            logger.warning("Tileset image %s not found, using placeholder tiles", path)
        return cls.placeholder(source_size=source_size)

    @classmethod
    def placeholder(
        cls,
        tile_count: int = max(config.TERRAIN_PALETTE + (config.PLAYER_TILE_ID, config.BOX_TILE_ID)),
        source_size: int = config.TILE_SOURCE_SIZE,
        tiles_per_row: int = config.PLACEHOLDER_TILES_PER_ROW,
    ) -> "TileSheet":
        """Build a sheet of solid-colour tiles so the editor runs without art assets."""
        rows = (tile_count + tiles_per_row - 1) // tiles_per_row
        image = pygame.Surface((tiles_per_row * source_size, rows * source_size), pygame.SRCALPHA)
        for tile_id in range(1, tile_count + 1):
            x, y, size = tile_index_to_source_rect(tile_id, tiles_per_row, source_size)
            image.fill(_placeholder_color(tile_id), pygame.Rect(x, y, size, size))
        return cls(image, source_size)

    def source_rect(self, tile_id: int) -> pygame.Rect:
        x, y, size = tile_index_to_source_rect(tile_id, self.tiles_per_row, self.source_size)
        return pygame.Rect(x, y, size, size)

    def tile_surface(self, tile_id: int, target_size: int) -> Optional[pygame.Surface]:
        """Scaled image of tile_id, or None for the empty tile."""
        if tile_id <= config.EMPTY_TILE_ID:
            return None
        key = (tile_id, target_size)
        cached = self._scaled.get(key)
        if cached is not None:
            return cached
        rect = self.source_rect(tile_id).clip(self.image.get_rect())
        if rect.width == 0 or rect.height == 0:
            return None
        surface = pygame.transform.scale(self.image.subsurface(rect), (target_size, target_size))
        self._scaled[key] = surface
        return surface
