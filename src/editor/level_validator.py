from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from src.core import config
from src.editor.editor_errors import ValidationFailedError
from src.editor.tile_map import LayerRole, TileMap


class ProblemKind(Enum):
    MISSING_PLAYER = "missing_player"
    NO_BOXES = "no_boxes"
    BOX_GOAL_MISMATCH = "box_goal_mismatch"


@dataclass(frozen=True)
class LevelProblem:
    kind: ProblemKind
    box_count: int = 0
    goal_count: int = 0

    @property
    def message(self) -> str:
        if self.kind is ProblemKind.MISSING_PLAYER:
            return "Error: Level must have exactly one player position."
        if self.kind is ProblemKind.NO_BOXES:
            return "Error: Level must have at least one box."
        return (
            f"Error: Number of boxes ({self.box_count}) must match "
            f"number of goals ({self.goal_count})."
        )


def validate_level(tile_map: TileMap) -> Optional[LevelProblem]:
    """Return the first playability problem of tile_map, or None when it can be played."""
    if tile_map.count(LayerRole.ENTITIES, config.PLAYER_TILE_ID) != 1:
        return LevelProblem(ProblemKind.MISSING_PLAYER)

    box_count = tile_map.count(LayerRole.ENTITIES, config.BOX_TILE_ID)
    if box_count == 0:
        return LevelProblem(ProblemKind.NO_BOXES)

    goal_count = tile_map.count(LayerRole.GOALS)
    if box_count != goal_count:
        return LevelProblem(ProblemKind.BOX_GOAL_MISMATCH, box_count=box_count, goal_count=goal_count)
    return None


def ensure_playable(tile_map: TileMap) -> None:
    problem = validate_level(tile_map)
    if problem is not None:
        raise ValidationFailedError(problem)
