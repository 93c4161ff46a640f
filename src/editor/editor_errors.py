from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from src.editor.level_validator import LevelProblem


class EditorError(Exception):
    """Base class for errors raised by the level editor core."""


class InvalidDimensionError(EditorError, ValueError):
    """Raised when a map is created with a non-positive width or height."""

    def __init__(self, width: object, height: object) -> None:
        self.width = width
        self.height = height
        super().__init__(
            f"Map dimensions must be positive integers (width={width!r}, height={height!r})."
        )


class EmptyNameError(EditorError):
    """Raised when a level is saved without a name."""

    def __init__(self) -> None:
        super().__init__("A level name is required.")


class ValidationFailedError(EditorError):
    """Raised when an unplayable level is handed to the store."""

    def __init__(self, problem: "LevelProblem") -> None:
        self.problem = problem
        super().__init__(problem.message)


class LevelStoreError(EditorError):
    """Raised when saved levels cannot be written back to storage."""
