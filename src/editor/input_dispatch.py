from __future__ import annotations

from typing import Any, List, Optional, Tuple

import pygame

from src.core import config
from src.core.input_actions import InputActionMap, load_action_map


class EditorInputHub:
    """Routes pygame events to whichever editor handlers are subscribed.

    Mouse and touch share the pointer handlers. SDL also synthesizes mouse
    events for touches (flagged with ``event.touch``); those are dropped so a
    finger never paints twice, and only the first finger down drives the
    pointer until it lifts.
    """

    def __init__(
        self,
        action_map: Optional[InputActionMap] = None,
        viewport_size: Tuple[int, int] = (config.EDITOR_WIDTH, config.EDITOR_HEIGHT),
    ) -> None:
        self.action_map = action_map or load_action_map()
        self.viewport_size = viewport_size
        self._listeners: List[Any] = []
        self._finger_id: Optional[int] = None

    @property
    def listeners(self) -> Tuple[Any, ...]:
        return tuple(self._listeners)

    def subscribe(self, listener: Any) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: Any) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)
        if not self._listeners:
            self._finger_id = None

    def dispatch(self, event: pygame.event.Event) -> bool:
        """
        Translate one pygame event into handler calls.

        Returns:
            bool: True if the event reached at least one subscriber.
        """
        if not self._listeners:
            return False

        if event.type in (pygame.MOUSEBUTTONDOWN, pygame.MOUSEBUTTONUP, pygame.MOUSEMOTION):
            if getattr(event, "touch", False):
                return False
            if event.type == pygame.MOUSEMOTION:
                return self._emit("pointer_move", *event.pos)
            if event.button != 1:
                return False
            if event.type == pygame.MOUSEBUTTONDOWN:
                return self._emit("pointer_down", *event.pos)
            return self._emit("pointer_up", *event.pos)

        if event.type == pygame.FINGERDOWN:
            if self._finger_id is not None:
                return False
            self._finger_id = event.finger_id
            return self._emit("pointer_down", *self._finger_pos(event))
        if event.type == pygame.FINGERMOTION:
            if event.finger_id != self._finger_id:
                return False
            return self._emit("pointer_move", *self._finger_pos(event))
        if event.type == pygame.FINGERUP:
            if event.finger_id != self._finger_id:
                return False
            self._finger_id = None
            return self._emit("pointer_up", *self._finger_pos(event))

        if event.type == pygame.KEYDOWN:
            handled = False
            for action in self.action_map.editor_actions_for_event(event):
                handled = self._emit("handle_action", action) or handled
            return handled

        return False

    def _finger_pos(self, event: pygame.event.Event) -> Tuple[float, float]:
        # Finger coordinates are normalized to the window.
        width, height = self.viewport_size
        return event.x * width, event.y * height

    def _emit(self, method: str, *args: Any) -> bool:
        # Copy first: a handler may unsubscribe (e.g. on exit).
        listeners = list(self._listeners)
        for listener in listeners:
            getattr(listener, method)(*args)
        return bool(listeners)
