from __future__ import annotations

import json
import logging
import os
from typing import Dict, List, Mapping, Optional, Sequence, Set, Tuple

import pygame

from src.core import config

logger = logging.getLogger(__name__)

ActionBindings = Dict[str, Tuple[int, ...]]


DEFAULT_ACTION_BINDINGS: ActionBindings = {
    "layer_terrain": (pygame.K_1, pygame.K_KP1),
    "layer_goals": (pygame.K_2, pygame.K_KP2),
    "layer_entities": (pygame.K_3, pygame.K_KP3),
    "toggle_grid": (pygame.K_g,),
    "test_level": (pygame.K_t,),
    "save_level": (pygame.K_s,),
    "new_level": (pygame.K_n,),
    "exit_editor": (pygame.K_ESCAPE,),
    "load_level": (pygame.K_l,),
    "import_level": (pygame.K_i,),
    "export_level": (pygame.K_e,),
    "palette_up": (pygame.K_UP,),
    "palette_down": (pygame.K_DOWN,),
    "palette_left": (pygame.K_LEFT,),
    "palette_right": (pygame.K_RIGHT,),
    "confirm": (pygame.K_RETURN, pygame.K_KP_ENTER, pygame.K_y),
    "cancel": (pygame.K_ESCAPE, pygame.K_n),
}

# Actions only meaningful inside a dialog; the editor canvas ignores them.
DIALOG_ACTIONS = frozenset({"confirm", "cancel"})

EXCLUSIVE_ACTION_GROUPS: Tuple[Tuple[str, ...], ...] = (
    ("layer_terrain", "layer_goals", "layer_entities"),
    ("palette_up", "palette_down", "palette_left", "palette_right"),
    (
        "toggle_grid",
        "test_level",
        "save_level",
        "new_level",
        "exit_editor",
        "load_level",
        "import_level",
        "export_level",
    ),
    ("confirm", "cancel"),
)


def _resolve_key_code(raw_key: object) -> Optional[int]:
    if isinstance(raw_key, int):
        return raw_key
    if not isinstance(raw_key, str):
        return None
    token = raw_key.strip()
    if not token:
        return None
    if token.startswith("K_"):
        token = token[2:]
    try:
        return pygame.key.key_code(token.lower())
    except (ValueError, TypeError):
        return None


def _normalize_keys(raw_keys: Sequence[object]) -> Tuple[int, ...]:
    normalized: List[int] = []
    seen: Set[int] = set()
    for raw_key in raw_keys:
        key_code = _resolve_key_code(raw_key)
        if key_code is None or key_code in seen:
            continue
        seen.add(key_code)
        normalized.append(key_code)
    return tuple(normalized)


class InputActionMap:
    """Maps keyboard keys to named editor commands."""

    def __init__(self, bindings: Optional[Mapping[str, Sequence[object]]] = None) -> None:
        source = dict(DEFAULT_ACTION_BINDINGS)
        if bindings:
            for action, raw_keys in bindings.items():
                source[action] = tuple(raw_keys)
        self._bindings: ActionBindings = {
            action: _normalize_keys(raw_keys) for action, raw_keys in source.items()
        }

    @property
    def bindings(self) -> ActionBindings:
        return dict(self._bindings)

    def keys_for_action(self, action: str) -> Tuple[int, ...]:
        return self._bindings.get(action, ())

    def actions_for_key(self, key_code: int) -> Set[str]:
        return {action for action, keys in self._bindings.items() if key_code in keys}

    def actions_for_event(self, event: pygame.event.Event) -> Set[str]:
        if event.type != pygame.KEYDOWN:
            return set()
        return self.actions_for_key(event.key)

    def editor_actions_for_event(self, event: pygame.event.Event) -> List[str]:
        """Canvas commands for a key press, in binding order."""
        matches = self.actions_for_event(event) - DIALOG_ACTIONS
        return [action for action in self._bindings if action in matches]

    def matches(self, event: pygame.event.Event, action: str) -> bool:
        return action in self.actions_for_event(event)

    def detect_conflicts(
        self, exclusive_groups: Sequence[Sequence[str]] = EXCLUSIVE_ACTION_GROUPS
    ) -> List[Tuple[int, Tuple[str, ...]]]:
        key_to_actions: Dict[int, Set[str]] = {}
        for action, keys in self._bindings.items():
            for key in keys:
                key_to_actions.setdefault(key, set()).add(action)

        conflicts: List[Tuple[int, Tuple[str, ...]]] = []
        for key_code, actions in key_to_actions.items():
            for group in exclusive_groups:
                overlap = sorted(actions.intersection(group))
                if len(overlap) > 1:
                    conflicts.append((key_code, tuple(overlap)))
                    break
        return conflicts


def _load_binding_overrides(path: str) -> Dict[str, Tuple[int, ...]]:
    if not os.path.exists(path):
        return {}
    try:
        with open(path, "r", encoding="utf-8") as handle:
            data = json.load(handle)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        logger.warning("Ignoring unreadable key bindings %s: %s", path, exc)
        return {}
    if not isinstance(data, dict):
        return {}

    overrides: Dict[str, Tuple[int, ...]] = {}
    for action, raw_keys in data.items():
        if not isinstance(action, str) or not isinstance(raw_keys, list):
            continue
        overrides[action] = _normalize_keys(raw_keys)
    return overrides


def load_action_map(path: Optional[str] = None) -> InputActionMap:
    binding_path = path or os.path.join(config.DATA_DIR, "input_bindings.json")
    action_map = InputActionMap(_load_binding_overrides(binding_path))
    for key_code, actions in action_map.detect_conflicts():
        logger.warning("Key %s is bound to %s", pygame.key.name(key_code), ", ".join(actions))
    return action_map
