from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from src.core import config
from src.core.runtime_data_validation import (
    RuntimeDataValidationError,
    validate_persisted_level_payload,
)
from src.core.storage import KeyValueStorage
from src.editor.editor_errors import EmptyNameError, LevelStoreError
from src.editor.level_validator import ensure_playable
from src.editor.tile_map import TileMap

logger = logging.getLogger(__name__)

_WRAPPER_KEYS = ("levelName", "authorName", "createdDate")


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass
class PersistedLevel:
    tile_map: TileMap
    level_name: str
    author_name: str
    created_date: str

    def to_dict(self) -> Dict[str, Any]:
        raw = self.tile_map.to_dict()
        raw["levelName"] = self.level_name
        raw["authorName"] = self.author_name
        raw["createdDate"] = self.created_date
        return raw

    @classmethod
    def from_dict(cls, raw: Dict[str, Any], *, source: str = config.CUSTOM_LEVELS_KEY) -> "PersistedLevel":
        document = validate_persisted_level_payload(raw, source=source)
        map_document = {k: v for k, v in document.items() if k not in _WRAPPER_KEYS}
        return cls(
            tile_map=TileMap.from_dict(map_document, source=source),
            level_name=document["levelName"],
            author_name=document["authorName"],
            created_date=document["createdDate"],
        )


class LevelStore:
    """Append-only list of saved levels kept under one storage key."""

    def __init__(
        self,
        storage: KeyValueStorage,
        *,
        levels_key: str = config.CUSTOM_LEVELS_KEY,
        author_key: str = config.AUTHOR_NAME_KEY,
        clock: Callable[[], str] = _utc_timestamp,
    ) -> None:
        self.storage = storage
        self.levels_key = levels_key
        self.author_key = author_key
        self._clock = clock

    # Reading --------------------------------------------------------------
    def _read_raw_levels(self) -> List[Any]:
        try:
            text = self.storage.get_item(self.levels_key)
        except OSError as exc:
            logger.warning("Could not read saved levels: %s", exc)
            return []
        if not text:
            return []
        try:
            raw = json.loads(text)
        except json.JSONDecodeError as exc:
            logger.warning("Saved levels under '%s' are corrupt, treating as empty: %s", self.levels_key, exc)
            return []
        if not isinstance(raw, list):
            logger.warning("Saved levels under '%s' are not a list, treating as empty", self.levels_key)
            return []
        return raw

    def load_all(self) -> List[PersistedLevel]:
        levels: List[PersistedLevel] = []
        for index, entry in enumerate(self._read_raw_levels()):
            try:
                levels.append(PersistedLevel.from_dict(entry, source=f"{self.levels_key}[{index}]"))
            except RuntimeDataValidationError as exc:
                logger.warning("Skipping saved level %d: %s", index, exc)
        return levels

    def author_name(self) -> str:
        try:
            name = self.storage.get_item(self.author_key)
        except OSError as exc:
            logger.warning("Could not read author name: %s", exc)
            name = None
        return name or config.DEFAULT_AUTHOR_NAME

    # Writing --------------------------------------------------------------
    def remember_author(self, name: str) -> None:
        name = (name or "").strip()
        if not name:
            raise EmptyNameError()
        try:
            self.storage.set_item(self.author_key, name)
        except OSError as exc:
            raise LevelStoreError(f"Could not store author name: {exc}") from exc

    def save(self, tile_map: TileMap, name: Optional[str], author: Optional[str] = None) -> PersistedLevel:
        ensure_playable(tile_map)
        if name is None or not name.strip():
            raise EmptyNameError()

        level = PersistedLevel(
            tile_map=tile_map.clone(),
            level_name=name,
            author_name=author or self.author_name(),
            created_date=self._clock(),
        )
        # Entries this version cannot parse are carried over untouched.
        raw_levels = self._read_raw_levels()
        raw_levels.append(level.to_dict())
        try:
            self.storage.set_item(self.levels_key, json.dumps(raw_levels))
        except (OSError, TypeError, ValueError) as exc:
            raise LevelStoreError(f"Could not write saved levels: {exc}") from exc
        logger.info("Saved level '%s' by %s (%d stored)", level.level_name, level.author_name, len(raw_levels))
        return level
