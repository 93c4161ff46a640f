from __future__ import annotations

import copy
import json
import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from src.core import config
from src.core.runtime_data_validation import validate_level_payload
from src.editor.editor_errors import InvalidDimensionError


class LayerRole(Enum):
    """Fixed role of each of the three map layers, in document order."""

    TERRAIN = 0
    GOALS = 1
    ENTITIES = 2

    @property
    def document_name(self) -> str:
        return _DOCUMENT_NAMES[self]

    @property
    def layer_id(self) -> int:
        return self.value + 1

    @property
    def label(self) -> str:
        return self.name.capitalize()


_DOCUMENT_NAMES = {
    LayerRole.TERRAIN: "Maps",
    LayerRole.GOALS: "Goals",
    LayerRole.ENTITIES: "Blocks",
}

_LAYER_KEYS = {"id", "name", "type", "data", "opacity", "visible", "width", "height", "x", "y"}
_MAP_KEYS = {
    "width",
    "height",
    "layers",
    "orientation",
    "renderorder",
    "tilewidth",
    "tileheight",
    "tilesets",
    "version",
    "type",
}


@dataclass
class Layer:
    role: LayerRole
    data: List[int]
    opacity: float = 1
    visible: bool = True
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def id(self) -> int:
        return self.role.layer_id

    @property
    def name(self) -> str:
        return self.role.document_name


class TileMap:
    """Three-layer tile grid plus the Tiled metadata needed to round-trip it."""

    def __init__(
        self,
        width: int,
        height: int,
        layers: List[Layer],
        tile_width: int = config.TILE_SOURCE_SIZE,
        tile_height: int = config.TILE_SOURCE_SIZE,
        tilesets: Optional[List[Dict[str, Any]]] = None,
        orientation: str = config.MAP_ORIENTATION,
        render_order: str = config.MAP_RENDER_ORDER,
        version: str = config.MAP_FORMAT_VERSION,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        if not _is_positive_int(width) or not _is_positive_int(height):
            raise InvalidDimensionError(width, height)
        if [layer.role for layer in layers] != list(LayerRole):
            raise ValueError("A tile map needs exactly one layer per role, in role order.")
        for layer in layers:
            if len(layer.data) != width * height:
                raise ValueError(
                    f"Layer '{layer.name}' holds {len(layer.data)} tiles, expected {width * height}."
                )
        self.width = width
        self.height = height
        self.layers = layers
        self.tile_width = tile_width
        self.tile_height = tile_height
        self.tilesets = tilesets if tilesets is not None else default_tilesets()
        self.orientation = orientation
        self.render_order = render_order
        self.version = version
        self.extra = extra if extra is not None else default_map_extra()

    # Construction helpers -------------------------------------------------
    @classmethod
    def create_empty(cls, width: int, height: int) -> "TileMap":
        if not _is_positive_int(width) or not _is_positive_int(height):
            raise InvalidDimensionError(width, height)
        layers = [Layer(role=role, data=[config.EMPTY_TILE_ID] * (width * height)) for role in LayerRole]
        return cls(width, height, layers)

    @classmethod
    def from_dict(cls, raw: Dict[str, Any], *, source: str = "level.json") -> "TileMap":
        document = validate_level_payload(raw, source=source)
        layers = []
        for role, layer in zip(LayerRole, document["layers"]):
            layers.append(
                Layer(
                    role=role,
                    data=list(layer["data"]),
                    opacity=layer["opacity"],
                    visible=layer["visible"],
                    extra={k: copy.deepcopy(v) for k, v in layer.items() if k not in _LAYER_KEYS},
                )
            )
        return cls(
            width=document["width"],
            height=document["height"],
            layers=layers,
            tile_width=document["tilewidth"],
            tile_height=document["tileheight"],
            tilesets=copy.deepcopy(document["tilesets"]),
            orientation=document["orientation"],
            render_order=document["renderorder"],
            version=document["version"],
            extra={k: copy.deepcopy(v) for k, v in document.items() if k not in _MAP_KEYS},
        )

    @classmethod
    def from_json(cls, text: str, *, source: str = "level.json") -> "TileMap":
        return cls.from_dict(json.loads(text), source=source)

    @classmethod
    def load(cls, path: str) -> "TileMap":
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
        return cls.from_dict(raw, source=path)

    def to_dict(self) -> Dict[str, Any]:
        raw: Dict[str, Any] = copy.deepcopy(self.extra)
        raw.update(
            {
                "width": self.width,
                "height": self.height,
                "layers": [
                    {
                        **copy.deepcopy(layer.extra),
                        "data": list(layer.data),
                        "height": self.height,
                        "id": layer.id,
                        "name": layer.name,
                        "opacity": layer.opacity,
                        "type": "tilelayer",
                        "visible": layer.visible,
                        "width": self.width,
                        "x": 0,
                        "y": 0,
                    }
                    for layer in self.layers
                ],
                "orientation": self.orientation,
                "renderorder": self.render_order,
                "tileheight": self.tile_height,
                "tilesets": copy.deepcopy(self.tilesets),
                "tilewidth": self.tile_width,
                "type": "map",
                "version": self.version,
            }
        )
        return raw

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)

    def save(self, path: str) -> str:
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2)
        return path

    def clone(self) -> "TileMap":
        return copy.deepcopy(self)

    # Cell access ----------------------------------------------------------
    def layer(self, role: LayerRole) -> Layer:
        return self.layers[role.value]

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def get_tile(self, role: LayerRole, x: int, y: int) -> int:
        if not self.in_bounds(x, y):
            return config.EMPTY_TILE_ID
        return self.layer(role).data[y * self.width + x]

    def set_tile(self, role: LayerRole, x: int, y: int, tile_id: int) -> bool:
        """Write one cell. Returns True only when the stored value changed."""
        if tile_id < 0:
            raise ValueError(f"Tile ids are non-negative, got {tile_id}.")
        if not self.in_bounds(x, y):
            return False
        data = self.layer(role).data
        index = y * self.width + x
        if data[index] == tile_id:
            return False
        data[index] = tile_id
        return True

    def find_unique(self, role: LayerRole, tile_id: int) -> Optional[Tuple[int, int]]:
        data = self.layer(role).data
        try:
            index = data.index(tile_id)
        except ValueError:
            return None
        return index % self.width, index // self.width

    def positions(self, role: LayerRole, tile_id: int) -> List[Tuple[int, int]]:
        return [
            (index % self.width, index // self.width)
            for index, value in enumerate(self.layer(role).data)
            if value == tile_id
        ]

    def count(self, role: LayerRole, tile_id: Optional[int] = None) -> int:
        data = self.layer(role).data
        if tile_id is None:
            return sum(1 for value in data if value != config.EMPTY_TILE_ID)
        return data.count(tile_id)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TileMap):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self) -> str:
        return f"TileMap(width={self.width}, height={self.height})"


def default_tilesets() -> List[Dict[str, Any]]:
    return [{"firstgid": 1, "source": config.TILESET_SOURCE}]


def default_map_extra() -> Dict[str, Any]:
    return {
        "compressionlevel": -1,
        "infinite": False,
        "nextlayerid": len(LayerRole) + 1,
        "nextobjectid": 1,
        "tiledversion": config.TILED_VERSION,
    }


def _is_positive_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0
