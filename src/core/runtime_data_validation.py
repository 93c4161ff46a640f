from __future__ import annotations

import json
from typing import Any, Dict, List, Literal, Sequence, Tuple

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from src.core import config

LAYER_NAMES = ("Maps", "Goals", "Blocks")


class RuntimeDataValidationError(ValueError):
    """Raised when a level document fails strict schema validation."""

    def __init__(self, source: str, errors: Sequence[Dict[str, Any]]) -> None:
        self.source = source
        self.errors = [self._normalize_error(error) for error in errors]
        super().__init__(self._build_message())

    @staticmethod
    def _normalize_error(error: Dict[str, Any]) -> Dict[str, Any]:
        loc = error.get("loc", ())
        if isinstance(loc, list):
            loc = tuple(loc)
        elif not isinstance(loc, tuple):
            loc = (loc,)
        return {"loc": loc, "msg": str(error.get("msg", "Unknown validation error."))}

    @staticmethod
    def _format_loc(loc: Tuple[Any, ...]) -> str:
        if not loc:
            return "<root>"
        text = ""
        for item in loc:
            if isinstance(item, int):
                text += f"[{item}]"
            elif text:
                text += f".{item}"
            else:
                text = str(item)
        return text

    def _build_message(self) -> str:
        lines = [f"{self.source} validation failed ({len(self.errors)} error(s))."]
        for error in self.errors:
            lines.append(f"- {self._format_loc(error['loc'])}: {error['msg']}")
        return "\n".join(lines)

    @classmethod
    def from_pydantic(cls, source: str, exc: ValidationError) -> "RuntimeDataValidationError":
        return cls(source=source, errors=exc.errors())


class _SchemaModel(BaseModel):
    model_config = ConfigDict(extra="allow")


class _TilesetRefModel(_SchemaModel):
    firstgid: int = Field(ge=1)
    source: str = Field(min_length=1)


class _TileLayerModel(_SchemaModel):
    id: int = Field(ge=1)
    name: Literal["Maps", "Goals", "Blocks"]
    type: Literal["tilelayer"]
    data: List[int]
    width: int = Field(ge=1, le=config.MAX_MAP_DIMENSION)
    height: int = Field(ge=1, le=config.MAX_MAP_DIMENSION)
    opacity: int | float = 1
    visible: bool = True
    x: int = 0
    y: int = 0

    @field_validator("opacity")
    @classmethod
    def _opacity_range(cls, value: int | float) -> int | float:
        if not 0 <= value <= 1:
            raise ValueError("opacity must be between 0 and 1.")
        return value

    @field_validator("data")
    @classmethod
    def _non_negative_tiles(cls, value: List[int]) -> List[int]:
        for index, tile_id in enumerate(value):
            if tile_id < 0:
                raise ValueError(f"data[{index}] must be a non-negative tile id.")
        return value

    @model_validator(mode="after")
    def _data_matches_size(self) -> "_TileLayerModel":
        expected = self.width * self.height
        if len(self.data) != expected:
            raise ValueError(
                f"layer '{self.name}' holds {len(self.data)} tiles, expected {expected} "
                f"(width={self.width}, height={self.height})."
            )
        return self


class _LevelDocumentModel(_SchemaModel):
    width: int = Field(ge=1, le=config.MAX_MAP_DIMENSION)
    height: int = Field(ge=1, le=config.MAX_MAP_DIMENSION)
    layers: List[_TileLayerModel] = Field(min_length=3, max_length=3)
    orientation: Literal["orthogonal"] = "orthogonal"
    renderorder: str = config.MAP_RENDER_ORDER
    tilewidth: int = Field(default=config.TILE_SOURCE_SIZE, ge=1)
    tileheight: int = Field(default=config.TILE_SOURCE_SIZE, ge=1)
    tilesets: List[_TilesetRefModel] = Field(default_factory=list)
    version: str = config.MAP_FORMAT_VERSION
    type: Literal["map"] = "map"

    @model_validator(mode="after")
    def _validate_layers(self) -> "_LevelDocumentModel":
        names = tuple(layer.name for layer in self.layers)
        if names != LAYER_NAMES:
            raise ValueError(f"layers must be ordered {list(LAYER_NAMES)}, got {list(names)}.")
        for layer in self.layers:
            if layer.width != self.width or layer.height != self.height:
                raise ValueError(
                    f"layer '{layer.name}' is {layer.width}x{layer.height}, "
                    f"map is {self.width}x{self.height}."
                )
        return self


class _PersistedLevelModel(_LevelDocumentModel):
    levelName: str = Field(min_length=1)
    authorName: str = config.DEFAULT_AUTHOR_NAME
    createdDate: str = Field(min_length=1)

    @field_validator("levelName")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("levelName must be a non-empty string.")
        return value


def _read_json(path: str) -> Any:
    with open(path, "r", encoding="utf-8") as handle:
        return json.load(handle)


def _validate_model(model: Any, payload: Any, *, source: str) -> Any:
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise RuntimeDataValidationError.from_pydantic(source, exc) from exc


def validate_level_payload(payload: Any, *, source: str = "level.json") -> dict[str, Any]:
    validated = _validate_model(_LevelDocumentModel, payload, source=source)
    return validated.model_dump()


def load_validated_level(path: str) -> dict[str, Any]:
    payload = _read_json(path)
    return validate_level_payload(payload, source=path)


def validate_persisted_level_payload(
    payload: Any, *, source: str = config.CUSTOM_LEVELS_KEY
) -> dict[str, Any]:
    validated = _validate_model(_PersistedLevelModel, payload, source=source)
    return validated.model_dump()
