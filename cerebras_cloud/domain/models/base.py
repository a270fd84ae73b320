"""
Wire mapping for domain models.

Models are frozen dataclasses. Field names on the wire are snake_case and
match the Python names except where a class lists them in WIRE_NAMES
(python name -> wire name). Nested models are declared in NESTED
(python name -> (model class, is_list)).
"""

from __future__ import annotations
import dataclasses
from typing import Any, ClassVar, Dict, Tuple, Type, TypeVar

from ..errors import ResponseParseError

T = TypeVar("T", bound="WireModel")

_MISSING = dataclasses.MISSING


class WireModel:
    """Mixin adding to_dict/from_dict to a dataclass."""

    WIRE_NAMES: ClassVar[Dict[str, str]] = {}
    NESTED: ClassVar[Dict[str, Tuple[type, bool]]] = {}

    @classmethod
    def wire_name(cls, field_name: str) -> str:
        return cls.WIRE_NAMES.get(field_name, field_name)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the wire shape, dropping None values."""
        out: Dict[str, Any] = {}
        for f in dataclasses.fields(self):  # type: ignore[arg-type]
            value = getattr(self, f.name)
            if value is None:
                continue
            out[self.wire_name(f.name)] = _dump(value)
        return out

    @classmethod
    def from_dict(cls: Type[T], data: Any) -> T:
        """Build an instance from a decoded JSON object.

        Raises ResponseParseError when data is not an object, a required
        field is missing, or a nested value has the wrong shape.
        """
        if not isinstance(data, dict):
            raise ResponseParseError(
                f"Expected a JSON object for {cls.__name__}, got {type(data).__name__}"
            )
        kwargs: Dict[str, Any] = {}
        for f in dataclasses.fields(cls):  # type: ignore[arg-type]
            key = cls.wire_name(f.name)
            required = f.default is _MISSING and f.default_factory is _MISSING  # type: ignore[misc]
            if key not in data or data[key] is None:
                if required:
                    raise ResponseParseError(f"{cls.__name__} is missing required field '{key}'")
                continue
            value = data[key]
            nested = cls.NESTED.get(f.name)
            if nested is not None:
                value = _load_nested(cls.__name__, key, value, *nested)
            kwargs[f.name] = value
        return cls(**kwargs)


def _dump(value: Any) -> Any:
    if isinstance(value, WireModel):
        return value.to_dict()
    if isinstance(value, (list, tuple)):
        return [_dump(v) for v in value]
    if isinstance(value, dict):
        return {k: _dump(v) for k, v in value.items()}
    return value


def _load_nested(owner: str, key: str, value: Any, model: type, is_list: bool) -> Any:
    if is_list:
        if not isinstance(value, list):
            raise ResponseParseError(f"{owner}.{key} must be a list")
        return [model.from_dict(item) for item in value]  # type: ignore[attr-defined]
    return model.from_dict(value)  # type: ignore[attr-defined]
