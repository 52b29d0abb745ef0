"""Serialization protocols and implementations for cache storage.

Provides a Serializer protocol and implementations for converting values
to/from strings for cache storage.

Usage:
    serializer = DataclassListSerializer(MenuItem)
    cached_str = serializer.serialize(items)
    items = serializer.deserialize(cached_str)
"""

from __future__ import annotations

import json
from dataclasses import asdict, fields, is_dataclass
from typing import TYPE_CHECKING, Any, Protocol, TypeVar

if TYPE_CHECKING:
    from collections.abc import Sequence

T = TypeVar("T")


class Serializer(Protocol[T]):
    """Protocol for serializing and deserializing values for cache storage."""

    def serialize(self, value: T) -> str:
        """Convert a value to a string for cache storage."""
        ...

    def deserialize(self, data: str) -> T:
        """Convert a cached string back to the original value."""
        ...


class DataclassSerializer[T]:
    """Serializer for a single frozen dataclass.

    Args:
        dataclass_type: The dataclass type to serialize/deserialize.
        tuple_fields: Names of fields to restore as tuples, since JSON
            round-trips tuples as lists.
    """

    def __init__(self, dataclass_type: type[T], *, tuple_fields: tuple[str, ...] = ()) -> None:
        # Runtime check for dataclass, but type checker can't narrow generic T
        if not is_dataclass(dataclass_type):  # pyright: ignore[reportUnnecessaryComparison]
            raise TypeError(f"{dataclass_type} is not a dataclass")
        self._dataclass_type = dataclass_type
        self._tuple_fields = tuple_fields
        self._field_names = {f.name for f in fields(dataclass_type)}

    def serialize(self, value: T) -> str:
        """Convert a dataclass to a JSON string."""
        return json.dumps(self._to_dict(value))

    def deserialize(self, data: str) -> T:
        """Convert a JSON string back to a dataclass."""
        return self._from_dict(json.loads(data))

    def _to_dict(self, obj: T) -> dict[str, Any]:
        if not is_dataclass(obj):
            raise TypeError(f"{obj} is not a dataclass instance")
        return asdict(obj)  # type: ignore[arg-type]

    def _from_dict(self, data: dict[str, Any]) -> T:
        unknown = set(data) - self._field_names
        if unknown:
            raise ValueError(f"Unexpected fields for {self._dataclass_type.__name__}: {sorted(unknown)}")
        for field_name in self._tuple_fields:
            if field_name in data and isinstance(data[field_name], list):
                data[field_name] = tuple(data[field_name])
        return self._dataclass_type(**data)


class DataclassListSerializer[T](DataclassSerializer[T]):
    """Serializer for lists of frozen dataclasses.

    Deserializes to a ``list`` so list-shaped hit checks still hold after a
    round trip.
    """

    def serialize(self, value: Sequence[T]) -> str:  # type: ignore[override]
        """Convert a list of dataclasses to a JSON string."""
        return json.dumps([self._to_dict(item) for item in value])

    def deserialize(self, data: str) -> list[T]:  # type: ignore[override]
        """Convert a JSON string back to a list of dataclasses."""
        raw_list = json.loads(data)
        if not isinstance(raw_list, list):
            raise ValueError(f"Expected a JSON array, got {type(raw_list).__name__}")
        return [self._from_dict(item) for item in raw_list]


class JsonSerializer[T]:
    """Generic JSON serializer for simple types.

    Works with any JSON-serializable type (dicts, lists, primitives).
    """

    def serialize(self, value: T) -> str:
        """Convert a value to JSON string."""
        return json.dumps(value)

    def deserialize(self, data: str) -> T:
        """Convert a JSON string back to the original type."""
        return json.loads(data)


class StringSerializer:
    """Passthrough serializer for string values."""

    def serialize(self, value: str) -> str:
        """Return the string unchanged."""
        return value

    def deserialize(self, data: str) -> str:
        """Return the string unchanged."""
        return data
