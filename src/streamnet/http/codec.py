"""JSON codec for request bodies, response payloads and cached values.

Field names are snake_case both on the wire and in the models, and
datetimes travel as ISO-8601 strings; pydantic handles both.
"""

from __future__ import annotations

import json
from functools import lru_cache
from typing import Any, TypeVar, overload

import pydantic_core
from pydantic import TypeAdapter, ValidationError

from streamnet.errors.exceptions import DecodingError, EncodingError

T = TypeVar("T")


def encode_body(value: Any) -> bytes:
    """Serialize a model, a list of models or plain JSON data to bytes."""
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    try:
        return pydantic_core.to_json(value)
    except (pydantic_core.PydanticSerializationError, TypeError, ValueError) as e:
        raise EncodingError(f"Failed to encode {type(value).__name__}: {e}", cause=e) from e


@overload
def decode_body(data: bytes, type_: type[T]) -> T: ...


@overload
def decode_body(data: bytes, type_: None = None) -> Any: ...


def decode_body(data: bytes, type_: Any = None) -> Any:
    """Deserialize ``data``; validate into ``type_`` when given."""
    if type_ is bytes:
        return data
    try:
        if type_ is None:
            return json.loads(data) if data else None
        return _adapter(type_).validate_json(data)
    except (ValidationError, json.JSONDecodeError, UnicodeDecodeError) as e:
        target = getattr(type_, "__name__", repr(type_)) if type_ is not None else "JSON"
        raise DecodingError(f"Failed to decode response as {target}", cause=e) from e


@lru_cache(maxsize=128)
def _adapter(type_: Any) -> TypeAdapter:
    return TypeAdapter(type_)
