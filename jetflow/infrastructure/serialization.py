"""JSON serialization helpers for JetStream API payloads."""

import json
from typing import Any, TypeVar

from pydantic import BaseModel

from ..domain.exceptions import SerializationError

T = TypeVar("T", bound=BaseModel)


def serialize_to_json(obj: BaseModel) -> bytes:
    """Serialize a Pydantic model to JSON bytes."""
    try:
        return obj.model_dump_json(exclude_none=True).encode()
    except Exception as e:
        raise SerializationError(f"Failed to serialize to JSON: {e}") from e


def deserialize_from_json(data: bytes, model_class: type[T]) -> T:
    """Deserialize JSON bytes to a Pydantic model."""
    if not data or data.isspace():
        raise SerializationError("Empty or whitespace-only JSON data")
    try:
        return model_class.model_validate_json(data)
    except Exception as e:
        raise SerializationError(f"Failed to deserialize from JSON: {e}") from e


def serialize_dict(data: dict[str, Any]) -> bytes:
    """Serialize a dictionary to compact JSON bytes."""
    try:
        return json.dumps(data, separators=(",", ":"), default=str).encode()
    except Exception as e:
        raise SerializationError(f"Failed to serialize dict: {e}") from e


def deserialize_dict(data: bytes) -> dict[str, Any]:
    """Deserialize JSON bytes that must hold an object."""
    if not data or data.isspace():
        raise SerializationError("Empty or whitespace-only JSON data")
    try:
        decoded = json.loads(data.decode())
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise SerializationError(f"Invalid JSON format: {e}") from e
    if not isinstance(decoded, dict):
        raise SerializationError(f"Expected a JSON object, got {type(decoded).__name__}")
    return decoded
