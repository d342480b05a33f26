"""
Cache Value Serialization

Default structured-text encoding for cached values, built on orjson.

orjson natively handles dicts, lists, str, int, float, bool, None,
dataclasses, datetime and UUID. Pydantic models are encoded through their
``model_dump`` output. Decoded values are plain JSON types: a datetime
comes back as its ISO string, a dataclass as a dict.
"""

from typing import Any

import orjson

from eventcache.core.exceptions import CacheDeserializationError, CacheSerializationError


def _default(obj: Any) -> Any:
    """Fallback encoder for types orjson does not handle natively."""
    if hasattr(obj, "model_dump"):
        return obj.model_dump(mode="json")
    if isinstance(obj, (set, frozenset)):
        return list(obj)
    raise TypeError(f"Type is not JSON serializable: {type(obj).__name__}")


class JsonSerializer:
    """orjson-backed Serializer used by the cache coordinator by default."""

    def dumps(self, value: Any) -> str:
        try:
            return orjson.dumps(value, default=_default).decode("utf-8")
        except TypeError as e:
            raise CacheSerializationError.from_exception(
                e, message=f"Value is not serializable: {e}", value_type=type(value).__name__
            ) from e

    def loads(self, raw: str) -> Any:
        try:
            return orjson.loads(raw)
        except orjson.JSONDecodeError as e:
            raise CacheDeserializationError.from_exception(
                e, message=f"Stored value is not valid JSON: {e}", length=len(raw)
            ) from e


def encoded_size(raw: str) -> int:
    """Size in bytes of serialized text as stored by the backend."""
    return len(raw.encode("utf-8"))
