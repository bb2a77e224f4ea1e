"""Shared validation helpers for to_dict / from_dict round-trips."""

import base64
import binascii
from collections.abc import Mapping
from datetime import datetime, timezone


def as_str_object_dict(value: object, *, field_name: str) -> dict[str, object]:
    """Validate and normalize a mapping value into ``dict[str, object]``."""
    if not isinstance(value, Mapping):
        msg = f"{field_name} must be a mapping."
        raise TypeError(msg)
    return {str(key): item for key, item in value.items()}


def require_string(value: object, *, field_name: str) -> str:
    """Validate a required string field (empty strings are allowed)."""
    if not isinstance(value, str):
        msg = f"{field_name} must be a string."
        raise TypeError(msg)
    return value


def optional_string(value: object, *, field_name: str) -> str | None:
    """Validate an optional string field."""
    if value is None:
        return None
    if not isinstance(value, str):
        msg = f"{field_name} must be a string or None."
        raise TypeError(msg)
    return value


def string_or_default(value: object, default: str, *, field_name: str) -> str:
    """Validate an optional string field, substituting ``default`` when missing."""
    result = optional_string(value, field_name=field_name)
    return default if result is None else result


def optional_int(value: object, *, field_name: str) -> int | None:
    """Validate an optional integer field (rejects booleans)."""
    if value is None:
        return None
    if not isinstance(value, int) or isinstance(value, bool):
        msg = f"{field_name} must be an int or None."
        raise TypeError(msg)
    return value


def require_int(value: object, *, field_name: str) -> int:
    """Validate a required integer field (rejects booleans)."""
    if not isinstance(value, int) or isinstance(value, bool):
        msg = f"{field_name} must be an int."
        raise TypeError(msg)
    return value


def require_bool(value: object, *, field_name: str, default: bool = False) -> bool:
    """Validate a boolean field; ``None`` falls back to ``default``."""
    if value is None:
        return default
    if not isinstance(value, bool):
        msg = f"{field_name} must be a bool."
        raise TypeError(msg)
    return value


def string_tuple(value: object, *, field_name: str) -> tuple[str, ...]:
    """Validate and normalize an optional sequence of strings into ``tuple[str, ...]``."""
    if value is None:
        return ()
    if not isinstance(value, (list, tuple)):
        msg = f"{field_name} must be a sequence of strings."
        raise TypeError(msg)

    result: list[str] = []
    for index, item in enumerate(value):
        if not isinstance(item, str):
            msg = f"{field_name}[{index}] must be a string."
            raise TypeError(msg)
        result.append(item)
    return tuple(result)


def string_mapping(value: object, *, field_name: str) -> dict[str, str]:
    """Validate an optional ``str -> str`` mapping."""
    if value is None:
        return {}
    data = as_str_object_dict(value, field_name=field_name)
    for key, item in data.items():
        if not isinstance(item, str):
            msg = f"{field_name}[{key!r}] must be a string."
            raise TypeError(msg)
    return {key: str(item) for key, item in data.items()}


def datetime_to_str(value: datetime) -> str:
    """Serialize a datetime as ISO-8601, assuming UTC for naive values."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


def require_datetime(value: object, *, field_name: str) -> datetime:
    """Parse a required ISO-8601 datetime string into an aware datetime."""
    if not isinstance(value, str):
        msg = f"{field_name} must be an ISO-8601 datetime string."
        raise TypeError(msg)
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError as exc:
        msg = f"{field_name} must be an ISO-8601 datetime string."
        raise ValueError(msg) from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def bytes_to_b64(data: bytes | None) -> str | None:
    """Encode optional bytes as ASCII base64."""
    if data is None:
        return None
    return base64.b64encode(data).decode("ascii")


def optional_b64_bytes(value: object, *, field_name: str) -> bytes | None:
    """Decode an optional base64 string into bytes."""
    if value is None:
        return None
    if not isinstance(value, str):
        msg = f"{field_name} must be a base64 string or None."
        raise TypeError(msg)
    try:
        return base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError) as exc:
        msg = f"{field_name} must be valid base64."
        raise ValueError(msg) from exc
