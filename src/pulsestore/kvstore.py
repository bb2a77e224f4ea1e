"""KeyValueStore: the size-constrained metadata persistence port.

Managers receive a store through their constructor instead of reaching for
global state, so tests can swap in ``InMemoryKeyValueStore``.
"""

from __future__ import annotations

import contextlib
import logging
import os
import re
from pathlib import Path
from typing import Protocol, runtime_checkable

from pulsestore.errors import MetadataStoreError

logger = logging.getLogger(__name__)

_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")
_VALUE_SUFFIX = ".dat"


def warn_if_over_soft_limit(key: str, data: bytes, soft_limit_bytes: int) -> bool:
    """Log a warning when a value approaches the store's practical ceiling.

    The write still goes ahead; the store may accept it or truncate it.
    """
    if len(data) <= soft_limit_bytes:
        return False
    logger.warning(
        "Metadata for %r is %.2f MB, above the %.2f MB soft limit; the store may reject or truncate it",
        key,
        len(data) / 1024 / 1024,
        soft_limit_bytes / 1024 / 1024,
    )
    return True


def _validate_key(key: str) -> str:
    if not _KEY_PATTERN.match(key) or key in (".", ".."):
        raise MetadataStoreError(key, "keys may only contain letters, digits, '_', '.' and '-'")
    return key


def _check_size(key: str, data: bytes, max_value_bytes: int | None) -> None:
    if max_value_bytes is not None and len(data) > max_value_bytes:
        raise MetadataStoreError(key, f"value of {len(data)} bytes exceeds limit of {max_value_bytes} bytes")


@runtime_checkable
class KeyValueStore(Protocol):
    """Flat ``key -> bytes`` persistence surface."""

    def get(self, key: str) -> bytes | None:
        """Return the stored value, or ``None`` when the key is absent."""
        ...

    def set(self, key: str, data: bytes) -> None:
        """Replace the value stored under ``key``."""
        ...

    def delete(self, key: str) -> bool:
        """Remove ``key``. Return ``True`` when it existed."""
        ...


class InMemoryKeyValueStore:
    """Dict-backed key-value store for development and testing."""

    def __init__(self, *, max_value_bytes: int | None = None) -> None:
        """Initialize an empty store with an optional hard value-size ceiling."""
        self._values: dict[str, bytes] = {}
        self._max_value_bytes = max_value_bytes

    def get(self, key: str) -> bytes | None:
        """Return the stored value."""
        return self._values.get(_validate_key(key))

    def set(self, key: str, data: bytes) -> None:
        """Store ``data`` under ``key``."""
        _check_size(_validate_key(key), data, self._max_value_bytes)
        self._values[key] = bytes(data)

    def delete(self, key: str) -> bool:
        """Remove ``key``."""
        return self._values.pop(_validate_key(key), None) is not None

    def keys(self) -> tuple[str, ...]:
        """Return the stored keys, sorted."""
        return tuple(sorted(self._values))


class FileKeyValueStore:
    """Directory-backed key-value store: one ``<key>.dat`` file per key."""

    def __init__(self, root: str | Path, *, max_value_bytes: int | None = None) -> None:
        """Initialize with a root directory, creating it if needed."""
        self._root = Path(root)
        try:
            self._root.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise MetadataStoreError(str(self._root), exc.strerror or str(exc)) from exc
        self._max_value_bytes = max_value_bytes

    @property
    def root(self) -> Path:
        """Return the root directory path."""
        return self._root

    def _path(self, key: str) -> Path:
        return self._root / f"{_validate_key(key)}{_VALUE_SUFFIX}"

    def get(self, key: str) -> bytes | None:
        """Read the value file for ``key``."""
        path = self._path(key)
        if not path.is_file():
            return None
        try:
            return path.read_bytes()
        except OSError as exc:
            raise MetadataStoreError(key, exc.strerror or str(exc)) from exc

    def set(self, key: str, data: bytes) -> None:
        """Atomically replace the value file for ``key``."""
        path = self._path(key)
        _check_size(key, data, self._max_value_bytes)
        partial = path.with_name(f".{path.name}.partial")
        try:
            partial.write_bytes(data)
            os.replace(partial, path)
        except OSError as exc:
            with contextlib.suppress(OSError):
                partial.unlink()
            raise MetadataStoreError(key, exc.strerror or str(exc)) from exc

    def delete(self, key: str) -> bool:
        """Remove the value file for ``key``."""
        path = self._path(key)
        if not path.is_file():
            return False
        path.unlink()
        return True

    def keys(self) -> tuple[str, ...]:
        """Return the stored keys, sorted."""
        return tuple(
            sorted(
                entry.name[: -len(_VALUE_SUFFIX)]
                for entry in self._root.glob(f"*{_VALUE_SUFFIX}")
                if not entry.name.startswith(".")
            )
        )
