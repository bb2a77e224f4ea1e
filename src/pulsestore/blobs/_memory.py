"""InMemoryBlobStore: dict-based blob storage for development and testing."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from pulsestore.blobs._store import SweepReport, blob_filename, normalize_path, select_orphans
from pulsestore.errors import BlobNotFoundError, BlobWriteError

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping


class InMemoryBlobStore:
    """In-memory blob store for development and testing.

    Paths are virtual: ``<root>/<record-id>.<extension>``.
    """

    def __init__(self, root: str | Path = "memory") -> None:
        """Initialize an empty in-memory store."""
        self._root = Path(root)
        self._blobs: dict[Path, bytes] = {}

    @classmethod
    def from_preloaded(cls, blobs_by_name: Mapping[str, bytes]) -> InMemoryBlobStore:
        """Build a store from preloaded ``filename -> bytes`` data."""
        store = cls()
        for name, data in blobs_by_name.items():
            store._blobs[store._root / name] = data
        return store

    @property
    def root(self) -> Path:
        """Return the virtual root path."""
        return self._root

    def _key(self, path: str | Path) -> Path:
        candidate = normalize_path(path)
        if not candidate.is_absolute() and candidate.parent == Path("."):
            candidate = self._root / candidate
        return candidate

    def put(self, record_id: str, extension: str, data: bytes) -> Path:
        """Store bytes under ``{record_id}.{extension}``."""
        try:
            filename = blob_filename(record_id, extension)
        except ValueError as exc:
            raise BlobWriteError(str(self._root / record_id), str(exc)) from exc
        path = self._root / filename
        self._blobs[path] = bytes(data)
        return path

    def get(self, path: str | Path) -> bytes:
        """Retrieve stored bytes."""
        data = self._blobs.get(self._key(path))
        if data is None:
            raise BlobNotFoundError(str(path))
        return data

    def exists(self, path: str | Path) -> bool:
        """Check whether a blob exists."""
        return self._key(path) in self._blobs

    def delete(self, path: str | Path) -> bool:
        """Delete a blob by path."""
        return self._blobs.pop(self._key(path), None) is not None

    def list_paths(self) -> tuple[Path, ...]:
        """List stored blob paths."""
        return tuple(sorted(self._blobs))

    def sweep_orphans(
        self,
        referenced: Iterable[str | Path],
        *,
        dry_run: bool = False,
    ) -> SweepReport:
        """Delete blobs no live record points to."""
        paths = self.list_paths()
        orphans = select_orphans(paths, referenced)
        bytes_freed = sum(len(self._blobs[path]) for path in orphans)

        if not dry_run:
            for path in orphans:
                self._blobs.pop(path, None)

        return SweepReport(
            deleted=orphans,
            bytes_freed=bytes_freed,
            examined=len(paths),
            remaining=len(paths) - len(orphans),
            dry_run=dry_run,
        )
