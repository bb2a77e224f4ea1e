"""BlobStore: protocol for blob storage backends."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Iterable


def blob_filename(record_id: str, extension: str) -> str:
    """Return the on-disk filename for one record's blob: ``{id}.{extension}``."""
    if not record_id or "/" in record_id or "\\" in record_id or record_id in (".", ".."):
        msg = f"Invalid record id for blob storage: {record_id!r}"
        raise ValueError(msg)
    extension = extension.lstrip(".")
    if "/" in extension or "\\" in extension:
        msg = f"Invalid blob extension: {extension!r}"
        raise ValueError(msg)
    return f"{record_id}.{extension}" if extension else record_id


def normalize_path(path: str | Path) -> Path:
    """Normalize a blob path selector into a ``Path``."""
    return path if isinstance(path, Path) else Path(path)


@dataclass(frozen=True, slots=True)
class SweepReport:
    """Result of an orphaned-blob sweep."""

    deleted: tuple[Path, ...]
    bytes_freed: int
    examined: int
    remaining: int
    dry_run: bool


def select_orphans(
    paths: Iterable[Path],
    referenced: Iterable[str | Path],
) -> tuple[Path, ...]:
    """Select stored paths that no record references.

    Comparison is by filename: blob filenames are derived from record ids and
    are unique within one store.
    """
    referenced_names = {normalize_path(item).name for item in referenced if str(item)}
    return tuple(path for path in sorted(paths) if path.name not in referenced_names)


@runtime_checkable
class BlobStore(Protocol):
    """Blob storage protocol.

    Implementations store whole-file payloads keyed by record id plus
    extension and read them back by the path ``put`` returned.
    """

    def put(self, record_id: str, extension: str, data: bytes) -> Path:
        """Store ``data`` as ``{record_id}.{extension}``, replacing any previous payload."""
        ...

    def get(self, path: str | Path) -> bytes:
        """Read a stored payload by the path ``put`` returned."""
        ...

    def exists(self, path: str | Path) -> bool:
        """Check whether a payload is stored at ``path``."""
        ...

    def delete(self, path: str | Path) -> bool:
        """Delete a payload. Return ``True`` when something was removed."""
        ...

    def list_paths(self) -> tuple[Path, ...]:
        """List every stored payload path, sorted."""
        ...

    def sweep_orphans(
        self,
        referenced: Iterable[str | Path],
        *,
        dry_run: bool = False,
    ) -> SweepReport:
        """Delete payloads not named in ``referenced`` and return a report.

        - `referenced`: paths still pointed to by live records
        - `dry_run`: compute and report deletions without removing payloads
        """
        ...
