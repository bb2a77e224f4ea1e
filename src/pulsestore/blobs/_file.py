"""FileBlobStore: file-system-based blob storage."""

from __future__ import annotations

import contextlib
import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING

from pulsestore.blobs._store import SweepReport, blob_filename, normalize_path, select_orphans
from pulsestore.errors import BlobDirectoryError, BlobNotFoundError, BlobReadError, BlobWriteError

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable
    from contextlib import AbstractContextManager

    AccessScope = Callable[[Path], AbstractContextManager[object]]

logger = logging.getLogger(__name__)

_TEMP_PREFIX = "."
_TEMP_SUFFIX = ".partial"


def _no_access_scope(path: Path) -> AbstractContextManager[object]:
    return contextlib.nullcontext()


class FileBlobStore:
    """File-system-based blob store.

    Store each payload as ``<record-id>.<extension>`` under a root directory.
    The root is created on first write, so a store can be constructed before
    its directory exists.
    """

    def __init__(self, root: str | Path, *, access_scope: AccessScope | None = None) -> None:
        """Initialize with a root directory and an optional read access scope.

        ``access_scope`` wraps every read; it stands in for sandbox or
        security-scoped resource access and must not alter the bytes returned.
        """
        self._root = Path(root)
        self._access_scope = access_scope or _no_access_scope

    @property
    def root(self) -> Path:
        """Return the root directory path."""
        return self._root

    def _ensure_root(self) -> None:
        """Create the root directory if needed."""
        try:
            self._root.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise BlobDirectoryError(str(self._root), exc.strerror or str(exc)) from exc

    def _resolve_path(self, path: str | Path) -> Path | None:
        """Resolve a blob path and ensure it stays under the store root."""
        root = self._root.resolve()
        candidate = normalize_path(path)
        if not candidate.is_absolute():
            candidate = self._root / candidate
        candidate = candidate.resolve()
        try:
            candidate.relative_to(root)
        except ValueError:
            return None
        return candidate

    def put(self, record_id: str, extension: str, data: bytes) -> Path:
        """Write ``data`` to ``{record_id}.{extension}``, replacing the whole file."""
        try:
            filename = blob_filename(record_id, extension)
        except ValueError as exc:
            raise BlobWriteError(str(self._root / record_id), str(exc)) from exc

        self._ensure_root()
        target = self._resolve_path(filename)
        if target is None:
            raise BlobWriteError(filename, "path resolves outside store root")

        partial = target.with_name(f"{_TEMP_PREFIX}{target.name}{_TEMP_SUFFIX}")
        try:
            partial.write_bytes(data)
            os.replace(partial, target)
        except OSError as exc:
            with contextlib.suppress(OSError):
                partial.unlink()
            raise BlobWriteError(str(target), exc.strerror or str(exc)) from exc

        logger.debug("Wrote blob %s (%d bytes)", target.name, len(data))
        return target

    def get(self, path: str | Path) -> bytes:
        """Read a stored payload inside the configured access scope."""
        resolved = self._resolve_path(path)
        if resolved is None:
            raise BlobNotFoundError(str(path))
        with self._access_scope(resolved):
            if not resolved.is_file():
                raise BlobNotFoundError(str(path))
            try:
                return resolved.read_bytes()
            except OSError as exc:
                raise BlobReadError(str(resolved), exc.strerror or str(exc)) from exc

    def exists(self, path: str | Path) -> bool:
        """Check whether a blob file exists."""
        resolved = self._resolve_path(path)
        return resolved is not None and resolved.is_file()

    def delete(self, path: str | Path) -> bool:
        """Delete one blob file."""
        resolved = self._resolve_path(path)
        if resolved is None or not resolved.is_file():
            return False
        resolved.unlink()
        return True

    def list_paths(self) -> tuple[Path, ...]:
        """List stored blob files, skipping in-flight partial writes."""
        if not self._root.is_dir():
            return ()
        root = self._root.resolve()
        return tuple(
            sorted(
                entry
                for entry in root.iterdir()
                if entry.is_file() and not entry.name.startswith(_TEMP_PREFIX)
            )
        )

    def sweep_orphans(
        self,
        referenced: Iterable[str | Path],
        *,
        dry_run: bool = False,
    ) -> SweepReport:
        """Delete blob files no live record points to."""
        paths = self.list_paths()
        orphans = select_orphans(paths, referenced)
        bytes_freed = sum(path.stat().st_size for path in orphans)

        if not dry_run:
            for path in orphans:
                path.unlink()
            logger.info("Swept %d orphaned blobs (%d bytes)", len(orphans), bytes_freed)

        return SweepReport(
            deleted=orphans,
            bytes_freed=bytes_freed,
            examined=len(paths),
            remaining=len(paths) - len(orphans),
            dry_run=dry_run,
        )
