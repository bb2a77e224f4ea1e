"""Tests for FileBlobStore."""

import contextlib
import os
from collections.abc import Iterator
from pathlib import Path

import pytest

import pulsestore.blobs._file as file_module
from pulsestore.blobs import BlobStore, FileBlobStore
from pulsestore.errors import BlobDirectoryError, BlobNotFoundError, BlobReadError, BlobWriteError


def test_put_and_get(tmp_path: Path) -> None:
    store = FileBlobStore(tmp_path / "blobs")
    path = store.put("abc", "pdf", b"%PDF-1.4")
    assert path.name == "abc.pdf"
    assert store.get(path) == b"%PDF-1.4"
    assert store.get(str(path)) == b"%PDF-1.4"


def test_root_is_created_on_first_write(tmp_path: Path) -> None:
    root = tmp_path / "nested" / "dir"
    store = FileBlobStore(root)
    assert not root.exists()
    store.put("abc", "txt", b"x")
    assert root.is_dir()
    assert store.root == root


def test_put_replaces_whole_file(tmp_path: Path) -> None:
    store = FileBlobStore(tmp_path)
    store.put("abc", "txt", b"a much longer first payload")
    path = store.put("abc", "txt", b"short")
    assert path.read_bytes() == b"short"


def test_put_without_extension_uses_bare_id(tmp_path: Path) -> None:
    store = FileBlobStore(tmp_path)
    assert store.put("abc", "", b"x").name == "abc"
    assert store.put("def", ".png", b"x").name == "def.png"


@pytest.mark.parametrize(
    "record_id",
    [
        pytest.param("", id="empty"),
        pytest.param("../escape", id="traversal"),
        pytest.param("..", id="parent"),
    ],
)
def test_put_rejects_unsafe_record_ids(tmp_path: Path, record_id: str) -> None:
    store = FileBlobStore(tmp_path / "blobs")
    with pytest.raises(BlobWriteError):
        store.put(record_id, "txt", b"x")


def test_put_reports_uncreatable_root(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_bytes(b"")
    store = FileBlobStore(blocker / "blobs")
    with pytest.raises(BlobDirectoryError):
        store.put("abc", "txt", b"x")


def test_put_failure_leaves_no_partial_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    store = FileBlobStore(tmp_path)

    def _fail_replace(src: object, dst: object) -> None:
        raise OSError(28, "No space left on device")

    monkeypatch.setattr(file_module.os, "replace", _fail_replace)
    with pytest.raises(BlobWriteError, match="No space left on device"):
        store.put("abc", "txt", b"x")
    monkeypatch.undo()
    assert os.listdir(tmp_path) == []


def test_get_missing_blob_raises(tmp_path: Path) -> None:
    store = FileBlobStore(tmp_path)
    with pytest.raises(BlobNotFoundError):
        store.get(tmp_path / "missing.pdf")


def test_get_outside_root_is_not_found(tmp_path: Path) -> None:
    outside = tmp_path / "outside.txt"
    outside.write_bytes(b"secret")
    store = FileBlobStore(tmp_path / "blobs")
    with pytest.raises(BlobNotFoundError):
        store.get(outside)
    with pytest.raises(BlobNotFoundError):
        store.get("../outside.txt")


def test_get_read_failure_raises_read_error(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    store = FileBlobStore(tmp_path)
    path = store.put("abc", "txt", b"x")

    def _fail_read(self: Path) -> bytes:
        raise PermissionError(13, "Permission denied")

    monkeypatch.setattr(Path, "read_bytes", _fail_read)
    with pytest.raises(BlobReadError, match="Permission denied"):
        store.get(path)


def test_get_resolves_relative_names_under_root(tmp_path: Path) -> None:
    store = FileBlobStore(tmp_path)
    store.put("abc", "txt", b"x")
    assert store.get("abc.txt") == b"x"


def test_reads_run_inside_access_scope(tmp_path: Path) -> None:
    scoped: list[Path] = []

    @contextlib.contextmanager
    def _scope(path: Path) -> Iterator[None]:
        scoped.append(path)
        yield

    store = FileBlobStore(tmp_path, access_scope=_scope)
    path = store.put("abc", "txt", b"x")
    assert store.get(path) == b"x"
    assert scoped == [path.resolve()]


def test_exists_and_delete(tmp_path: Path) -> None:
    store = FileBlobStore(tmp_path)
    path = store.put("abc", "txt", b"x")
    assert store.exists(path) is True
    assert store.delete(path) is True
    assert store.exists(path) is False
    assert store.delete(path) is False


def test_list_paths_skips_partial_files(tmp_path: Path) -> None:
    store = FileBlobStore(tmp_path)
    first = store.put("a", "txt", b"1")
    second = store.put("b", "txt", b"2")
    (tmp_path / ".c.txt.partial").write_bytes(b"in flight")
    assert store.list_paths() == (first.resolve(), second.resolve())


def test_list_paths_without_root_is_empty(tmp_path: Path) -> None:
    assert FileBlobStore(tmp_path / "absent").list_paths() == ()


def test_sweep_orphans_dry_run_keeps_files(tmp_path: Path) -> None:
    store = FileBlobStore(tmp_path)
    kept = store.put("kept", "txt", b"1")
    orphan = store.put("orphan", "txt", b"123")

    report = store.sweep_orphans([str(kept)], dry_run=True)

    assert report.dry_run is True
    assert report.deleted == (orphan.resolve(),)
    assert report.bytes_freed == 3
    assert report.examined == 2
    assert report.remaining == 1
    assert orphan.exists()


def test_sweep_orphans_deletes_unreferenced(tmp_path: Path) -> None:
    store = FileBlobStore(tmp_path)
    kept = store.put("kept", "txt", b"1")
    orphan = store.put("orphan", "txt", b"123")

    report = store.sweep_orphans([kept])

    assert report.deleted == (orphan.resolve(),)
    assert not orphan.exists()
    assert kept.exists()


def test_satisfies_protocol(tmp_path: Path) -> None:
    assert isinstance(FileBlobStore(tmp_path), BlobStore)
