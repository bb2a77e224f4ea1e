"""Tests for InMemoryBlobStore."""

from pathlib import Path

import pytest

from pulsestore.blobs import BlobStore, InMemoryBlobStore
from pulsestore.errors import BlobNotFoundError, BlobWriteError


def test_put_and_get() -> None:
    store = InMemoryBlobStore()
    path = store.put("abc", "png", b"data")
    assert path == Path("memory/abc.png")
    assert store.get(path) == b"data"
    assert store.get("memory/abc.png") == b"data"
    assert store.get("abc.png") == b"data"


def test_put_replaces_payload() -> None:
    store = InMemoryBlobStore()
    store.put("abc", "png", b"first")
    path = store.put("abc", "png", b"second")
    assert store.get(path) == b"second"
    assert len(store.list_paths()) == 1


def test_put_rejects_invalid_id() -> None:
    with pytest.raises(BlobWriteError):
        InMemoryBlobStore().put("a/b", "png", b"x")


def test_get_missing_raises() -> None:
    with pytest.raises(BlobNotFoundError):
        InMemoryBlobStore().get("memory/missing.png")


def test_from_preloaded() -> None:
    store = InMemoryBlobStore.from_preloaded({"abc.pdf": b"%PDF"})
    assert store.exists("memory/abc.pdf")
    assert store.get("abc.pdf") == b"%PDF"


def test_delete() -> None:
    store = InMemoryBlobStore()
    path = store.put("abc", "png", b"x")
    assert store.delete(path) is True
    assert store.exists(path) is False
    assert store.delete(path) is False


def test_sweep_orphans() -> None:
    store = InMemoryBlobStore()
    kept = store.put("kept", "png", b"1")
    orphan = store.put("orphan", "png", b"1234")

    dry = store.sweep_orphans([str(kept)], dry_run=True)
    assert dry.deleted == (orphan,)
    assert store.exists(orphan)

    report = store.sweep_orphans([str(kept)])
    assert report.bytes_freed == 4
    assert report.remaining == 1
    assert store.list_paths() == (kept,)


def test_sweep_ignores_empty_references() -> None:
    store = InMemoryBlobStore()
    store.put("a", "png", b"1")
    report = store.sweep_orphans(["", "memory/a.png"])
    assert report.deleted == ()


def test_satisfies_protocol() -> None:
    assert isinstance(InMemoryBlobStore(), BlobStore)
