"""BlobStore backends and the orphaned-blob sweep."""

import tempfile
from pathlib import Path

from pulsestore import Document, DocumentManager, FileBlobStore, InMemoryBlobStore, InMemoryKeyValueStore

# ---- InMemoryBlobStore ----
# Best for development, testing, and short-lived processes.

memory_store = InMemoryBlobStore()
path = memory_store.put("abc123", "txt", b"hello world")
print(f"[InMemory] path={path}")
print(f"  get() = {memory_store.get(path)!r}")
print(f"  list_paths() count = {len(memory_store.list_paths())}")
print(f"  delete() = {memory_store.delete(path)}")
print(f"  exists() after delete = {memory_store.exists(path)}")

# ---- FileBlobStore ----
# One whole file per record, written atomically under a root directory.

with tempfile.TemporaryDirectory() as tmpdir:
    file_store = FileBlobStore(Path(tmpdir) / "PulseCRM")
    print(f"\n[File] root = {file_store.root}")

    kept = file_store.put("kept", "pdf", b"%PDF-1.4 kept")
    file_store.put("stale", "pdf", b"%PDF-1.4 stale")
    print(f"  list_paths() = {[p.name for p in file_store.list_paths()]}")

    dry_run = file_store.sweep_orphans([kept], dry_run=True)
    print(f"  sweep_orphans(dry_run=True) -> delete={len(dry_run.deleted)}, bytes_freed={dry_run.bytes_freed}")
    report = file_store.sweep_orphans([kept])
    print(f"  sweep_orphans() -> delete={len(report.deleted)}, remaining={report.remaining}")

# ---- Deletes leave blobs behind ----
# Removing a document only rewrites metadata; sweep to reclaim the file.

blobs = InMemoryBlobStore()
manager = DocumentManager(InMemoryKeyValueStore(), blobs)
manager.add(Document(name="Draft", file_extension="txt").with_file_data(b"draft text"))
manager.delete(manager.documents[0])
print(f"\nBlobs after delete: {len(blobs.list_paths())}")
print(f"Swept: {len(manager.sweep_orphaned_blobs().deleted)}, left: {len(blobs.list_paths())}")
