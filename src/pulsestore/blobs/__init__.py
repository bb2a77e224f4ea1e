"""BlobStore: whole-file payload storage for pulsestore records."""

from pulsestore.blobs._file import FileBlobStore
from pulsestore.blobs._memory import InMemoryBlobStore
from pulsestore.blobs._store import BlobStore, SweepReport, blob_filename

__all__ = [
    "BlobStore",
    "FileBlobStore",
    "InMemoryBlobStore",
    "SweepReport",
    "blob_filename",
]
