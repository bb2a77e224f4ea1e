"""pulsestore: local persistence and derived-asset engine for CRM records."""

import importlib.metadata as importlib_metadata

from pulsestore.blobs import BlobStore, FileBlobStore, InMemoryBlobStore, SweepReport
from pulsestore.config import EngineConfig, load_config
from pulsestore.contacts import ContactManager
from pulsestore.documents import DocumentManager
from pulsestore.errors import (
    BlobDirectoryError,
    BlobNotFoundError,
    BlobReadError,
    BlobStoreError,
    BlobWriteError,
    ContactNotFoundError,
    CustomFieldNotFoundError,
    DocumentNotFoundError,
    FieldValueError,
    FileSaveFailedError,
    MetadataDecodeError,
    MetadataEncodeError,
    MetadataStoreError,
    PulsestoreError,
    RecordNotFoundError,
    RecordValidationError,
    SaveFailedError,
)
from pulsestore.imaging import compress_image, generate_thumbnail
from pulsestore.intake import document_from_upload
from pulsestore.kvstore import FileKeyValueStore, InMemoryKeyValueStore, KeyValueStore
from pulsestore.query import DocumentQuery, DocumentStats
from pulsestore.result import Result
from pulsestore.types import (
    AccessLevel,
    Contact,
    ContactGroupBy,
    CustomFieldDefinition,
    Document,
    DocumentCategory,
    FieldType,
    QuickFilter,
    SortOption,
)


def _detect_version() -> str:
    """Return installed package version or a local fallback when metadata is unavailable."""
    try:
        return importlib_metadata.version("pulsestore")
    except importlib_metadata.PackageNotFoundError:
        return "0.0.0+unknown"


__version__ = _detect_version()

__all__ = [
    "AccessLevel",
    "BlobDirectoryError",
    "BlobNotFoundError",
    "BlobReadError",
    "BlobStore",
    "BlobStoreError",
    "BlobWriteError",
    "Contact",
    "ContactGroupBy",
    "ContactManager",
    "ContactNotFoundError",
    "CustomFieldDefinition",
    "CustomFieldNotFoundError",
    "Document",
    "DocumentCategory",
    "DocumentManager",
    "DocumentNotFoundError",
    "DocumentQuery",
    "DocumentStats",
    "EngineConfig",
    "FieldType",
    "FieldValueError",
    "FileBlobStore",
    "FileKeyValueStore",
    "FileSaveFailedError",
    "InMemoryBlobStore",
    "InMemoryKeyValueStore",
    "KeyValueStore",
    "MetadataDecodeError",
    "MetadataEncodeError",
    "MetadataStoreError",
    "PulsestoreError",
    "QuickFilter",
    "RecordNotFoundError",
    "RecordValidationError",
    "Result",
    "SaveFailedError",
    "SortOption",
    "SweepReport",
    "compress_image",
    "document_from_upload",
    "generate_thumbnail",
    "load_config",
]
