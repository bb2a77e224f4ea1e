"""Core record types: Document, Contact, CustomFieldDefinition and their enumerations."""

from __future__ import annotations

import hashlib
import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType

_OFFICE_MIME_TYPES = frozenset(
    {
        "application/vnd.ms-word",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        "application/vnd.ms-excel",
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        "application/vnd.ms-powerpoint",
        "application/vnd.openxmlformats-officedocument.presentationml.presentation",
    }
)


def utc_now() -> datetime:
    """Return the current timezone-aware UTC timestamp."""
    return datetime.now(timezone.utc)


def new_record_id() -> str:
    """Return a fresh, never-reused record identifier."""
    return uuid.uuid4().hex


def md5_checksum(data: bytes) -> str:
    """Return the hex MD5 digest used as a document checksum."""
    return hashlib.md5(data, usedforsecurity=False).hexdigest()


def _freeze_strings(value: Mapping[str, str] | None) -> Mapping[str, str]:
    """Freeze a ``str -> str`` mapping into a read-only mappingproxy."""
    if value is None:
        return MappingProxyType({})
    return MappingProxyType({str(key): str(item) for key, item in value.items()})


class DocumentCategory(str, Enum):
    """Closed set of document categories."""

    GENERAL = "General"
    CONTRACTS = "Contracts"
    INVOICES = "Invoices"
    REPORTS = "Reports"
    SPECIFICATIONS = "Specifications"
    DRAWINGS = "Drawings"
    PERMITS = "Permits"
    SAFETY = "Safety"
    PHOTOS = "Photos"
    CORRESPONDENCE = "Correspondence"
    LEGAL = "Legal"
    FINANCIAL = "Financial"


class AccessLevel(str, Enum):
    """Closed set of document access levels."""

    PUBLIC = "Public"
    STANDARD = "Standard"
    CONFIDENTIAL = "Confidential"
    RESTRICTED = "Restricted"


class FieldType(str, Enum):
    """Declared type of a custom field definition."""

    TEXT = "Text"
    NUMBER = "Number"
    DATE = "Date"
    DROPDOWN = "Dropdown"
    MULTILINE = "Multiline"
    CHECKBOX = "Checkbox"
    URL = "URL"
    EMAIL = "Email"


class QuickFilter(str, Enum):
    """Mutually exclusive quick filter applied after the standard filter chain."""

    IMAGES = "Images"
    PDFS = "PDFs"
    RECENT = "Recent"


class SortOption(str, Enum):
    """Sort key for the filtered document view."""

    NAME = "Name"
    DATE = "Date"
    SIZE = "Size"
    CATEGORY = "Category"
    TYPE = "Type"


class ContactGroupBy(str, Enum):
    """Grouping key for the contact list."""

    NONE = "None"
    COMPANY = "Company"
    POSITION = "Position"
    LOCATION = "Location"


@dataclass(frozen=True, slots=True)
class CustomFieldDefinition:
    """User-defined schema entry for document custom fields."""

    name: str
    type: FieldType = FieldType.TEXT
    is_required: bool = False
    options: tuple[str, ...] = ()
    default_value: str = ""
    id: str = field(default_factory=new_record_id)

    def __post_init__(self) -> None:
        """Normalize options to a tuple."""
        object.__setattr__(self, "options", tuple(self.options))


@dataclass(frozen=True, slots=True)
class Document:
    """A stored document: metadata plus either inline bytes or a Blob Store path.

    ``file_data`` is transient: it is populated while a document is unsaved and
    again after ``load()`` reads the blob back, but the persisted metadata only
    ever carries ``file_path``.
    """

    name: str = ""
    original_file_name: str = ""
    description: str = ""
    category: DocumentCategory = DocumentCategory.GENERAL
    tags: tuple[str, ...] = ()
    file_data: bytes = b""
    size: int = 0
    mime_type: str = ""
    file_extension: str = ""
    version: str = "1.0"
    is_archived: bool = False
    associated_job_id: str | None = None
    associated_contact_id: str | None = None
    custom_fields: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    access_level: AccessLevel = AccessLevel.STANDARD
    uploaded_by: str = "User"
    checksum: str = ""
    page_count: int | None = None
    thumbnail: bytes | None = None
    file_path: str = ""
    uploaded_at: datetime = field(default_factory=utc_now)
    modified_at: datetime = field(default_factory=utc_now)
    id: str = field(default_factory=new_record_id)

    def __post_init__(self) -> None:
        """Normalize containers so runtime behavior matches type hints."""
        object.__setattr__(self, "tags", tuple(self.tags))
        object.__setattr__(self, "custom_fields", _freeze_strings(self.custom_fields))

    def with_file_data(self, data: bytes) -> Document:
        """Return a copy carrying ``data`` with size and checksum recomputed."""
        return replace(self, file_data=data, size=len(data), checksum=md5_checksum(data))

    def is_image(self) -> bool:
        """Return whether the MIME type is an image type."""
        return self.mime_type.startswith("image/")

    def is_pdf(self) -> bool:
        """Return whether this is a PDF by MIME type or extension."""
        return self.mime_type == "application/pdf" or self.file_extension.lower() == "pdf"

    def is_office_document(self) -> bool:
        """Return whether this is a Word, Excel or PowerPoint document."""
        return self.mime_type in _OFFICE_MIME_TYPES

    def formatted_size(self) -> str:
        """Return a human-readable size using KB/MB/GB units."""
        return format_byte_count(self.size)


@dataclass(frozen=True, slots=True)
class Contact:
    """A contact record. Profile images stay inline (compressed) in metadata."""

    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: str = ""
    company: str = ""
    position: str = ""
    address: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""
    notes: str = ""
    profile_image: bytes | None = None
    custom_fields: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    created_at: datetime = field(default_factory=utc_now)
    id: str = field(default_factory=new_record_id)

    def __post_init__(self) -> None:
        """Freeze the custom field mapping."""
        object.__setattr__(self, "custom_fields", _freeze_strings(self.custom_fields))

    @property
    def full_name(self) -> str:
        """Return ``first last``."""
        return f"{self.first_name} {self.last_name}"


def format_byte_count(size: int) -> str:
    """Format a byte count the way file browsers do (decimal units, KB minimum)."""
    value = float(size)
    for unit in ("KB", "MB"):
        value /= 1000
        if value < 1000:
            return f"{value:.0f} {unit}" if unit == "KB" else f"{value:.1f} {unit}"
    return f"{value / 1000:.2f} GB"
