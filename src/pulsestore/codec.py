"""Metadata Codec: JSON (de)serialization of record collections for the key-value store.

Wire format: UTF-8 JSON ``{"version": 1, "records": [...]}``. Large payloads
never appear on the wire: documents carry a ``file_path`` into the Blob Store,
while thumbnails and contact profile images are small enough to be inlined as
base64. Decoding is all-or-nothing.
"""

from __future__ import annotations

import json
from enum import Enum
from typing import TYPE_CHECKING, TypeVar

from pulsestore.errors import MetadataDecodeError, MetadataEncodeError
from pulsestore.serde import (
    as_str_object_dict,
    bytes_to_b64,
    datetime_to_str,
    optional_b64_bytes,
    optional_int,
    optional_string,
    require_bool,
    require_datetime,
    require_int,
    require_string,
    string_mapping,
    string_or_default,
    string_tuple,
)
from pulsestore.types import (
    AccessLevel,
    Contact,
    CustomFieldDefinition,
    Document,
    DocumentCategory,
    FieldType,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

RecordT = TypeVar("RecordT")
EnumT = TypeVar("EnumT", bound=Enum)

FORMAT_VERSION = 1


def _require_id(value: object, *, field_name: str) -> str:
    if not isinstance(value, str) or not value:
        msg = f"{field_name} must be a non-empty string."
        raise TypeError(msg)
    return value


def _enum_from_value(enum_type: type[EnumT], value: object, *, field_name: str, default: EnumT) -> EnumT:
    if value is None:
        return default
    try:
        return enum_type(value)
    except ValueError as exc:
        allowed = [member.value for member in enum_type]
        msg = f"{field_name} must be one of {allowed!r}; got {value!r}."
        raise ValueError(msg) from exc


# --- Document ---


def document_to_dict(document: Document) -> dict[str, object]:
    """Serialize a Document's metadata to a plain dictionary (never the inline bytes)."""
    return {
        "id": document.id,
        "name": document.name,
        "original_file_name": document.original_file_name,
        "description": document.description,
        "category": document.category.value,
        "tags": list(document.tags),
        "size": document.size,
        "mime_type": document.mime_type,
        "file_extension": document.file_extension,
        "uploaded_at": datetime_to_str(document.uploaded_at),
        "modified_at": datetime_to_str(document.modified_at),
        "version": document.version,
        "is_archived": document.is_archived,
        "associated_job_id": document.associated_job_id,
        "associated_contact_id": document.associated_contact_id,
        "custom_fields": dict(document.custom_fields),
        "access_level": document.access_level.value,
        "uploaded_by": document.uploaded_by,
        "checksum": document.checksum,
        "page_count": document.page_count,
        "thumbnail": bytes_to_b64(document.thumbnail),
        "file_path": document.file_path,
    }


def document_from_dict(value: object, *, field_name: str = "Document") -> Document:
    """Deserialize a Document from a plain dictionary. ``file_data`` starts empty."""
    data = as_str_object_dict(value, field_name=field_name)
    return Document(
        id=_require_id(data.get("id"), field_name=f"{field_name}.id"),
        name=require_string(data.get("name"), field_name=f"{field_name}.name"),
        original_file_name=string_or_default(
            data.get("original_file_name"), "", field_name=f"{field_name}.original_file_name"
        ),
        description=string_or_default(data.get("description"), "", field_name=f"{field_name}.description"),
        category=_enum_from_value(
            DocumentCategory,
            data.get("category"),
            field_name=f"{field_name}.category",
            default=DocumentCategory.GENERAL,
        ),
        tags=string_tuple(data.get("tags"), field_name=f"{field_name}.tags"),
        size=require_int(data.get("size", 0), field_name=f"{field_name}.size"),
        mime_type=string_or_default(data.get("mime_type"), "", field_name=f"{field_name}.mime_type"),
        file_extension=string_or_default(data.get("file_extension"), "", field_name=f"{field_name}.file_extension"),
        uploaded_at=require_datetime(data.get("uploaded_at"), field_name=f"{field_name}.uploaded_at"),
        modified_at=require_datetime(data.get("modified_at"), field_name=f"{field_name}.modified_at"),
        version=string_or_default(data.get("version"), "1.0", field_name=f"{field_name}.version"),
        is_archived=require_bool(data.get("is_archived"), field_name=f"{field_name}.is_archived"),
        associated_job_id=optional_string(data.get("associated_job_id"), field_name=f"{field_name}.associated_job_id"),
        associated_contact_id=optional_string(
            data.get("associated_contact_id"), field_name=f"{field_name}.associated_contact_id"
        ),
        custom_fields=string_mapping(data.get("custom_fields"), field_name=f"{field_name}.custom_fields"),
        access_level=_enum_from_value(
            AccessLevel,
            data.get("access_level"),
            field_name=f"{field_name}.access_level",
            default=AccessLevel.STANDARD,
        ),
        uploaded_by=string_or_default(data.get("uploaded_by"), "User", field_name=f"{field_name}.uploaded_by"),
        checksum=string_or_default(data.get("checksum"), "", field_name=f"{field_name}.checksum"),
        page_count=optional_int(data.get("page_count"), field_name=f"{field_name}.page_count"),
        thumbnail=optional_b64_bytes(data.get("thumbnail"), field_name=f"{field_name}.thumbnail"),
        file_path=string_or_default(data.get("file_path"), "", field_name=f"{field_name}.file_path"),
    )


# --- CustomFieldDefinition ---


def custom_field_to_dict(definition: CustomFieldDefinition) -> dict[str, object]:
    """Serialize a CustomFieldDefinition to a plain dictionary."""
    return {
        "id": definition.id,
        "name": definition.name,
        "type": definition.type.value,
        "is_required": definition.is_required,
        "options": list(definition.options),
        "default_value": definition.default_value,
    }


def custom_field_from_dict(value: object, *, field_name: str = "CustomField") -> CustomFieldDefinition:
    """Deserialize a CustomFieldDefinition from a plain dictionary."""
    data = as_str_object_dict(value, field_name=field_name)
    return CustomFieldDefinition(
        id=_require_id(data.get("id"), field_name=f"{field_name}.id"),
        name=require_string(data.get("name"), field_name=f"{field_name}.name"),
        type=_enum_from_value(FieldType, data.get("type"), field_name=f"{field_name}.type", default=FieldType.TEXT),
        is_required=require_bool(data.get("is_required"), field_name=f"{field_name}.is_required"),
        options=string_tuple(data.get("options"), field_name=f"{field_name}.options"),
        default_value=string_or_default(data.get("default_value"), "", field_name=f"{field_name}.default_value"),
    )


# --- Contact ---


def contact_to_dict(contact: Contact) -> dict[str, object]:
    """Serialize a Contact, inlining the profile image as base64."""
    return {
        "id": contact.id,
        "first_name": contact.first_name,
        "last_name": contact.last_name,
        "email": contact.email,
        "phone": contact.phone,
        "company": contact.company,
        "position": contact.position,
        "address": contact.address,
        "city": contact.city,
        "state": contact.state,
        "zip_code": contact.zip_code,
        "notes": contact.notes,
        "profile_image": bytes_to_b64(contact.profile_image),
        "created_at": datetime_to_str(contact.created_at),
        "custom_fields": dict(contact.custom_fields),
    }


def contact_from_dict(value: object, *, field_name: str = "Contact") -> Contact:
    """Deserialize a Contact from a plain dictionary."""
    data = as_str_object_dict(value, field_name=field_name)

    def text(key: str) -> str:
        return string_or_default(data.get(key), "", field_name=f"{field_name}.{key}")

    return Contact(
        id=_require_id(data.get("id"), field_name=f"{field_name}.id"),
        first_name=text("first_name"),
        last_name=text("last_name"),
        email=text("email"),
        phone=text("phone"),
        company=text("company"),
        position=text("position"),
        address=text("address"),
        city=text("city"),
        state=text("state"),
        zip_code=text("zip_code"),
        notes=text("notes"),
        profile_image=optional_b64_bytes(data.get("profile_image"), field_name=f"{field_name}.profile_image"),
        created_at=require_datetime(data.get("created_at"), field_name=f"{field_name}.created_at"),
        custom_fields=string_mapping(data.get("custom_fields"), field_name=f"{field_name}.custom_fields"),
    )


# --- collections ---


def _encode_records(
    records: Iterable[RecordT],
    to_dict: Callable[[RecordT], dict[str, object]],
) -> bytes:
    try:
        payload = {"version": FORMAT_VERSION, "records": [to_dict(record) for record in records]}
        return json.dumps(payload, ensure_ascii=False, allow_nan=False).encode("utf-8")
    except (TypeError, ValueError) as exc:
        raise MetadataEncodeError(str(exc)) from exc


def _decode_records(
    data: bytes,
    from_dict: Callable[..., RecordT],
    *,
    label: str,
) -> tuple[RecordT, ...]:
    try:
        raw = json.loads(data.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError, RecursionError) as exc:
        msg = f"{label} metadata is not valid UTF-8 JSON: {exc}"
        raise MetadataDecodeError(msg) from exc

    if isinstance(raw, dict):
        version = raw.get("version")
        if version != FORMAT_VERSION:
            msg = f"Unsupported {label} metadata version: {version!r}"
            raise MetadataDecodeError(msg)
        items = raw.get("records")
    else:
        items = raw
    if not isinstance(items, list):
        msg = f"{label} metadata must contain a list of records."
        raise MetadataDecodeError(msg)

    try:
        return tuple(from_dict(item, field_name=f"{label}[{index}]") for index, item in enumerate(items))
    except (TypeError, ValueError) as exc:
        raise MetadataDecodeError(str(exc)) from exc


def encode_documents(documents: Iterable[Document]) -> bytes:
    """Encode document metadata.

    Every document must already have had its inline bytes externalized to the
    Blob Store; a document still carrying ``file_data`` is refused.
    """
    materialized = tuple(documents)
    for document in materialized:
        if document.file_data:
            msg = f"Document {document.id} still carries inline file data; externalize it before encoding."
            raise MetadataEncodeError(msg)
    return _encode_records(materialized, document_to_dict)


def decode_documents(data: bytes) -> tuple[Document, ...]:
    """Decode document metadata."""
    return _decode_records(data, document_from_dict, label="Document")


def encode_custom_fields(definitions: Iterable[CustomFieldDefinition]) -> bytes:
    """Encode a custom-field schema."""
    return _encode_records(definitions, custom_field_to_dict)


def decode_custom_fields(data: bytes) -> tuple[CustomFieldDefinition, ...]:
    """Decode a custom-field schema."""
    return _decode_records(data, custom_field_from_dict, label="CustomField")


def encode_contacts(contacts: Iterable[Contact]) -> bytes:
    """Encode contacts, profile images inline."""
    return _encode_records(contacts, contact_to_dict)


def decode_contacts(data: bytes) -> tuple[Contact, ...]:
    """Decode contacts."""
    return _decode_records(data, contact_from_dict, label="Contact")
