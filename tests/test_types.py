"""Tests for pulsestore.types."""

import hashlib
from dataclasses import FrozenInstanceError
from datetime import timezone

import pytest

from pulsestore.types import (
    Contact,
    CustomFieldDefinition,
    Document,
    DocumentCategory,
    FieldType,
    format_byte_count,
    md5_checksum,
    new_record_id,
    utc_now,
)


def test_utc_now_is_timezone_aware() -> None:
    assert utc_now().tzinfo is timezone.utc


def test_record_ids_are_unique() -> None:
    assert len({new_record_id() for _ in range(100)}) == 100


def test_md5_checksum_matches_hashlib() -> None:
    assert md5_checksum(b"payload") == hashlib.md5(b"payload").hexdigest()


def test_document_defaults() -> None:
    document = Document(name="Site plan")
    assert document.category is DocumentCategory.GENERAL
    assert document.version == "1.0"
    assert document.uploaded_by == "User"
    assert document.is_archived is False
    assert document.file_data == b""
    assert document.file_path == ""
    assert document.id


def test_document_is_frozen() -> None:
    document = Document(name="a")
    with pytest.raises(FrozenInstanceError):
        document.name = "b"  # type: ignore[misc]


def test_document_normalizes_containers() -> None:
    document = Document(name="a", tags=["x", "y"], custom_fields={"f": "1"})
    assert document.tags == ("x", "y")
    assert document.custom_fields["f"] == "1"
    with pytest.raises(TypeError):
        document.custom_fields["f"] = "2"  # type: ignore[index]


def test_with_file_data_recomputes_size_and_checksum() -> None:
    document = Document(name="a").with_file_data(b"12345")
    assert document.size == 5
    assert document.checksum == md5_checksum(b"12345")
    assert document.file_data == b"12345"


@pytest.mark.parametrize(
    ("mime_type", "extension", "is_image", "is_pdf", "is_office"),
    [
        pytest.param("image/png", "png", True, False, False, id="png"),
        pytest.param("application/pdf", "pdf", False, True, False, id="pdf"),
        pytest.param("application/octet-stream", "PDF", False, True, False, id="pdf-by-extension"),
        pytest.param("application/vnd.ms-excel", "xls", False, False, True, id="excel"),
        pytest.param("text/plain", "txt", False, False, False, id="text"),
    ],
)
def test_document_type_predicates(
    mime_type: str, extension: str, is_image: bool, is_pdf: bool, is_office: bool
) -> None:
    document = Document(name="a", mime_type=mime_type, file_extension=extension)
    assert document.is_image() is is_image
    assert document.is_pdf() is is_pdf
    assert document.is_office_document() is is_office


@pytest.mark.parametrize(
    ("size", "expected"),
    [
        pytest.param(0, "0 KB", id="zero"),
        pytest.param(512_000, "512 KB", id="kilobytes"),
        pytest.param(2_048_000, "2.0 MB", id="megabytes"),
        pytest.param(5_000_000_000, "5.00 GB", id="gigabytes"),
    ],
)
def test_format_byte_count(size: int, expected: str) -> None:
    assert format_byte_count(size) == expected
    assert Document(name="a", size=size).formatted_size() == expected


def test_contact_full_name() -> None:
    assert Contact(first_name="Ada", last_name="Lovelace").full_name == "Ada Lovelace"


def test_custom_field_definition_normalizes_options() -> None:
    definition = CustomFieldDefinition(name="Status", type=FieldType.DROPDOWN, options=["A", "B"])
    assert definition.options == ("A", "B")
    assert definition.is_required is False


def test_enums_compare_to_raw_values() -> None:
    assert DocumentCategory("Permits") is DocumentCategory.PERMITS
    assert FieldType.URL.value == "URL"
