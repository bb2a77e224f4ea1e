"""Tests for pulsestore.errors."""

import pytest

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


def test_pulsestore_error_is_exception() -> None:
    assert issubclass(PulsestoreError, Exception)


@pytest.mark.parametrize(
    "error_type",
    [
        pytest.param(BlobDirectoryError, id="directory"),
        pytest.param(BlobWriteError, id="write"),
        pytest.param(BlobNotFoundError, id="not-found"),
        pytest.param(BlobReadError, id="read"),
    ],
)
def test_blob_errors_share_base(error_type: type[Exception]) -> None:
    assert issubclass(error_type, BlobStoreError)
    assert issubclass(error_type, PulsestoreError)


@pytest.mark.parametrize(
    "error_type",
    [
        pytest.param(MetadataEncodeError, id="encode"),
        pytest.param(MetadataDecodeError, id="decode"),
        pytest.param(MetadataStoreError, id="store"),
        pytest.param(SaveFailedError, id="save"),
        pytest.param(FileSaveFailedError, id="file-save"),
        pytest.param(RecordValidationError, id="validation"),
        pytest.param(FieldValueError, id="field-value"),
    ],
)
def test_other_errors_are_pulsestore_errors(error_type: type[Exception]) -> None:
    assert issubclass(error_type, PulsestoreError)


def test_blob_write_error_carries_path_and_reason() -> None:
    err = BlobWriteError("/data/abc.pdf", "No space left on device")
    assert err.path == "/data/abc.pdf"
    assert err.reason == "No space left on device"
    assert str(err) == "Could not write file /data/abc.pdf: No space left on device"


def test_blob_directory_error_message() -> None:
    err = BlobDirectoryError("/data", "Permission denied")
    assert "Could not create blob directory /data" in str(err)


def test_save_failed_messages() -> None:
    assert str(SaveFailedError("disk full")) == "Failed to save document: disk full"
    assert str(SaveFailedError("disk full", subject="contacts")) == "Failed to save contacts: disk full"
    assert str(FileSaveFailedError("read-only")) == "Failed to save file: read-only"


@pytest.mark.parametrize(
    ("error_type", "message"),
    [
        pytest.param(DocumentNotFoundError, "Document not found", id="document"),
        pytest.param(ContactNotFoundError, "Contact not found", id="contact"),
        pytest.param(CustomFieldNotFoundError, "Custom field not found", id="custom-field"),
    ],
)
def test_not_found_errors(error_type: type[RecordNotFoundError], message: str) -> None:
    err = error_type("abc123")
    assert isinstance(err, RecordNotFoundError)
    assert err.record_id == "abc123"
    assert str(err) == message


def test_field_value_error_carries_details() -> None:
    err = FieldValueError("f1", "Number", "abc")
    assert (err.field_id, err.field_type, err.value) == ("f1", "Number", "abc")
    assert "'abc'" in str(err)


def test_metadata_store_error_message() -> None:
    err = MetadataStoreError("pulse_documents", "quota exceeded")
    assert err.key == "pulse_documents"
    assert "quota exceeded" in str(err)
