"""Typed errors for pulsestore."""


class PulsestoreError(Exception):
    """Base exception for all pulsestore errors."""


# --- validation ---


class RecordValidationError(PulsestoreError):
    """Raised when a record is rejected before any I/O takes place."""

    def __init__(self, field_name: str, reason: str) -> None:
        """Initialize with the offending field and a short reason."""
        self.field_name = field_name
        self.reason = reason
        super().__init__(f"Invalid {field_name}: {reason}")


class FieldValueError(PulsestoreError):
    """Raised when a stored custom-field value does not match its declared type."""

    def __init__(self, field_id: str, field_type: str, value: str) -> None:
        """Initialize with the field definition id, its type and the raw value."""
        self.field_id = field_id
        self.field_type = field_type
        self.value = value
        super().__init__(f"Value {value!r} is not a valid {field_type} for field {field_id}")


# --- blob store ---


class BlobStoreError(PulsestoreError):
    """Base exception for Blob Store failures."""


class BlobDirectoryError(BlobStoreError):
    """Raised when the blob directory cannot be created."""

    def __init__(self, directory: str, reason: str) -> None:
        """Initialize with the directory path and the underlying reason."""
        self.directory = directory
        self.reason = reason
        super().__init__(f"Could not create blob directory {directory}: {reason}")


class BlobWriteError(BlobStoreError):
    """Raised when a blob payload cannot be written."""

    def __init__(self, path: str, reason: str) -> None:
        """Initialize with the target path and the underlying reason."""
        self.path = path
        self.reason = reason
        super().__init__(f"Could not write file {path}: {reason}")


class BlobNotFoundError(BlobStoreError):
    """Raised when a blob path does not resolve to a stored file."""

    def __init__(self, path: str) -> None:
        """Initialize with the missing blob's path."""
        self.path = path
        super().__init__(f"Blob not found: {path}")


class BlobReadError(BlobStoreError):
    """Raised when a stored blob exists but cannot be read."""

    def __init__(self, path: str, reason: str) -> None:
        """Initialize with the blob path and the underlying reason."""
        self.path = path
        self.reason = reason
        super().__init__(f"Could not read file {path}: {reason}")


# --- metadata codec ---


class MetadataEncodeError(PulsestoreError):
    """Raised when a record collection cannot be serialized."""


class MetadataDecodeError(PulsestoreError):
    """Raised when stored metadata bytes are malformed or corrupt."""


class MetadataStoreError(PulsestoreError):
    """Raised when the key-value metadata store rejects a read or write."""

    def __init__(self, key: str, reason: str) -> None:
        """Initialize with the store key and the underlying reason."""
        self.key = key
        self.reason = reason
        super().__init__(f"Metadata store rejected {key!r}: {reason}")


# --- manager-level outcomes ---


class SaveFailedError(PulsestoreError):
    """Raised (or returned) when metadata could not be encoded or stored."""

    def __init__(self, reason: str, *, subject: str = "document") -> None:
        """Initialize with a human-readable reason."""
        self.reason = reason
        self.subject = subject
        super().__init__(f"Failed to save {subject}: {reason}")


class FileSaveFailedError(PulsestoreError):
    """Raised (or returned) when a record's blob could not be externalized."""

    def __init__(self, reason: str) -> None:
        """Initialize with a human-readable reason."""
        self.reason = reason
        super().__init__(f"Failed to save file: {reason}")


class RecordNotFoundError(PulsestoreError):
    """Raised (or returned) when a mutation targets an unknown record id."""

    label = "Record"

    def __init__(self, record_id: str) -> None:
        """Initialize with the unknown record id."""
        self.record_id = record_id
        super().__init__(f"{self.label} not found")


class DocumentNotFoundError(RecordNotFoundError):
    """No document with the requested id exists in the collection."""

    label = "Document"


class ContactNotFoundError(RecordNotFoundError):
    """No contact with the requested id exists in the collection."""

    label = "Contact"


class CustomFieldNotFoundError(RecordNotFoundError):
    """No custom field definition with the requested id exists in the schema."""

    label = "Custom field"
