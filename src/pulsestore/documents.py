"""DocumentManager: the in-memory document collection and its write-through persistence."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import TYPE_CHECKING, Any

from pulsestore.blobs import BlobStore, FileBlobStore
from pulsestore.codec import decode_custom_fields, decode_documents, encode_custom_fields, encode_documents
from pulsestore.config import EngineConfig
from pulsestore.errors import (
    BlobStoreError,
    CustomFieldNotFoundError,
    DocumentNotFoundError,
    FileSaveFailedError,
    MetadataDecodeError,
    MetadataEncodeError,
    MetadataStoreError,
    RecordValidationError,
    SaveFailedError,
)
from pulsestore.fields import FieldValue, coerce_value, coerce_values, default_definitions
from pulsestore.imaging import generate_thumbnail
from pulsestore.intake import document_from_upload
from pulsestore.kvstore import FileKeyValueStore, KeyValueStore, warn_if_over_soft_limit
from pulsestore.query import (
    DocumentQuery,
    DocumentStats,
    available_file_types,
    document_stats,
    filter_documents,
    recent_documents,
)
from pulsestore.result import Result
from pulsestore.types import (
    AccessLevel,
    CustomFieldDefinition,
    Document,
    DocumentCategory,
    QuickFilter,
    SortOption,
    utc_now,
)

if TYPE_CHECKING:
    from collections.abc import Callable
    from concurrent.futures import Executor, Future

    from pulsestore.blobs import SweepReport

    Observer = Callable[["DocumentManager"], None]

logger = logging.getLogger(__name__)


def _validate(document: Document) -> None:
    if not document.name.strip():
        raise RecordValidationError("name", "a document name is required")


class DocumentManager:
    """Owns the document collection and coordinates blob, codec and thumbnail work.

    The in-memory collection is the source of truth for a session. Every
    mutation is staged, persisted (blobs externalized, metadata encoded and
    written) and only then committed, so memory never runs ahead of durable
    state. Mutations return a ``Result`` instead of raising.

    Not thread-safe: call from a single owning context. Offload heavy intake
    work with ``ingest_in_background`` and pass the finished Document to
    ``add`` from the owning context.
    """

    def __init__(
        self,
        kv_store: KeyValueStore,
        blob_store: BlobStore,
        *,
        config: EngineConfig | None = None,
        load: bool = True,
    ) -> None:
        """Initialize with injected stores and, by default, load persisted state."""
        self._kv = kv_store
        self._blobs = blob_store
        self._config = config or EngineConfig()
        self._documents: tuple[Document, ...] = ()
        self._custom_fields: tuple[CustomFieldDefinition, ...] = ()
        self._observers: list[Observer] = []

        # View state, set directly by the UI.
        self.search_text = ""
        self.filter_category: DocumentCategory | None = None
        self.filter_access_level: AccessLevel | None = None
        self.file_type_filter: str | None = None
        self.quick_filter: QuickFilter | None = None
        self.show_archived = False
        self.sort_option = SortOption.DATE
        self.sort_ascending = False
        self.selected_ids: set[str] = set()

        if load:
            self.load()

    @classmethod
    def open(cls, config: EngineConfig | None = None) -> DocumentManager:
        """Build a manager backed by the configured data directory."""
        config = config or EngineConfig()
        return cls(
            FileKeyValueStore(config.metadata_dir),
            FileBlobStore(config.blob_dir),
            config=config,
        )

    # --- observation ---

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        """Call ``observer(manager)`` after every collection change. Return an unsubscribe callable."""
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def _notify(self) -> None:
        for observer in tuple(self._observers):
            try:
                observer(self)
            except Exception:
                logger.exception("Observer %r failed after a collection change", observer)

    # --- state ---

    @property
    def documents(self) -> tuple[Document, ...]:
        """Return the full collection, archived documents included."""
        return self._documents

    @property
    def custom_fields(self) -> tuple[CustomFieldDefinition, ...]:
        """Return the custom-field schema."""
        return self._custom_fields

    def get(self, document_id: str) -> Document | None:
        """Return the document with ``document_id``, if any."""
        return next((document for document in self._documents if document.id == document_id), None)

    def _index_of(self, document_id: str) -> int | None:
        return next((index for index, document in enumerate(self._documents) if document.id == document_id), None)

    # --- loading ---

    def load(self) -> None:
        """Rebuild the collection and schema from the metadata store.

        Blobs are read eagerly. A failed blob read keeps the record with empty
        content; undecodable metadata yields an empty collection.
        """
        self._documents = self._load_documents()
        self._custom_fields = self._load_custom_fields()
        logger.info("Loaded %d documents, %d custom fields", len(self._documents), len(self._custom_fields))
        self._notify()

    def _read_key(self, key: str) -> bytes | None:
        try:
            return self._kv.get(key)
        except MetadataStoreError:
            logger.exception("Could not read %r from the metadata store", key)
            return None

    def _load_documents(self) -> tuple[Document, ...]:
        raw = self._read_key(self._config.documents_key)
        if raw is None:
            return ()
        return self._decode_stored(raw) or ()

    def _decode_stored(self, raw: bytes) -> tuple[Document, ...] | None:
        try:
            decoded = decode_documents(raw)
        except MetadataDecodeError:
            logger.exception("Stored document metadata is corrupt; starting with an empty collection")
            return None
        return tuple(self._hydrate(document) for document in decoded)

    def _hydrate(self, document: Document) -> Document:
        """Attach blob bytes and, for images without one, a fresh thumbnail."""
        if not document.file_path:
            return document
        try:
            data = self._blobs.get(document.file_path)
        except BlobStoreError:
            logger.exception("Could not read blob for document %s at %s", document.id, document.file_path)
            return document

        document = replace(document, file_data=data)
        if document.thumbnail is None and document.is_image():
            thumbnail = generate_thumbnail(
                data,
                self._config.thumbnail_max_dimension,
                self._config.thumbnail_quality,
            )
            if thumbnail is not None:
                document = replace(document, thumbnail=thumbnail)
        return document

    def _load_custom_fields(self) -> tuple[CustomFieldDefinition, ...]:
        raw = self._read_key(self._config.custom_fields_key)
        if raw is None:
            if not self._config.seed_default_custom_fields:
                return ()
            defaults = default_definitions()
            try:
                self._write_custom_fields(defaults)
            except SaveFailedError as exc:
                logger.warning("Could not persist default custom fields: %s", exc)
            return defaults
        try:
            return decode_custom_fields(raw)
        except MetadataDecodeError:
            logger.exception("Stored custom-field schema is corrupt; starting with an empty schema")
            return ()

    # --- persistence ---

    def _persist(self, documents: tuple[Document, ...]) -> tuple[Document, ...]:
        """Externalize inline blobs, encode and write. Return the stored, blob-free form."""
        stored: list[Document] = []
        for document in documents:
            if document.file_data:
                document = document.with_file_data(document.file_data)
                try:
                    path = self._blobs.put(document.id, document.file_extension, document.file_data)
                except BlobStoreError as exc:
                    raise FileSaveFailedError(str(exc)) from exc
                document = replace(document, file_path=str(path), file_data=b"")
            stored.append(document)

        key = self._config.documents_key
        try:
            encoded = encode_documents(stored)
        except MetadataEncodeError as exc:
            raise SaveFailedError(str(exc)) from exc
        warn_if_over_soft_limit(key, encoded, self._config.metadata_soft_limit_bytes)
        try:
            self._kv.set(key, encoded)
        except MetadataStoreError as exc:
            raise SaveFailedError(str(exc)) from exc

        logger.info("Saved %d documents (%d bytes of metadata)", len(stored), len(encoded))
        return tuple(stored)

    def _commit(self, staged: tuple[Document, ...], *, reload: bool = False) -> Result:
        """Persist ``staged`` and adopt it as the collection only on success."""
        try:
            stored = self._persist(staged)
        except (FileSaveFailedError, SaveFailedError) as exc:
            logger.warning("Document save failed: %s", exc)
            return Result.failure(exc)

        merged = tuple(
            replace(document, file_path=persisted.file_path, size=persisted.size, checksum=persisted.checksum)
            for document, persisted in zip(staged, stored, strict=True)
        )
        if reload:
            self._reload(merged)
        else:
            self._documents = merged
            self._notify()
        return Result.success()

    def _reload(self, saved: tuple[Document, ...]) -> None:
        """Re-read the collection just written, falling back to ``saved`` if the read-back fails."""
        raw = self._read_key(self._config.documents_key)
        documents = None if raw is None else self._decode_stored(raw)
        if documents is None:
            logger.warning("Could not re-read %d saved documents; keeping them from memory", len(saved))
            documents = saved
        self._documents = documents
        logger.info("Reloaded %d documents", len(self._documents))
        self._notify()

    # --- mutations ---

    def add(self, document: Document) -> Result:
        """Append a document, persist, and reload from the store."""
        try:
            _validate(document)
        except RecordValidationError as exc:
            return Result.failure(exc)
        if self._index_of(document.id) is not None:
            return Result.failure(RecordValidationError("id", f"document {document.id} already exists"))
        return self._commit((*self._documents, document), reload=True)

    def update(self, document: Document) -> Result:
        """Replace the document with the same id, stamping ``modified_at``."""
        index = self._index_of(document.id)
        if index is None:
            return Result.failure(DocumentNotFoundError(document.id))
        try:
            _validate(document)
        except RecordValidationError as exc:
            return Result.failure(exc)
        staged = list(self._documents)
        staged[index] = replace(document, modified_at=utc_now())
        return self._commit(tuple(staged), reload=True)

    def delete(self, document: Document | str) -> Result:
        """Remove a document's metadata. Its blob file is left in place.

        Use ``sweep_orphaned_blobs`` to reclaim blob files no record references.
        """
        document_id = document if isinstance(document, str) else document.id
        if self._index_of(document_id) is None:
            return Result.failure(DocumentNotFoundError(document_id))
        self.selected_ids.discard(document_id)
        return self._commit(tuple(item for item in self._documents if item.id != document_id))

    def _set_archived(self, document: Document | str, archived: bool) -> Result:
        document_id = document if isinstance(document, str) else document.id
        index = self._index_of(document_id)
        if index is None:
            return Result.failure(DocumentNotFoundError(document_id))
        staged = list(self._documents)
        staged[index] = replace(staged[index], is_archived=archived, modified_at=utc_now())
        return self._commit(tuple(staged))

    def archive(self, document: Document | str) -> Result:
        """Mark a document archived."""
        return self._set_archived(document, True)

    def unarchive(self, document: Document | str) -> Result:
        """Clear a document's archived flag."""
        return self._set_archived(document, False)

    # --- selection and bulk actions ---

    def toggle_selection(self, document_id: str) -> None:
        """Add or remove one id from the selection set."""
        if document_id in self.selected_ids:
            self.selected_ids.remove(document_id)
        else:
            self.selected_ids.add(document_id)

    def select_all(self) -> None:
        """Select every document in the current filtered view."""
        self.selected_ids = {document.id for document in self.filtered_documents}

    def deselect_all(self) -> None:
        """Clear the selection set."""
        self.selected_ids.clear()

    def _bulk(self, mutate: Callable[[Document], Document | None]) -> Result:
        """Apply ``mutate`` to every selected document (``None`` drops it), persist once."""
        staged: list[Document] = []
        for document in self._documents:
            if document.id in self.selected_ids:
                mutated = mutate(document)
                if mutated is not None:
                    staged.append(mutated)
            else:
                staged.append(document)
        result = self._commit(tuple(staged))
        if result.ok:
            self.selected_ids.clear()
        return result

    def bulk_archive_selected(self) -> Result:
        """Archive every selected document."""
        now = utc_now()
        return self._bulk(lambda document: replace(document, is_archived=True, modified_at=now))

    def bulk_delete_selected(self) -> Result:
        """Delete every selected document (blob files are left in place)."""
        return self._bulk(lambda document: None)

    def bulk_update_category(self, category: DocumentCategory) -> Result:
        """Move every selected document to ``category``."""
        now = utc_now()
        return self._bulk(lambda document: replace(document, category=category, modified_at=now))

    # --- custom-field schema ---

    def _write_custom_fields(self, definitions: tuple[CustomFieldDefinition, ...]) -> None:
        key = self._config.custom_fields_key
        try:
            self._kv.set(key, encode_custom_fields(definitions))
        except (MetadataEncodeError, MetadataStoreError) as exc:
            raise SaveFailedError(str(exc), subject="custom fields") from exc

    def _commit_custom_fields(self, staged: tuple[CustomFieldDefinition, ...]) -> Result:
        try:
            self._write_custom_fields(staged)
        except SaveFailedError as exc:
            logger.warning("Custom field save failed: %s", exc)
            return Result.failure(exc)
        self._custom_fields = staged
        self._notify()
        return Result.success()

    def _field_index(self, field_id: str) -> int | None:
        return next((index for index, item in enumerate(self._custom_fields) if item.id == field_id), None)

    def add_custom_field(self, definition: CustomFieldDefinition) -> Result:
        """Append a field definition to the schema."""
        if not definition.name.strip():
            return Result.failure(RecordValidationError("name", "a custom field name is required"))
        if self._field_index(definition.id) is not None:
            return Result.failure(RecordValidationError("id", f"custom field {definition.id} already exists"))
        return self._commit_custom_fields((*self._custom_fields, definition))

    def update_custom_field(self, definition: CustomFieldDefinition) -> Result:
        """Replace the field definition with the same id."""
        index = self._field_index(definition.id)
        if index is None:
            return Result.failure(CustomFieldNotFoundError(definition.id))
        if not definition.name.strip():
            return Result.failure(RecordValidationError("name", "a custom field name is required"))
        staged = list(self._custom_fields)
        staged[index] = definition
        return self._commit_custom_fields(tuple(staged))

    def delete_custom_field(self, definition: CustomFieldDefinition | str) -> Result:
        """Remove a field definition. Values stored under its id stay on the documents."""
        field_id = definition if isinstance(definition, str) else definition.id
        if self._field_index(field_id) is None:
            return Result.failure(CustomFieldNotFoundError(field_id))
        return self._commit_custom_fields(tuple(item for item in self._custom_fields if item.id != field_id))

    def custom_field_value(self, document: Document, field_id: str) -> FieldValue:
        """Return one custom-field value coerced to its declared type.

        Values whose definition was deleted come back as the raw string.
        Raises ``FieldValueError`` when the stored string does not fit the type.
        """
        index = self._field_index(field_id)
        if index is None:
            return document.custom_fields.get(field_id)
        definition = self._custom_fields[index]
        return coerce_value(definition, document.custom_fields.get(field_id, definition.default_value))

    def typed_custom_fields(self, document: Document) -> dict[str, FieldValue]:
        """Return every defined custom-field value of ``document``, coerced."""
        return coerce_values(self._custom_fields, document.custom_fields)

    # --- queries ---

    @property
    def query(self) -> DocumentQuery:
        """Snapshot of the active filter and sort state."""
        return DocumentQuery(
            search_text=self.search_text,
            category=self.filter_category,
            access_level=self.filter_access_level,
            file_type=self.file_type_filter,
            quick_filter=self.quick_filter,
            show_archived=self.show_archived,
            sort_option=self.sort_option,
            sort_ascending=self.sort_ascending,
            recent_days=self._config.recent_days,
        )

    @property
    def filtered_documents(self) -> tuple[Document, ...]:
        """The collection after the active filters and sort; never mutates state."""
        return filter_documents(self._documents, self.query)

    @property
    def recent_documents(self) -> tuple[Document, ...]:
        """Documents uploaded within the configured recent window, newest first."""
        return recent_documents(self._documents, days=self._config.recent_days)

    @property
    def available_file_types(self) -> tuple[str, ...]:
        """Distinct lowercase extensions in the collection."""
        return available_file_types(self._documents)

    def documents_by_category(self, category: DocumentCategory) -> tuple[Document, ...]:
        """Filtered documents in ``category``."""
        return tuple(document for document in self.filtered_documents if document.category is category)

    def documents_by_job(self, job_id: str) -> tuple[Document, ...]:
        """Filtered documents associated with ``job_id``."""
        return tuple(document for document in self.filtered_documents if document.associated_job_id == job_id)

    def documents_by_contact(self, contact_id: str) -> tuple[Document, ...]:
        """Filtered documents associated with ``contact_id``."""
        return tuple(
            document for document in self.filtered_documents if document.associated_contact_id == contact_id
        )

    def document_count(self, category: DocumentCategory) -> int:
        """Number of filtered documents in ``category``."""
        return len(self.documents_by_category(category))

    def stats(self) -> DocumentStats:
        """Aggregate counts and sizes over the whole collection."""
        return document_stats(self._documents)

    def filter_by_file_type(self, file_type: str) -> None:
        """Show only one extension; clears the quick filter."""
        self.file_type_filter = file_type
        self.quick_filter = None

    def clear_filters(self) -> None:
        """Reset search text and every filter."""
        self.file_type_filter = None
        self.quick_filter = None
        self.filter_category = None
        self.filter_access_level = None
        self.search_text = ""

    # --- background intake and maintenance ---

    def ingest_in_background(
        self,
        executor: Executor,
        data: bytes,
        filename: str,
        mime_hint: str | None = None,
        **fields: Any,
    ) -> Future[Document]:
        """Derive a Document from picker output on ``executor``.

        The future resolves to an unsaved Document; the collection is not
        touched. Call ``add`` with the result from the owning context.
        """
        return executor.submit(
            document_from_upload,
            data,
            filename,
            mime_hint,
            thumbnail_dimension=self._config.thumbnail_max_dimension,
            thumbnail_quality=self._config.thumbnail_quality,
            **fields,
        )

    def referenced_blob_paths(self) -> tuple[str, ...]:
        """Blob paths pointed to by the current collection."""
        return tuple(document.file_path for document in self._documents if document.file_path)

    def sweep_orphaned_blobs(self, *, dry_run: bool = False) -> SweepReport:
        """Delete blob files no document references (left behind by deletes or failed saves)."""
        return self._blobs.sweep_orphans(self.referenced_blob_paths(), dry_run=dry_run)
