"""ContactManager: contacts persisted wholly inline, with compressed profile images."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import TYPE_CHECKING

from pulsestore.codec import decode_contacts, encode_contacts
from pulsestore.config import EngineConfig
from pulsestore.errors import (
    ContactNotFoundError,
    MetadataDecodeError,
    MetadataEncodeError,
    MetadataStoreError,
    RecordValidationError,
    SaveFailedError,
)
from pulsestore.imaging import compress_image
from pulsestore.kvstore import FileKeyValueStore, KeyValueStore, warn_if_over_soft_limit
from pulsestore.query import filter_contacts, group_contacts
from pulsestore.result import Result
from pulsestore.types import Contact, ContactGroupBy

if TYPE_CHECKING:
    from collections.abc import Callable

    Observer = Callable[["ContactManager"], None]

logger = logging.getLogger(__name__)


class ContactManager:
    """Owns the contact collection.

    Contacts never externalize blobs: profile images are compressed and
    stored inline, which is why the encoded collection is checked against the
    soft size limit on every save. Same staging contract as DocumentManager.
    """

    def __init__(
        self,
        kv_store: KeyValueStore,
        *,
        config: EngineConfig | None = None,
        load: bool = True,
    ) -> None:
        """Initialize with an injected metadata store and, by default, load persisted contacts."""
        self._kv = kv_store
        self._config = config or EngineConfig()
        self._contacts: tuple[Contact, ...] = ()
        self._observers: list[Observer] = []

        self.search_text = ""
        self.group_by = ContactGroupBy.NONE

        if load:
            self.load()

    @classmethod
    def open(cls, config: EngineConfig | None = None) -> ContactManager:
        """Build a manager backed by the configured data directory."""
        config = config or EngineConfig()
        return cls(FileKeyValueStore(config.metadata_dir), config=config)

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

    @property
    def contacts(self) -> tuple[Contact, ...]:
        """Return the full collection."""
        return self._contacts

    def get(self, contact_id: str) -> Contact | None:
        """Return the contact with ``contact_id``, if any."""
        return next((contact for contact in self._contacts if contact.id == contact_id), None)

    def _index_of(self, contact_id: str) -> int | None:
        return next((index for index, contact in enumerate(self._contacts) if contact.id == contact_id), None)

    @property
    def filtered_contacts(self) -> tuple[Contact, ...]:
        """Contacts matching the active search text."""
        return filter_contacts(self._contacts, self.search_text)

    def grouped_contacts(self, group_by: ContactGroupBy | None = None) -> dict[str, tuple[Contact, ...]]:
        """Filtered contacts grouped by ``group_by``, or by the active ``group_by`` attribute."""
        return group_contacts(self.filtered_contacts, group_by or self.group_by)

    def load(self) -> None:
        """Rebuild the collection from the metadata store; corrupt data yields an empty list."""
        key = self._config.contacts_key
        try:
            raw = self._kv.get(key)
        except MetadataStoreError:
            logger.exception("Could not read %r from the metadata store", key)
            raw = None

        if raw is None:
            self._contacts = ()
        else:
            try:
                self._contacts = decode_contacts(raw)
            except MetadataDecodeError:
                logger.exception("Stored contact metadata is corrupt; starting with an empty list")
                self._contacts = ()
        logger.info("Loaded %d contacts", len(self._contacts))
        self._notify()

    def _compress(self, contact: Contact) -> Contact:
        """Compress a profile image unless it is already the stored, compressed one."""
        if contact.profile_image is None:
            return contact
        current = self.get(contact.id)
        if current is not None and current.profile_image == contact.profile_image:
            return contact
        return replace(
            contact,
            profile_image=compress_image(
                contact.profile_image,
                self._config.profile_image_max_dimension,
                self._config.profile_image_quality,
            ),
        )

    def _commit(self, staged: tuple[Contact, ...]) -> Result:
        stored = tuple(self._compress(contact) for contact in staged)
        key = self._config.contacts_key
        try:
            encoded = encode_contacts(stored)
            warn_if_over_soft_limit(key, encoded, self._config.metadata_soft_limit_bytes)
            self._kv.set(key, encoded)
        except (MetadataEncodeError, MetadataStoreError) as exc:
            error = SaveFailedError(str(exc), subject="contacts")
            logger.warning("Contact save failed: %s", error)
            return Result.failure(error)

        logger.info("Saved %d contacts (%.2f MB)", len(stored), len(encoded) / 1024 / 1024)
        self._contacts = stored
        self._notify()
        return Result.success()

    def add(self, contact: Contact) -> Result:
        """Append a contact and persist."""
        if not contact.full_name.strip():
            return Result.failure(RecordValidationError("name", "a contact needs a first or last name"))
        if self._index_of(contact.id) is not None:
            return Result.failure(RecordValidationError("id", f"contact {contact.id} already exists"))
        return self._commit((*self._contacts, contact))

    def update(self, contact: Contact) -> Result:
        """Replace the contact with the same id and persist."""
        index = self._index_of(contact.id)
        if index is None:
            return Result.failure(ContactNotFoundError(contact.id))
        if not contact.full_name.strip():
            return Result.failure(RecordValidationError("name", "a contact needs a first or last name"))
        staged = list(self._contacts)
        staged[index] = contact
        return self._commit(tuple(staged))

    def delete(self, contact: Contact | str) -> Result:
        """Remove a contact and persist."""
        contact_id = contact if isinstance(contact, str) else contact.id
        if self._index_of(contact_id) is None:
            return Result.failure(ContactNotFoundError(contact_id))
        return self._commit(tuple(item for item in self._contacts if item.id != contact_id))
