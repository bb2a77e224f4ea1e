"""Pure query pipeline over record collections: filter, sort, group, statistics.

Nothing here mutates its input; every function returns new tuples.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

from pulsestore.types import (
    AccessLevel,
    Contact,
    ContactGroupBy,
    Document,
    DocumentCategory,
    QuickFilter,
    SortOption,
    utc_now,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

LARGE_DOCUMENT_BYTES = 10 * 1024 * 1024
UNGROUPED_LABEL = "Other"

_WORD_EXTENSIONS = frozenset({"doc", "docx"})
_EXCEL_EXTENSIONS = frozenset({"xls", "xlsx"})
_POWERPOINT_EXTENSIONS = frozenset({"ppt", "pptx"})


@dataclass(frozen=True, slots=True)
class DocumentQuery:
    """The active filter and sort state of a document view."""

    search_text: str = ""
    category: DocumentCategory | None = None
    access_level: AccessLevel | None = None
    file_type: str | None = None
    quick_filter: QuickFilter | None = None
    show_archived: bool = False
    sort_option: SortOption = SortOption.DATE
    sort_ascending: bool = False
    recent_days: int = 7


def _contains(haystack: str, needle: str) -> bool:
    return needle.casefold() in haystack.casefold()


def matches_search(document: Document, text: str) -> bool:
    """Case-insensitive substring match over name, description, filename and tags."""
    if not text:
        return True
    return (
        _contains(document.name, text)
        or _contains(document.description, text)
        or _contains(document.original_file_name, text)
        or any(_contains(tag, text) for tag in document.tags)
    )


def _recent_cutoff(now: datetime | None, days: int) -> datetime:
    return (now or utc_now()) - timedelta(days=days)


def _matches_quick_filter(document: Document, quick_filter: QuickFilter, cutoff: datetime) -> bool:
    if quick_filter is QuickFilter.IMAGES:
        return document.is_image()
    if quick_filter is QuickFilter.PDFS:
        return document.file_extension.lower() == "pdf"
    return document.uploaded_at >= cutoff


def _sort_key(option: SortOption) -> Callable[[Document], object]:
    if option is SortOption.NAME:
        return lambda document: document.name.casefold()
    if option is SortOption.SIZE:
        return lambda document: document.size
    if option is SortOption.CATEGORY:
        return lambda document: document.category.value.casefold()
    if option is SortOption.TYPE:
        return lambda document: document.file_extension.casefold()
    return lambda document: document.uploaded_at


def filter_documents(
    documents: Iterable[Document],
    query: DocumentQuery,
    *,
    now: datetime | None = None,
) -> tuple[Document, ...]:
    """Apply the filter chain in order, then sort.

    Order: archive visibility, search text, category, access level, file type,
    quick filter; then the active sort key and direction.
    """
    result = list(documents)
    if not query.show_archived:
        result = [document for document in result if not document.is_archived]
    if query.search_text:
        result = [document for document in result if matches_search(document, query.search_text)]
    if query.category is not None:
        result = [document for document in result if document.category is query.category]
    if query.access_level is not None:
        result = [document for document in result if document.access_level is query.access_level]
    if query.file_type is not None:
        wanted = query.file_type.lower()
        result = [document for document in result if document.file_extension.lower() == wanted]
    if query.quick_filter is not None:
        cutoff = _recent_cutoff(now, query.recent_days)
        result = [document for document in result if _matches_quick_filter(document, query.quick_filter, cutoff)]

    result.sort(key=_sort_key(query.sort_option), reverse=not query.sort_ascending)
    return tuple(result)


def recent_documents(
    documents: Iterable[Document],
    *,
    days: int = 7,
    now: datetime | None = None,
) -> tuple[Document, ...]:
    """Documents uploaded within ``days``, newest first."""
    cutoff = _recent_cutoff(now, days)
    recent = [document for document in documents if document.uploaded_at >= cutoff]
    return tuple(sorted(recent, key=lambda document: document.uploaded_at, reverse=True))


def documents_over_size(documents: Iterable[Document], size: int) -> tuple[Document, ...]:
    """Documents strictly larger than ``size`` bytes."""
    return tuple(document for document in documents if document.size > size)


def available_file_types(documents: Iterable[Document]) -> tuple[str, ...]:
    """Sorted distinct lowercase extensions."""
    return tuple(sorted({document.file_extension.lower() for document in documents}))


def storage_by_category(documents: Iterable[Document]) -> tuple[tuple[DocumentCategory, int], ...]:
    """Total bytes per category, largest first."""
    totals: dict[DocumentCategory, int] = defaultdict(int)
    for document in documents:
        totals[document.category] += document.size
    return tuple(sorted(totals.items(), key=lambda item: item[1], reverse=True))


@dataclass(frozen=True, slots=True)
class DocumentStats:
    """Aggregate counts and sizes over a document collection."""

    total_count: int
    pdf_count: int
    image_count: int
    word_count: int
    excel_count: int
    powerpoint_count: int
    total_size: int
    average_size: int
    largest: Document | None
    smallest: Document | None
    large_documents: tuple[Document, ...]
    storage_by_category: tuple[tuple[DocumentCategory, int], ...]


def document_stats(documents: Iterable[Document]) -> DocumentStats:
    """Compute dashboard statistics for a document collection."""
    materialized = tuple(documents)

    def count_extensions(extensions: frozenset[str]) -> int:
        return sum(1 for document in materialized if document.file_extension.lower() in extensions)

    total_size = sum(document.size for document in materialized)
    return DocumentStats(
        total_count=len(materialized),
        pdf_count=count_extensions(frozenset({"pdf"})),
        image_count=sum(1 for document in materialized if document.is_image()),
        word_count=count_extensions(_WORD_EXTENSIONS),
        excel_count=count_extensions(_EXCEL_EXTENSIONS),
        powerpoint_count=count_extensions(_POWERPOINT_EXTENSIONS),
        total_size=total_size,
        average_size=total_size // len(materialized) if materialized else 0,
        largest=max(materialized, key=lambda document: document.size, default=None),
        smallest=min(materialized, key=lambda document: document.size, default=None),
        large_documents=documents_over_size(materialized, LARGE_DOCUMENT_BYTES),
        storage_by_category=storage_by_category(materialized),
    )


# --- contacts ---


def filter_contacts(contacts: Iterable[Contact], search_text: str) -> tuple[Contact, ...]:
    """Case-insensitive search over full name, email, company and position."""
    if not search_text:
        return tuple(contacts)
    return tuple(
        contact
        for contact in contacts
        if _contains(contact.full_name, search_text)
        or _contains(contact.email, search_text)
        or _contains(contact.company, search_text)
        or _contains(contact.position, search_text)
    )


def _group_label(contact: Contact, group_by: ContactGroupBy) -> str:
    if group_by is ContactGroupBy.COMPANY:
        label = contact.company
    elif group_by is ContactGroupBy.POSITION:
        label = contact.position
    else:
        label = ", ".join(part for part in (contact.city, contact.state) if part)
    return label.strip() or UNGROUPED_LABEL


def group_contacts(contacts: Iterable[Contact], group_by: ContactGroupBy) -> dict[str, tuple[Contact, ...]]:
    """Group contacts by company, position or location; labels sorted case-insensitively.

    ``ContactGroupBy.NONE`` returns a single group keyed by the empty string.
    """
    materialized = tuple(contacts)
    if group_by is ContactGroupBy.NONE:
        return {"": materialized}
    groups: dict[str, list[Contact]] = defaultdict(list)
    for contact in materialized:
        groups[_group_label(contact, group_by)].append(contact)
    return {label: tuple(groups[label]) for label in sorted(groups, key=str.casefold)}
