"""Basic usage: store documents, query them, and survive a restart."""

import tempfile
from pathlib import Path

from pulsestore import Document, DocumentCategory, DocumentManager, EngineConfig, QuickFilter, document_from_upload

with tempfile.TemporaryDirectory() as tmpdir:
    config = EngineConfig(data_dir=Path(tmpdir))

    # Every mutation writes through to disk before it touches memory.
    manager = DocumentManager.open(config)
    print(f"Seeded custom fields: {[field.name for field in manager.custom_fields]}")

    permit = document_from_upload(
        b"%PDF-1.4\n<< /Type /Pages /Count 2 >>\n",
        "city-permit.pdf",
        category=DocumentCategory.PERMITS,
        tags=("city", "2026"),
    )
    result = manager.add(permit)
    print(f"add() ok={result.ok}, pages={permit.page_count}, size={permit.formatted_size()}")

    notes = Document(name="Site notes", file_extension="txt", mime_type="text/plain")
    manager.add(notes.with_file_data(b"North wall needs flashing."))

    # Failed mutations come back as a Result; nothing raises.
    missing = manager.update(Document(name="Ghost"))
    print(f"update() of unknown id -> {missing.message}")

    # Filtering is a pure view over the collection.
    manager.search_text = "permit"
    print(f"Search 'permit': {[document.name for document in manager.filtered_documents]}")
    manager.clear_filters()
    manager.quick_filter = QuickFilter.PDFS
    print(f"PDFs: {[document.name for document in manager.filtered_documents]}")

    # A fresh manager rebuilds the same collection from disk.
    reopened = DocumentManager.open(config)
    print(f"\nAfter restart: {len(reopened.documents)} documents")
    for document in reopened.documents:
        print(f"  {document.name}: {Path(document.file_path).name} ({len(document.file_data)} bytes)")
