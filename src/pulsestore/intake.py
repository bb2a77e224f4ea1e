"""File-picker intake: turn raw upload bytes into a fully derived Document."""

from __future__ import annotations

import mimetypes
import re
from dataclasses import replace
from pathlib import PurePath
from typing import Any

from pulsestore.imaging import DEFAULT_QUALITY, DEFAULT_THUMBNAIL_DIMENSION, generate_thumbnail
from pulsestore.types import Document

OCTET_STREAM = "application/octet-stream"

_MIME_BY_EXTENSION: dict[str, str] = {
    "pdf": "application/pdf",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "bmp": "image/bmp",
    "tif": "image/tiff",
    "tiff": "image/tiff",
    "doc": "application/vnd.ms-word",
    "docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "xls": "application/vnd.ms-excel",
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "ppt": "application/vnd.ms-powerpoint",
    "pptx": "application/vnd.openxmlformats-officedocument.presentationml.presentation",
    "txt": "text/plain",
    "zip": "application/zip",
    "mp4": "video/mp4",
    "mp3": "audio/mpeg",
}

_PDF_PAGE_COUNT = re.compile(rb"/Count\s+(\d+)")


def file_extension(filename: str) -> str:
    """Return the extension of ``filename`` without the leading dot."""
    return PurePath(filename).suffix.lstrip(".")


def mime_type_for(extension: str, mime_hint: str | None = None) -> str:
    """Resolve a MIME type: known extension table, then the picker's hint, then ``mimetypes``."""
    known = _MIME_BY_EXTENSION.get(extension.lower())
    if known is not None:
        return known
    if mime_hint and mime_hint != OCTET_STREAM:
        return mime_hint
    guessed, _ = mimetypes.guess_type(f"file.{extension}") if extension else (None, None)
    return guessed or OCTET_STREAM


def pdf_page_count(data: bytes) -> int | None:
    """Best-effort page count from raw PDF bytes.

    The page tree root carries the total in its ``/Count`` entry; intermediate
    nodes carry smaller counts, so the largest value wins.
    """
    counts = [int(match.group(1)) for match in _PDF_PAGE_COUNT.finditer(data)]
    return max(counts) if counts else None


def document_from_upload(
    data: bytes,
    filename: str,
    mime_hint: str | None = None,
    *,
    thumbnail_dimension: int = DEFAULT_THUMBNAIL_DIMENSION,
    thumbnail_quality: int = DEFAULT_QUALITY,
    **fields: Any,
) -> Document:
    """Build a Document from picker output, deriving every blob-dependent field.

    ``fields`` are passed through to ``Document`` (name, category, tags...).
    An empty name defaults to the filename without its extension.
    """
    base_name = PurePath(filename).name
    extension = file_extension(base_name)
    document = Document(**fields)
    document = replace(
        document.with_file_data(data),
        original_file_name=base_name,
        file_extension=extension,
        mime_type=mime_type_for(extension, mime_hint),
        name=document.name or PurePath(base_name).stem,
    )
    if document.is_pdf():
        document = replace(document, page_count=pdf_page_count(data))
    if document.is_image():
        document = replace(
            document,
            thumbnail=generate_thumbnail(data, thumbnail_dimension, thumbnail_quality),
        )
    return document
