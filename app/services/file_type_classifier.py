from __future__ import annotations

from app.domain.study_documents import (
    PDF_EXTENSIONS,
    PDF_MIME_MARKERS,
    TEXT_EXTENSIONS,
    TEXT_MIME_PREFIX,
    WORD_EXTENSIONS,
    WORD_MIME_MARKERS,
)
from app.models.schemas import DocumentCategory


def classify(resource_type: str, file_extension: str) -> DocumentCategory:
    """Pick a category; a recognized extension always beats the MIME type."""
    ext = (file_extension or "").lower().lstrip(".")
    if ext in WORD_EXTENSIONS:
        return DocumentCategory.WORD
    if ext in PDF_EXTENSIONS:
        return DocumentCategory.PDF
    if ext in TEXT_EXTENSIONS:
        return DocumentCategory.TEXT

    mime = (resource_type or "").strip().lower()
    if not mime:
        return DocumentCategory.UNKNOWN
    if any(marker in mime for marker in PDF_MIME_MARKERS):
        return DocumentCategory.PDF
    if any(marker in mime for marker in WORD_MIME_MARKERS):
        return DocumentCategory.WORD
    if mime.startswith(TEXT_MIME_PREFIX):
        return DocumentCategory.TEXT
    return DocumentCategory.UNKNOWN
