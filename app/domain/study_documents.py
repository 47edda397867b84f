from __future__ import annotations

import re
from typing import Dict, List, Optional

from app.models.schemas import DocumentCategory, Resource


WORD_EXTENSIONS = {"docx", "doc"}
PDF_EXTENSIONS = {"pdf"}
TEXT_EXTENSIONS = {"txt", "md", "rtf", "csv"}

WORD_MIME_MARKERS: List[str] = ["wordprocessingml", "msword", "word"]
PDF_MIME_MARKERS: List[str] = ["pdf"]
TEXT_MIME_PREFIX = "text/"

PDF_MAGIC = b"%PDF"
# Textract accepts these besides PDF
IMAGE_MAGICS: List[bytes] = [
    b"\x89PNG\r\n\x1a\n",
    b"\xff\xd8\xff",
    b"II*\x00",
    b"MM\x00*",
]

CATEGORY_LABELS: Dict[DocumentCategory, str] = {
    DocumentCategory.WORD: "Word Document",
    DocumentCategory.PDF: "PDF Document",
    DocumentCategory.TEXT: "Text File",
    DocumentCategory.UNKNOWN: "Document",
}

PAGE_MARKER_PATTERN = re.compile(r"--- Page \d+(?: \(2-Column Layout\))? ---")

DOCUMENT_HELP_OPTIONS: List[str] = [
    "Discussing the document's topic or purpose",
    "Creating study materials based on what you tell me about it",
    "Preparing questions or summaries",
    "Organizing your approach to working with this document",
]

GENERIC_HELP_OPTIONS: List[str] = [
    "Discussing the general topics related to this document",
    "Creating study materials based on what you tell me about it",
    "Preparing quiz questions on the subject matter",
    "Organizing your study approach for this material",
]


def has_pdf_header(content: bytes) -> bool:
    return content[: len(PDF_MAGIC)] == PDF_MAGIC


def has_image_header(content: bytes) -> bool:
    return any(content.startswith(magic) for magic in IMAGE_MAGICS)


def count_words(text: str) -> int:
    return len((text or "").split())


def count_pages(text: str) -> int:
    return len(PAGE_MARKER_PATTERN.findall(text or "")) or 1


def _header(label: str, file_name: str, topic: Optional[str]) -> str:
    out = f'{label}: "{file_name}"\n\n'
    if topic:
        out += f"Topic: {topic}\n\n"
    return out


def _bullets(options: List[str]) -> str:
    return "".join(f"• {option}\n" for option in options)


def document_failure_template(
    category: DocumentCategory,
    resource: Resource,
    reason: Optional[str] = None,
) -> str:
    """Failure text for word and PDF documents; offers a paste-text path."""
    label = CATEGORY_LABELS[category]
    kind = "Word document" if category == DocumentCategory.WORD else "PDF document"
    content = _header(label, resource.file_name, resource.topic)
    if reason:
        content += f"{reason}\n\n"
    content += (
        f"This {kind} has been uploaded but text extraction encountered an issue. "
        "I can still help you with:\n\n"
    )
    content += _bullets(DOCUMENT_HELP_OPTIONS) + "\n"
    content += (
        "Please describe what specific aspects of this document you'd like me to help with, "
        "or you can copy and paste text from the document for specific questions."
    )
    return content


def generic_failure_template(resource: Resource, reason: Optional[str] = None) -> str:
    content = f'Document: "{resource.file_name}"\n'
    content += f"Type: {resource.resource_type or 'Unknown'}\n\n"
    if resource.topic:
        content += f"Topic: {resource.topic}\n\n"
    if reason:
        content += f"{reason}\n\n"
    content += "This document has been uploaded but its text could not be read. I can help you with:\n\n"
    content += _bullets(GENERIC_HELP_OPTIONS) + "\n"
    content += "Please describe what specific aspects of this document you would like me to help with."
    return content
