from __future__ import annotations

from typing import Optional

from app.core.config import Settings, settings
from app.domain.study_documents import CATEGORY_LABELS, count_pages, count_words
from app.models.schemas import DocumentCategory, ExtractionResult, Resource


class ResponseBuilder:
    """Turns extracted text into the bounded content handed to the tutor.

    Word and text files are cut by word count alone. Page-structured output
    (PDF, or unknown files recovered by OCR) also counts pages, which track
    document complexity better than words do.
    """

    def __init__(self, config: Optional[Settings] = None) -> None:
        cfg = config or settings
        self._max_full_words = cfg.response_max_full_words
        self._preview_words = cfg.response_preview_words
        self._pdf_max_full_words = cfg.response_pdf_max_full_words
        self._pdf_max_full_pages = cfg.response_pdf_max_full_pages
        self._pdf_preview_words = cfg.response_pdf_preview_words
        self._pdf_preview_paragraphs = cfg.response_pdf_preview_paragraphs

    def build(
        self,
        extracted_text: str,
        file_name: str,
        category: DocumentCategory,
        resource: Resource,
    ) -> ExtractionResult:
        label = CATEGORY_LABELS[category]
        content = f'{label}: "{file_name}"\n\n'
        if resource.topic:
            content += f"Topic: {resource.topic}\n\n"

        if category in (DocumentCategory.PDF, DocumentCategory.UNKNOWN):
            content += self._paged_body(extracted_text)
        else:
            content += self._plain_body(extracted_text)
        return ExtractionResult(content=content, is_actual_content=True)

    def _plain_body(self, text: str) -> str:
        word_count = count_words(text)
        out = f"Document overview: {word_count} words\n\n"
        if word_count <= self._max_full_words:
            return out + f"Full document content:\n\n{text}"

        first_portion = " ".join(text.split()[: self._preview_words])
        out += f"Document begins with:\n\n{first_portion}...\n\n"
        out += (
            "[Full document content has been extracted and is available for analysis. "
            f"The complete text contains {word_count} words and can be referenced in our conversation.]"
        )
        return out

    def _paged_body(self, text: str) -> str:
        word_count = count_words(text)
        page_count = count_pages(text)
        plural = "s" if page_count != 1 else ""
        out = f"Document overview: {page_count} page{plural}, approximately {word_count} words.\n\n"
        if word_count <= self._pdf_max_full_words and page_count <= self._pdf_max_full_pages:
            return out + f"Full content:\n\n{text}"

        first_paragraphs = "\n\n".join(text.split("\n\n")[: self._pdf_preview_paragraphs])
        intro = " ".join(first_paragraphs.split()[: self._pdf_preview_words])
        out += f"Document begins with:\n\n{intro}...\n\n"
        out += (
            f"[Document continues for {page_count} page{plural}. "
            "The full text has been extracted and can be referenced in conversations.]"
        )
        return out
