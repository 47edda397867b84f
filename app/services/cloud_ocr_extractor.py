from __future__ import annotations

import logging
from typing import Optional, Tuple

from app.clients.textract_client import TextractClient
from app.core.errors import ExtractionError, InvalidFormat, NoExtractableText, capture
from app.domain.study_documents import has_image_header, has_pdf_header
from app.services.column_layout import ColumnLayoutAnalyzer, group_by_page

logger = logging.getLogger(__name__)


class CloudOCRExtractor:
    def __init__(self, client: Optional[TextractClient], analyzer: Optional[ColumnLayoutAnalyzer] = None) -> None:
        self._client = client
        self._analyzer = analyzer or ColumnLayoutAnalyzer.for_cloud()

    @property
    def enabled(self) -> bool:
        return self._client is not None and bool(getattr(self._client, "enabled", True))

    async def extract(self, content: bytes, *, allow_images: bool = False) -> str:
        if not has_pdf_header(content) and not (allow_images and has_image_header(content)):
            raise InvalidFormat("missing %PDF header")
        if self._client is None:
            raise ExtractionError("cloud OCR client not configured")

        logger.info("Sending %d bytes to cloud OCR", len(content))
        blocks = await self._client.detect_text(content)
        if not any(block.text.strip() for block in blocks):
            raise NoExtractableText("cloud OCR detected no text")

        pages = group_by_page(blocks)
        logger.info("Cloud OCR returned %d lines over %d pages", len(blocks), len(pages))
        return self._analyzer.render_document(pages)

    async def try_extract(self, content: bytes, *, allow_images: bool = False) -> Tuple[str, Optional[ExtractionError]]:
        return await capture(self.extract(content, allow_images=allow_images))
