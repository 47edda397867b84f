from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Dict, List, Optional, Tuple

from app.clients.storage_client import StorageClient
from app.clients.textract_client import TextractClient
from app.core.config import Settings, settings
from app.core.errors import ExtractionError, NoExtractableText
from app.domain.study_documents import document_failure_template, generic_failure_template
from app.models.schemas import DocumentCategory, ExtractionResult, Resource
from app.services.cloud_ocr_extractor import CloudOCRExtractor
from app.services.column_layout import ColumnLayoutAnalyzer
from app.services.file_type_classifier import classify
from app.services.local_pdf_extractor import LocalPDFExtractor
from app.services.markup_extractor import MarkupTextExtractor, PlainTextExtractor
from app.services.response_builder import ResponseBuilder

logger = logging.getLogger(__name__)

Attempt = Callable[[bytes], Awaitable[Tuple[str, Optional[ExtractionError]]]]
Handler = Callable[[Resource, bytes], Awaitable[ExtractionResult]]


def _always() -> bool:
    return True


@dataclass(frozen=True)
class ExtractionStage:
    name: str
    attempt: Attempt
    applicable: Callable[[], bool] = field(default=_always)


class DocumentProcessingService:
    def __init__(
        self,
        storage: Optional[StorageClient] = None,
        cloud_ocr: Optional[CloudOCRExtractor] = None,
        local_pdf: Optional[LocalPDFExtractor] = None,
        markup: Optional[MarkupTextExtractor] = None,
        plain_text: Optional[PlainTextExtractor] = None,
        responses: Optional[ResponseBuilder] = None,
        config: Optional[Settings] = None,
    ) -> None:
        cfg = config or settings
        self._owns_storage = storage is None
        self._storage = storage if storage is not None else StorageClient(cfg)
        self._cloud = (
            cloud_ocr
            if cloud_ocr is not None
            else CloudOCRExtractor(TextractClient(cfg), ColumnLayoutAnalyzer.for_cloud(cfg))
        )
        self._local = local_pdf if local_pdf is not None else LocalPDFExtractor(config=cfg)
        self._markup = markup or MarkupTextExtractor()
        self._plain = plain_text or PlainTextExtractor()
        self._responses = responses or ResponseBuilder(cfg)
        self._cloud_enabled = self._cloud.enabled

        self._handlers: Dict[DocumentCategory, Handler] = {
            DocumentCategory.WORD: self._process_word,
            DocumentCategory.PDF: self._process_pdf,
            DocumentCategory.TEXT: self._process_text,
            DocumentCategory.UNKNOWN: self._process_unknown,
        }
        missing = set(DocumentCategory) - set(self._handlers)
        if missing:
            raise RuntimeError(f"no handler for categories: {sorted(c.value for c in missing)}")

    @property
    def cloud_ocr_enabled(self) -> bool:
        return self._cloud_enabled

    @property
    def pdf_worker_enabled(self) -> bool:
        return self._local.worker_enabled

    async def close(self) -> None:
        if self._owns_storage:
            await self._storage.close()

    async def process_document(self, resource: Resource) -> ExtractionResult:
        """Fetch a stored resource and return its best text representation.

        Only ``StorageFetchError`` and programmer errors propagate; every
        extraction failure comes back as a failure template.
        """
        if not resource.resource_path:
            raise ValueError(f"resource {resource.id} has no storage path")
        content = await self._storage.fetch(resource.resource_path)
        return await self.process_content(resource, content)

    async def process_content(self, resource: Resource, content: bytes) -> ExtractionResult:
        category = classify(resource.resource_type, resource.file_extension)
        logger.info(
            "Processing %s as %s (%s, %d bytes)",
            resource.file_name,
            category.value,
            resource.resource_type or "no mime",
            len(content),
        )
        return await self._handlers[category](resource, content)

    def _document_stages(self, *, allow_images: bool) -> List[ExtractionStage]:
        async def cloud_attempt(data: bytes) -> Tuple[str, Optional[ExtractionError]]:
            return await self._cloud.try_extract(data, allow_images=allow_images)

        return [
            ExtractionStage("cloud_ocr", cloud_attempt, lambda: self._cloud_enabled),
            ExtractionStage("local_render", self._local.try_extract),
        ]

    async def _run_chain(
        self,
        stages: List[ExtractionStage],
        content: bytes,
        file_name: str,
    ) -> Tuple[str, Optional[ExtractionError]]:
        last_error: Optional[ExtractionError] = None
        for stage in stages:
            if not stage.applicable():
                logger.info("Skipping %s for %s: not configured", stage.name, file_name)
                continue

            text, error = await stage.attempt(content)
            if error is None and text.strip():
                logger.info("%s extracted %d characters from %s", stage.name, len(text), file_name)
                return text, None

            last_error = error or NoExtractableText(f"{stage.name} returned no text")
            logger.warning("%s failed for %s: %s", stage.name, file_name, last_error)
            if last_error.terminal:
                break

        return "", last_error or NoExtractableText("no extraction stage was applicable")

    async def _process_word(self, resource: Resource, content: bytes) -> ExtractionResult:
        text, error = await self._markup.try_extract(content)
        if error is not None:
            logger.warning("Word extraction failed for %s: %s", resource.file_name, error)
            return ExtractionResult(
                content=document_failure_template(DocumentCategory.WORD, resource, error.user_message),
                is_actual_content=False,
            )
        return self._responses.build(text, resource.file_name, DocumentCategory.WORD, resource)

    async def _process_pdf(self, resource: Resource, content: bytes) -> ExtractionResult:
        stages = self._document_stages(allow_images=False)
        text, error = await self._run_chain(stages, content, resource.file_name)
        if error is not None:
            return ExtractionResult(
                content=document_failure_template(DocumentCategory.PDF, resource, error.user_message),
                is_actual_content=False,
            )
        return self._responses.build(text, resource.file_name, DocumentCategory.PDF, resource)

    async def _process_text(self, resource: Resource, content: bytes) -> ExtractionResult:
        text, error = await self._plain.try_extract(content)
        if error is not None:
            logger.warning("Text file unreadable %s: %s", resource.file_name, error)
            return ExtractionResult(
                content=generic_failure_template(resource, error.user_message),
                is_actual_content=False,
            )
        return self._responses.build(text, resource.file_name, DocumentCategory.TEXT, resource)

    async def _process_unknown(self, resource: Resource, content: bytes) -> ExtractionResult:
        stages = self._document_stages(allow_images=True)
        text, error = await self._run_chain(stages, content, resource.file_name)
        if error is not None:
            logger.warning("Unknown file unreadable %s: %s", resource.file_name, error)
            return ExtractionResult(
                content=generic_failure_template(resource, error.user_message),
                is_actual_content=False,
            )
        return self._responses.build(text, resource.file_name, DocumentCategory.UNKNOWN, resource)
