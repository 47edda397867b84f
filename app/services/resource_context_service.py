from __future__ import annotations

import asyncio
import logging
from typing import List, Tuple

from app.models.schemas import ExtractionResult, Resource
from app.services.document_processing_service import DocumentProcessingService

logger = logging.getLogger(__name__)

DIAGNOSTIC_MESSAGE = "Error: Unable to process the requested resource."
PREVIEW_CHARS = 200


class ResourceContextService:
    """Assembles extracted resource text for the tutoring context."""

    def __init__(self, processor: DocumentProcessingService) -> None:
        self._processor = processor

    async def _safe_process(self, resource: Resource) -> Tuple[ExtractionResult, bool]:
        try:
            return await self._processor.process_document(resource), True
        except Exception:
            logger.exception("Resource %s could not be processed", resource.id)
            return ExtractionResult(content=DIAGNOSTIC_MESSAGE, is_actual_content=False), False

    async def get_resource_context(self, resource: Resource) -> str:
        result, ok = await self._safe_process(resource)
        if not ok:
            return result.content
        kind = resource.resource_type or "unknown type"
        return f"RESOURCE: {resource.file_name} ({kind})\n\n{result.content}"

    async def format_resources(self, resources: List[Resource]) -> str:
        if not resources:
            return ""

        processed = await asyncio.gather(*(self._safe_process(resource) for resource in resources))

        context = f"===== RESOURCES ({len(resources)}) =====\n\n"
        for index, (resource, (result, _)) in enumerate(zip(resources, processed), start=1):
            context += f"RESOURCE {index}: {resource.file_name}\n"
            context += f"Type: {resource.resource_type or 'Unknown'}\n"
            if resource.topic:
                context += f"Topic: {resource.topic}\n"
            if result.is_actual_content:
                preview = result.content
                if len(preview) > PREVIEW_CHARS:
                    preview = preview[:PREVIEW_CHARS] + "..."
                context += f"Content preview: {preview}\n"
            else:
                context += "Content preview: (text extraction unavailable)\n"
            context += "\n"
        return context.rstrip() + "\n"
