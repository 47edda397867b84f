from __future__ import annotations
from typing import Optional

from app.clients.storage_client import StorageClient
from app.clients.textract_client import TextractClient
from app.core.config import Settings, settings
from app.services.cloud_ocr_extractor import CloudOCRExtractor
from app.services.column_layout import ColumnLayoutAnalyzer
from app.services.document_processing_service import DocumentProcessingService
from app.services.local_pdf_extractor import LocalPDFExtractor
from app.services.resource_context_service import ResourceContextService


class Container:
    def __init__(self, config: Optional[Settings] = None) -> None:
        cfg = config or settings
        self.storage = StorageClient(cfg)
        self.textract = TextractClient(cfg)
        self.documents = DocumentProcessingService(
            storage=self.storage,
            cloud_ocr=CloudOCRExtractor(self.textract, ColumnLayoutAnalyzer.for_cloud(cfg)),
            local_pdf=LocalPDFExtractor(config=cfg),
            config=cfg,
        )
        self.resource_context = ResourceContextService(self.documents)

    async def close(self) -> None:
        await self.documents.close()
        await self.storage.close()
