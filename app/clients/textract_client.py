from __future__ import annotations

import logging
from typing import Dict, List, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from app.core.config import Settings, settings
from app.core.errors import RemoteServiceError
from app.models.schemas import BoundingBox, TextBlock
from app.utils.compat import to_thread

logger = logging.getLogger(__name__)

ERROR_CATEGORIES: Dict[str, str] = {
    "UnsupportedDocumentException": "unsupported_format",
    "InvalidParameterException": "invalid_document",
    "InvalidDocumentException": "invalid_document",
    "BadDocumentException": "invalid_document",
    "DocumentTooLargeException": "document_too_large",
    "ProvisionedThroughputExceededException": "throttled",
    "ThrottlingException": "throttled",
    "LimitExceededException": "throttled",
}


def parse_line_blocks(response: Dict) -> List[TextBlock]:
    """Keep LINE blocks that carry text and geometry."""
    out: List[TextBlock] = []
    for block in response.get("Blocks") or []:
        if block.get("BlockType") != "LINE":
            continue
        text = block.get("Text")
        box = (block.get("Geometry") or {}).get("BoundingBox")
        if not text or not box:
            continue
        out.append(
            TextBlock(
                text=text,
                page=int(block.get("Page") or 1),
                bounding_box=BoundingBox(
                    top=float(box.get("Top", 0.0)),
                    left=float(box.get("Left", 0.0)),
                    width=float(box.get("Width", 0.0)),
                    height=float(box.get("Height", 0.0)),
                ),
            )
        )
    return out


class TextractClient:
    def __init__(self, config: Optional[Settings] = None, client=None) -> None:
        cfg = config or settings
        self._region = cfg.aws_region
        if client is not None:
            self._client = client
        elif cfg.textract_configured:
            self._client = boto3.client(
                "textract",
                region_name=cfg.aws_region,
                aws_access_key_id=cfg.aws_access_key_id,
                aws_secret_access_key=cfg.aws_secret_access_key,
                config=Config(
                    connect_timeout=10,
                    read_timeout=cfg.textract_timeout_sec,
                    retries={"max_attempts": 2, "mode": "standard"},
                ),
            )
        else:
            self._client = None
            logger.info("AWS credentials not available - Textract stage disabled")

    @property
    def enabled(self) -> bool:
        return self._client is not None

    async def detect_text(self, content: bytes) -> List[TextBlock]:
        if self._client is None:
            raise RemoteServiceError("textract client not configured", category="unavailable")
        try:
            response = await to_thread(self._client.detect_document_text, Document={"Bytes": content})
        except ClientError as exc:
            code = exc.response.get("Error", {}).get("Code", "")
            category = ERROR_CATEGORIES.get(code, "service_error")
            raise RemoteServiceError(f"textract rejected document ({code or 'unknown'}): {exc}", category) from exc
        except BotoCoreError as exc:
            raise RemoteServiceError(f"textract unreachable: {exc}", "unreachable") from exc
        return parse_line_blocks(response)
