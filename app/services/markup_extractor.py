from __future__ import annotations

import io
import logging
import statistics
from typing import List, Optional, Tuple

from docx import Document

from app.core.errors import ExtractionError, NoExtractableText, UnpackError, capture
from app.utils.compat import to_thread

logger = logging.getLogger(__name__)


class MarkupTextExtractor:
    """Raw text out of word-processor (zip + XML) documents."""

    @staticmethod
    def read_text(content: bytes) -> str:
        try:
            doc = Document(io.BytesIO(content))
        except Exception as exc:
            raise UnpackError(f"not a readable word-processor archive: {exc}") from exc

        chunks: List[str] = []
        for para in doc.paragraphs:
            text = (para.text or "").strip()
            if text:
                chunks.append(text)
        for table in doc.tables:
            for row in table.rows:
                cells = [cell.text.strip() for cell in row.cells]
                row_text = " | ".join(value for value in cells if value)
                if row_text:
                    chunks.append(row_text)

        text = "\n".join(chunks)
        if not text.strip():
            raise UnpackError("word-processor document contains no text")
        return text

    async def extract(self, content: bytes) -> str:
        if not content:
            raise UnpackError("empty word-processor document")
        text = await to_thread(self.read_text, content)
        logger.debug("Unpacked %d characters from word document", len(text))
        return text

    async def try_extract(self, content: bytes) -> Tuple[str, Optional[ExtractionError]]:
        return await capture(self.extract(content))


class PlainTextExtractor:
    ENCODINGS: Tuple[str, ...] = ("utf-8-sig", "utf-16", "cp1252")

    @staticmethod
    def _is_reasonable_text(text: str) -> bool:
        stripped = text.replace("\x00", "")
        if not stripped.strip():
            return False
        visible = [ch for ch in stripped if ch.isprintable() and ch not in {"\u200b", "\ufeff"}]
        # binary payloads have a low printable ratio
        if len(visible) / len(stripped) < 0.7:
            return False
        control_ratio = statistics.mean(
            1.0 if ch in {"\n", "\r", "\t"} or ord(ch) >= 32 else 0.0 for ch in stripped
        )
        return control_ratio > 0.85

    def decode(self, content: bytes) -> str:
        for encoding in self.ENCODINGS:
            # UTF-16 without BOM happily decodes almost anything
            if encoding == "utf-16" and not content.startswith((b"\xff\xfe", b"\xfe\xff")):
                continue
            try:
                text = content.decode(encoding)
            except UnicodeDecodeError:
                continue
            if self._is_reasonable_text(text):
                return text
        return ""

    async def extract(self, content: bytes) -> str:
        text = self.decode(content or b"")
        if not text.strip():
            raise NoExtractableText("text file is empty or not decodable")
        return text

    async def try_extract(self, content: bytes) -> Tuple[str, Optional[ExtractionError]]:
        return await capture(self.extract(content))
