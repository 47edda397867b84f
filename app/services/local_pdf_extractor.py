from __future__ import annotations

import logging
from concurrent.futures.process import BrokenProcessPool
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import fitz

from app.core.config import Settings, settings
from app.core.errors import (
    ExtractionError,
    InvalidFormat,
    NoExtractableText,
    RenderError,
    WorkerLoadError,
    capture,
)
from app.domain.study_documents import has_pdf_header
from app.models.schemas import BoundingBox, TextBlock
from app.services.column_layout import ColumnLayoutAnalyzer
from app.utils.compat import run_in_worker_process, start_worker_process, to_thread

logger = logging.getLogger(__name__)


@dataclass
class TextFragment:
    text: str
    # PDF text matrix (a, b, c, d, e, f); e/f are x and baseline y in user space, y grows upwards
    transform: Tuple[float, float, float, float, float, float]
    width: float = 0.0
    height: float = 0.0


@dataclass
class RenderedPage:
    page_number: int
    width: float
    height: float
    fragments: List[TextFragment] = field(default_factory=list)


def read_pdf_pages(content: bytes) -> List[RenderedPage]:
    """Open a PDF with PyMuPDF and collect positioned text spans per page.

    Module level so it can run inside a worker process.
    """
    try:
        doc = fitz.open(stream=content, filetype="pdf")
    except (RuntimeError, ValueError) as exc:
        raise RenderError(f"cannot open PDF: {exc}") from None

    with doc:
        if doc.needs_pass:
            raise NoExtractableText("PDF is password protected")

        pages: List[RenderedPage] = []
        for index, page in enumerate(doc):
            rect = page.rect
            fragments: List[TextFragment] = []
            try:
                data = page.get_text("dict")
            except (RuntimeError, ValueError) as exc:
                logger.warning("Skipping unreadable page %d: %s", index + 1, exc)
                data = {}
            for block in data.get("blocks", []):
                if block.get("type") != 0:
                    continue
                for line in block.get("lines", []):
                    for span in line.get("spans", []):
                        text = span.get("text") or ""
                        if not text.strip():
                            continue
                        x0, y0, x1, y1 = span["bbox"]
                        origin_x, origin_y = span.get("origin", (x0, y1))
                        size = float(span.get("size") or (y1 - y0))
                        fragments.append(
                            TextFragment(
                                text=text,
                                transform=(size, 0.0, 0.0, size, float(origin_x), float(rect.height - origin_y)),
                                width=float(x1 - x0),
                                height=float(y1 - y0),
                            )
                        )
            pages.append(
                RenderedPage(
                    page_number=index + 1,
                    width=float(rect.width),
                    height=float(rect.height),
                    fragments=fragments,
                )
            )
        return pages


class PyMuPDFRenderer:
    async def load(self, content: bytes, *, use_worker: bool) -> List[RenderedPage]:
        if not use_worker:
            return await to_thread(read_pdf_pages, content)

        try:
            pool = await start_worker_process()
        except (BrokenProcessPool, OSError, NotImplementedError) as exc:
            raise WorkerLoadError(f"PDF worker failed to load: {exc}") from exc

        try:
            return await run_in_worker_process(pool, read_pdf_pages, content)
        except BrokenProcessPool as exc:
            # the worker started, so this is the document killing the parser
            raise RenderError(f"PDF worker died while parsing: {exc}") from exc
        finally:
            pool.shutdown(wait=False)


def _clamp(value: float) -> float:
    return min(1.0, max(0.0, value))


def fragment_to_block(fragment: TextFragment, page: RenderedPage) -> TextBlock:
    page_width = page.width or 1.0
    page_height = page.height or 1.0
    x, baseline = fragment.transform[4], fragment.transform[5]
    # flip the y-up user space into the top-down space TextBlock uses
    top = 1.0 - (baseline + fragment.height) / page_height
    return TextBlock(
        text=fragment.text,
        page=page.page_number,
        bounding_box=BoundingBox(
            top=_clamp(top),
            left=_clamp(x / page_width),
            width=_clamp(fragment.width / page_width),
            height=_clamp(fragment.height / page_height),
        ),
    )


class LocalPDFExtractor:
    def __init__(
        self,
        renderer=None,
        analyzer: Optional[ColumnLayoutAnalyzer] = None,
        *,
        use_worker: Optional[bool] = None,
        config: Optional[Settings] = None,
    ) -> None:
        cfg = config or settings
        self._renderer = renderer or PyMuPDFRenderer()
        self._analyzer = analyzer or ColumnLayoutAnalyzer.for_local(cfg)
        self._use_worker = cfg.pdf_worker_enabled if use_worker is None else use_worker

    @property
    def worker_enabled(self) -> bool:
        return self._use_worker

    async def _load(self, content: bytes) -> List[RenderedPage]:
        if not self._use_worker:
            return await self._renderer.load(content, use_worker=False)
        try:
            return await self._renderer.load(content, use_worker=True)
        except WorkerLoadError as exc:
            logger.warning("PDF worker failed to load, retrying without worker: %s", exc)
            return await self._renderer.load(content, use_worker=False)

    async def extract(self, content: bytes) -> str:
        if not has_pdf_header(content):
            raise InvalidFormat("missing %PDF header")

        pages = await self._load(content)
        blocks_by_page: Dict[int, List[TextBlock]] = {
            page.page_number: [fragment_to_block(fragment, page) for fragment in page.fragments]
            for page in pages
        }
        empty_pages = [number for number, blocks in blocks_by_page.items() if not blocks]
        if empty_pages:
            logger.info("No text content on pages %s", empty_pages)
        if not any(block.text.strip() for blocks in blocks_by_page.values() for block in blocks):
            raise NoExtractableText("no text in any page; document may be image-based or encrypted")

        return self._analyzer.render_document(blocks_by_page)

    async def try_extract(self, content: bytes) -> Tuple[str, Optional[ExtractionError]]:
        return await capture(self.extract(content))
