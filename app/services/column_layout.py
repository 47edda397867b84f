from __future__ import annotations

import functools
import re
from itertools import zip_longest
from typing import Dict, Iterable, List, Optional, Tuple

from app.core.config import Settings, settings
from app.domain.study_documents import count_words
from app.models.schemas import ColumnSplit, TextBlock

SENTENCE_BOUNDARY = re.compile(r"[.!?]+")
EMPTY_PAGE_NOTE = "(No text content detected)"
COLUMN_POSITIONS = ("center", "left")


def _sign(value: float) -> int:
    if value < 0:
        return -1
    if value > 0:
        return 1
    return 0


def group_by_page(blocks: Iterable[TextBlock]) -> Dict[int, List[TextBlock]]:
    pages: Dict[int, List[TextBlock]] = {}
    for block in blocks:
        pages.setdefault(block.page or 1, []).append(block)
    return pages


class ColumnLayoutAnalyzer:
    """Splits positioned text into left/right columns and spots translation pairs.

    Blocks are expected in the normalized top-left coordinate space of
    :class:`TextBlock`; callers convert their native geometry first.
    """

    def __init__(
        self,
        *,
        midline: float = 0.5,
        min_column_blocks: int = 2,
        row_epsilon: float = 0.01,
        similarity_ceiling: float = 0.8,
        min_words: int = 10,
        min_length_ratio: float = 0.5,
        line_separator: str = "\n",
        column_position: str = "center",
    ) -> None:
        if column_position not in COLUMN_POSITIONS:
            raise ValueError(f"column_position must be one of {COLUMN_POSITIONS}")
        self._midline = midline
        self._min_column_blocks = min_column_blocks
        self._row_epsilon = row_epsilon
        self._similarity_ceiling = similarity_ceiling
        self._min_words = min_words
        self._min_length_ratio = min_length_ratio
        self._line_separator = line_separator
        self._column_position = column_position

    @classmethod
    def for_cloud(cls, config: Optional[Settings] = None) -> "ColumnLayoutAnalyzer":
        cfg = config or settings
        return cls(
            midline=cfg.layout_column_midline,
            min_column_blocks=cfg.layout_cloud_min_column_blocks,
            row_epsilon=cfg.layout_cloud_row_epsilon,
            similarity_ceiling=cfg.bilingual_similarity_ceiling,
            min_words=cfg.bilingual_min_words,
            min_length_ratio=cfg.bilingual_min_length_ratio,
            line_separator="\n",
            column_position="center",
        )

    @classmethod
    def for_local(cls, config: Optional[Settings] = None) -> "ColumnLayoutAnalyzer":
        cfg = config or settings
        return cls(
            midline=cfg.layout_column_midline,
            min_column_blocks=cfg.layout_local_min_column_blocks,
            row_epsilon=cfg.layout_local_row_epsilon,
            similarity_ceiling=cfg.bilingual_similarity_ceiling,
            min_words=cfg.bilingual_min_words,
            min_length_ratio=cfg.bilingual_min_length_ratio,
            line_separator=" ",
            column_position="left",
        )

    def _position(self, block: TextBlock) -> float:
        # rendered text runs are anchored at their start x; OCR lines by their centre
        if self._column_position == "left":
            return block.bounding_box.left
        return block.bounding_box.center_x

    def sort_blocks(self, blocks: Iterable[TextBlock]) -> List[TextBlock]:
        def compare(a: TextBlock, b: TextBlock) -> int:
            a_box, b_box = a.bounding_box, b.bounding_box
            if abs(a_box.top - b_box.top) < self._row_epsilon:
                return _sign(a_box.left - b_box.left)
            return _sign(a_box.top - b_box.top)

        return sorted(blocks, key=functools.cmp_to_key(compare))

    def split_columns(self, blocks: Iterable[TextBlock]) -> ColumnSplit:
        ordered = self.sort_blocks(blocks)
        left = [b for b in ordered if self._position(b) < self._midline]
        right = [b for b in ordered if self._position(b) >= self._midline]
        is_two_column = (
            bool(left)
            and bool(right)
            and len(left) > self._min_column_blocks
            and len(right) > self._min_column_blocks
        )
        is_bilingual = is_two_column and self.is_bilingual(_join(left), _join(right))
        return ColumnSplit(
            left_blocks=left,
            right_blocks=right,
            is_two_column=is_two_column,
            is_bilingual=is_bilingual,
        )

    @staticmethod
    def similarity(first: str, second: str) -> float:
        """Share of the combined vocabulary that the two texts have in common."""
        first_words = first.lower().split()
        second_words = second.lower().split()
        vocabulary = set(first_words) | set(second_words)
        if not vocabulary:
            return 0.0
        second_set = set(second_words)
        overlap = sum(1 for word in first_words if word in second_set)
        return min(1.0, overlap / len(vocabulary))

    def is_bilingual(self, left_text: str, right_text: str) -> bool:
        left_words = count_words(left_text)
        right_words = count_words(right_text)
        if not left_words or not right_words:
            return False
        similar_length = min(left_words, right_words) / max(left_words, right_words) > self._min_length_ratio
        different_content = self.similarity(left_text, right_text) < self._similarity_ceiling
        return (
            similar_length
            and different_content
            and left_words > self._min_words
            and right_words > self._min_words
        )

    @staticmethod
    def align_sentences(left_text: str, right_text: str) -> List[Tuple[str, str]]:
        left = [s.strip() for s in SENTENCE_BOUNDARY.split(left_text) if s.strip()]
        right = [s.strip() for s in SENTENCE_BOUNDARY.split(right_text) if s.strip()]
        return list(zip_longest(left, right, fillvalue=""))

    def render_page(self, page_number: int, blocks: Iterable[TextBlock]) -> Tuple[str, ColumnSplit]:
        usable = [b for b in blocks if b.text and b.text.strip()]
        if not usable:
            return f"\n--- Page {page_number} ---\n{EMPTY_PAGE_NOTE}\n", ColumnSplit()

        split = self.split_columns(usable)
        if not split.is_two_column:
            body = self._line_separator.join(b.text for b in self.sort_blocks(usable))
            return f"\n--- Page {page_number} ---\n{body}\n", split

        left_text = _join(split.left_blocks)
        right_text = _join(split.right_blocks)
        out = f"\n--- Page {page_number} (2-Column Layout) ---\n"
        out += f"\n**LEFT COLUMN:**\n{left_text}\n\n"
        out += f"**RIGHT COLUMN:**\n{right_text}\n\n"
        if split.is_bilingual:
            out += "**BILINGUAL SIDE-BY-SIDE:**\n"
            out += "| Left Column | Right Column |\n"
            out += "|-------------|-------------|\n"
            for left, right in self.align_sentences(left_text, right_text):
                out += f"| {left} | {right} |\n"
            out += "\n"
        return out, split

    def render_document(self, pages: Dict[int, List[TextBlock]]) -> str:
        parts: List[str] = []
        has_two_column = False
        has_bilingual = False
        for page_number in sorted(pages):
            text, split = self.render_page(page_number, pages[page_number])
            parts.append(text)
            has_two_column = has_two_column or split.is_two_column
            has_bilingual = has_bilingual or split.is_bilingual

        body = "".join(parts)
        if has_two_column:
            layout = "2-column layout with bilingual content" if has_bilingual else "2-column layout"
            body = f"**DOCUMENT STRUCTURE:** This document contains a {layout}.\n\n{body}"
        return body.strip()


def _join(blocks: List[TextBlock]) -> str:
    return " ".join(b.text for b in blocks).strip()
