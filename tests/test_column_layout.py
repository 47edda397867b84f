from __future__ import annotations

from typing import List

import pytest

from app.models.schemas import BoundingBox, TextBlock
from app.services.column_layout import ColumnLayoutAnalyzer, group_by_page

ENGLISH = (
    "The students arrived early. They opened their books quietly. "
    "The tutor explained the lesson. Everyone listened today with great attention."
)
FRENCH = (
    "Les élèves sont arrivés tôt. Ils ont ouvert leurs livres. "
    "Le professeur a expliqué la leçon. Tous écoutaient avec attention."
)


def _column(text: str, left: float, chunks: int = 4, page: int = 1) -> List[TextBlock]:
    words = text.split()
    size = -(-len(words) // chunks)
    blocks = []
    for index in range(chunks):
        part = words[index * size : (index + 1) * size]
        if not part:
            continue
        blocks.append(
            TextBlock(
                text=" ".join(part),
                page=page,
                bounding_box=BoundingBox(top=0.1 + index * 0.1, left=left, width=0.35, height=0.03),
            )
        )
    return blocks


def test_synthetic_columns_have_twenty_words():
    assert len(ENGLISH.split()) == 20
    assert len(FRENCH.split()) == 20


def test_english_french_columns_are_bilingual():
    analyzer = ColumnLayoutAnalyzer()
    blocks = _column(ENGLISH, left=0.05) + _column(FRENCH, left=0.55)

    split = analyzer.split_columns(blocks)
    assert split.is_two_column is True
    assert split.is_bilingual is True
    assert " ".join(b.text for b in split.left_blocks) == ENGLISH
    assert " ".join(b.text for b in split.right_blocks) == FRENCH

    text, _ = analyzer.render_page(1, blocks)
    assert "--- Page 1 (2-Column Layout) ---" in text
    assert "**LEFT COLUMN:**" in text
    assert "**RIGHT COLUMN:**" in text
    assert "**BILINGUAL SIDE-BY-SIDE:**" in text
    assert "| The students arrived early | Les élèves sont arrivés tôt |" in text
    assert "| Everyone listened today with great attention | Tous écoutaient avec attention |" in text


def test_near_duplicate_columns_are_not_bilingual():
    analyzer = ColumnLayoutAnalyzer()
    blocks = _column(ENGLISH, left=0.05) + _column(ENGLISH, left=0.55)

    split = analyzer.split_columns(blocks)
    assert split.is_two_column is True
    assert split.is_bilingual is False
    assert analyzer.similarity(ENGLISH, ENGLISH) >= 0.8

    text, _ = analyzer.render_page(1, blocks)
    assert "**BILINGUAL SIDE-BY-SIDE:**" not in text


def test_short_columns_are_not_bilingual():
    analyzer = ColumnLayoutAnalyzer()
    assert analyzer.is_bilingual("one two three four", "un deux trois quatre") is False


def test_too_few_blocks_per_side_is_single_column():
    analyzer = ColumnLayoutAnalyzer(min_column_blocks=3)
    blocks = _column(ENGLISH, left=0.05, chunks=3) + _column(FRENCH, left=0.55, chunks=3)

    split = analyzer.split_columns(blocks)
    assert split.is_two_column is False
    assert split.is_bilingual is False


def test_single_column_page_joins_lines_in_reading_order():
    analyzer = ColumnLayoutAnalyzer(line_separator="\n")
    blocks = [
        TextBlock(text="second line", bounding_box=BoundingBox(top=0.2, left=0.1, width=0.3)),
        TextBlock(text="first line", bounding_box=BoundingBox(top=0.1, left=0.1, width=0.3)),
    ]
    text, split = analyzer.render_page(3, blocks)
    assert split.is_two_column is False
    assert text == "\n--- Page 3 ---\nfirst line\nsecond line\n"


def test_blocks_on_same_row_sort_left_to_right():
    analyzer = ColumnLayoutAnalyzer(row_epsilon=0.01)
    right = TextBlock(text="right", bounding_box=BoundingBox(top=0.100, left=0.6))
    left = TextBlock(text="left", bounding_box=BoundingBox(top=0.105, left=0.1))
    below = TextBlock(text="below", bounding_box=BoundingBox(top=0.3, left=0.0))
    ordered = analyzer.sort_blocks([below, right, left])
    assert [b.text for b in ordered] == ["left", "right", "below"]


def test_align_sentences_pads_shorter_side():
    rows = ColumnLayoutAnalyzer.align_sentences("One. Two! Three?", "Un.")
    assert rows == [("One", "Un"), ("Two", ""), ("Three", "")]


def test_render_document_marks_structure_and_empty_pages():
    analyzer = ColumnLayoutAnalyzer()
    pages = group_by_page(_column(ENGLISH, left=0.05, page=2) + _column(FRENCH, left=0.55, page=2))
    pages[1] = []

    text = analyzer.render_document(pages)
    assert text.startswith("**DOCUMENT STRUCTURE:** This document contains a 2-column layout with bilingual content.")
    assert "--- Page 1 ---\n(No text content detected)" in text
    assert text.index("--- Page 1 ---") < text.index("--- Page 2 (2-Column Layout) ---")


def test_render_document_without_columns_has_no_structure_note():
    analyzer = ColumnLayoutAnalyzer()
    pages = {1: [TextBlock(text="only line", bounding_box=BoundingBox(top=0.1, left=0.1, width=0.2))]}
    assert analyzer.render_document(pages) == "--- Page 1 ---\nonly line"


def _wide_line(text: str, top: float) -> TextBlock:
    # starts left of the midline, centre lands just right of it
    return TextBlock(text=text, bounding_box=BoundingBox(top=top, left=0.18, width=0.76, height=0.02))


def _heading(text: str, top: float) -> TextBlock:
    return TextBlock(text=text, bounding_box=BoundingBox(top=top, left=0.18, width=0.15, height=0.02))


def test_local_analyzer_splits_on_start_x():
    blocks = []
    for index in range(4):
        blocks.append(_heading(f"Heading {index}", 0.1 + index * 0.2))
        blocks.append(_wide_line(f"Body line {index} runs across the page", 0.15 + index * 0.2))

    local = ColumnLayoutAnalyzer.for_local()
    text, split = local.render_page(1, blocks)
    assert split.is_two_column is False
    assert split.right_blocks == []
    assert text.index("Heading 0") < text.index("Body line 0") < text.index("Heading 1")

    cloud = ColumnLayoutAnalyzer.for_cloud()
    assert cloud.split_columns(blocks).is_two_column is True


def test_unknown_column_position_is_rejected():
    with pytest.raises(ValueError):
        ColumnLayoutAnalyzer(column_position="right")
