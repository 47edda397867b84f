from __future__ import annotations

from app.models.schemas import DocumentCategory, Resource
from app.services.file_type_classifier import classify


def test_pdf_extension_beats_generic_mime():
    assert classify("application/octet-stream", "pdf") == DocumentCategory.PDF


def test_extension_wins_when_mime_disagrees():
    assert classify("application/pdf", "txt") == DocumentCategory.TEXT
    assert classify("text/plain", "docx") == DocumentCategory.WORD


def test_mime_used_when_extension_unknown():
    word_mime = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
    assert classify(word_mime, "") == DocumentCategory.WORD
    assert classify("application/msword", "bin") == DocumentCategory.WORD
    assert classify("application/pdf", "") == DocumentCategory.PDF
    assert classify("text/markdown", "") == DocumentCategory.TEXT


def test_text_extensions():
    for ext in ("txt", "md", "rtf", "csv", "TXT"):
        assert classify("", ext) == DocumentCategory.TEXT


def test_unrecognized_input_is_unknown():
    assert classify("application/octet-stream", "bin") == DocumentCategory.UNKNOWN
    assert classify("", "") == DocumentCategory.UNKNOWN
    assert classify("image/png", "png") == DocumentCategory.UNKNOWN


def test_resource_derives_file_name_and_extension():
    resource = Resource.model_validate(
        {
            "id": "r1",
            "athroId": "athro-drama",
            "resourceType": "application/pdf",
            "resourcePath": "user-1/athro-drama/Exam.Paper.PDF",
        }
    )
    assert resource.file_name == "Exam.Paper.PDF"
    assert resource.file_extension == "pdf"
    assert resource.athro_id == "athro-drama"

    bare = Resource(id="r2", resource_path="user-1/README")
    assert bare.file_extension == ""
    assert Resource(id="r3").file_name == "Unknown file"
