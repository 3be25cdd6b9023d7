from __future__ import annotations

import logging

from article_intake.extract import TextExtractor, format_tag


def test_format_tag_is_case_insensitive():
    assert format_tag("Paper.PDF") == "pdf"
    assert format_tag("notes.Docx") == "docx"
    assert format_tag("README") == ""


def test_extracts_pdf_text(pdf_factory):
    data = pdf_factory(["Graph neural networks.", "They pass messages."])
    text = TextExtractor().extract(data, "pdf")
    assert "Graph neural networks." in text
    assert "They pass messages." in text


def test_extracts_docx_paragraphs(docx_factory):
    data = docx_factory(["First paragraph.", "Second paragraph."])
    text = TextExtractor().extract(data, "docx")
    assert text == "First paragraph.\n\nSecond paragraph."


def test_unsupported_format_yields_empty_text(caplog):
    with caplog.at_level(logging.WARNING, logger="article_intake.extract"):
        assert TextExtractor().extract(b"hello", "txt") == ""
    assert "Unsupported document format" in caplog.text


def test_corrupt_documents_yield_empty_text():
    extractor = TextExtractor()
    assert extractor.extract(b"not a pdf at all", "pdf") == ""
    assert extractor.extract(b"not a zip archive", "docx") == ""
    assert extractor.extract(b"", "pdf") == ""


def test_extract_file_dispatches_on_extension(docx_factory):
    data = docx_factory(["Only paragraph."])
    assert TextExtractor().extract_file("DRAFT.DOCX", data) == "Only paragraph."
