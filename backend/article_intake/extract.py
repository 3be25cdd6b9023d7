from __future__ import annotations

import io
import logging
from pathlib import PurePath

import PyPDF2
from docx import Document

from .errors import ExtractionFailure
from .text import clean_text


logger = logging.getLogger("article_intake.extract")

SUPPORTED_FORMATS = ("pdf", "docx")


def format_tag(filename: str) -> str:
    """Format tag from the declared file extension, lower-cased, without the dot."""
    return PurePath(filename or "").suffix.lower().lstrip(".")


def extract_text_from_pdf(file_bytes: bytes) -> str:
    try:
        pdf_reader = PyPDF2.PdfReader(io.BytesIO(file_bytes))
        pages = [page.extract_text() or "" for page in pdf_reader.pages]
    except Exception as e:
        raise ExtractionFailure(f"Error extracting PDF: {e}") from e
    return "\n".join(pages).strip()


def extract_text_from_docx(file_bytes: bytes) -> str:
    try:
        document = Document(io.BytesIO(file_bytes))
    except Exception as e:
        raise ExtractionFailure(f"Error extracting DOCX: {e}") from e
    return "\n\n".join(p.text for p in document.paragraphs).strip()


_DECODERS = {
    "pdf": extract_text_from_pdf,
    "docx": extract_text_from_docx,
}


class TextExtractor:
    """Turns an uploaded document into plain text; failures yield ''."""

    def extract(self, data: bytes, fmt: str) -> str:
        fmt = (fmt or "").lower().lstrip(".")
        decoder = _DECODERS.get(fmt)
        try:
            if decoder is None:
                raise ExtractionFailure(f"Unsupported document format: {fmt or '<none>'}")
            if not data:
                raise ExtractionFailure("Empty document")
            text = clean_text(decoder(data))
        except ExtractionFailure as e:
            logger.warning("Text extraction failed: %s", e)
            return ""
        logger.info("Extracted %d chars from %s document", len(text), fmt)
        return text

    def extract_file(self, filename: str, data: bytes) -> str:
        return self.extract(data, format_tag(filename))
