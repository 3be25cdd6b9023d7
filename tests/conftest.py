from __future__ import annotations

import io
import sys
from pathlib import Path

import pytest


def pytest_configure():
    # Ensure `backend/` is importable as a top-level path so tests can
    # import `server` and `article_intake.*` regardless of the working directory.
    repo_root = Path(__file__).resolve().parents[1]
    backend_dir = repo_root / "backend"
    if backend_dir.exists():
        sys.path.insert(0, str(backend_dir))


def _pdf_escape(text: str) -> str:
    return text.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")


def make_pdf(lines: list[str]) -> bytes:
    """Single-page PDF with one Helvetica text line per entry."""
    ops = ["BT", "/F1 12 Tf", "14 TL", "72 720 Td"]
    for i, line in enumerate(lines):
        if i:
            ops.append("T*")
        ops.append(f"({_pdf_escape(line)}) Tj")
    ops.append("ET")
    stream = "\n".join(ops).encode("latin-1")

    objects = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        b"<< /Type /Pages /Kids [3 0 R] /Count 1 >>",
        b"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
        b"/Resources << /Font << /F1 5 0 R >> >> /Contents 4 0 R >>",
        b"<< /Length " + str(len(stream)).encode() + b" >>\nstream\n" + stream + b"\nendstream",
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica /Encoding /WinAnsiEncoding >>",
    ]

    out = io.BytesIO()
    out.write(b"%PDF-1.4\n")
    offsets = []
    for num, body in enumerate(objects, start=1):
        offsets.append(out.tell())
        out.write(f"{num} 0 obj\n".encode() + body + b"\nendobj\n")
    xref_at = out.tell()
    out.write(f"xref\n0 {len(objects) + 1}\n".encode())
    out.write(b"0000000000 65535 f \n")
    for off in offsets:
        out.write(f"{off:010d} 00000 n \n".encode())
    out.write(f"trailer\n<< /Size {len(objects) + 1} /Root 1 0 R >>\nstartxref\n{xref_at}\n%%EOF\n".encode())
    return out.getvalue()


def make_docx(paragraphs: list[str]) -> bytes:
    from docx import Document

    doc = Document()
    for p in paragraphs:
        doc.add_paragraph(p)
    buf = io.BytesIO()
    doc.save(buf)
    return buf.getvalue()


@pytest.fixture
def pdf_factory():
    return make_pdf


@pytest.fixture
def docx_factory():
    return make_docx


@pytest.fixture
def offline_settings(tmp_path: Path):
    from article_intake.config import Settings

    settings = Settings()
    settings.storage.upload_dir = str(tmp_path / "uploads")
    return settings


@pytest.fixture
def coordinator(offline_settings):
    """Coordinator wired to in-memory records, a temp upload dir and no summarization credential."""
    from article_intake.blobs import BlobStorage
    from article_intake.doi import DoiResolver
    from article_intake.extract import TextExtractor
    from article_intake.ingest import IngestionCoordinator
    from article_intake.store import ArticleRecordStore, MemoryRecords
    from article_intake.summarize import Summarizer

    summarizer = Summarizer(offline_settings.summarizer)
    store = ArticleRecordStore(MemoryRecords(), BlobStorage(Path(offline_settings.storage.upload_dir)))
    return IngestionCoordinator(
        extractor=TextExtractor(),
        summarizer=summarizer,
        resolver=DoiResolver(offline_settings.doi, summarizer),
        store=store,
    )
