from __future__ import annotations

import logging
from typing import Optional

from starlette.concurrency import run_in_threadpool

from .blobs import BlobStorage
from .doi import DoiMetadata, DoiResolver
from .errors import BlobDeletionFailed, BlobNotFound
from .extract import TextExtractor
from .models import Article, ArticleFields, Upload
from .store import ArticleRecordStore, validate_fields
from .summarize import Summarizer
from .text import strip_markup


logger = logging.getLogger("article_intake.ingest")


class IngestionCoordinator:
    """Entry flows that create or enrich article records."""

    def __init__(
        self,
        extractor: TextExtractor,
        summarizer: Summarizer,
        resolver: DoiResolver,
        store: ArticleRecordStore,
    ) -> None:
        self.extractor = extractor
        self.summarizer = summarizer
        self.resolver = resolver
        self.store = store

    @property
    def blobs(self) -> BlobStorage:
        return self.store.blobs

    async def summarize_upload(self, upload: Upload) -> str:
        # PDF/DOCX decoding is CPU-bound; keep it off the event loop.
        text = await run_in_threadpool(self.extractor.extract_file, upload.filename, upload.data)
        if not text.strip():
            return ""
        return strip_markup(await self.summarizer.summarize_text(text))

    async def extract_summary(self, upload: Upload) -> str:
        """Summary for a draft; nothing is stored."""
        summary = await self.summarize_upload(upload)
        logger.info("Draft summary for %s: %d chars", upload.filename, len(summary))
        return summary

    async def fetch_doi(self, doi: str) -> DoiMetadata:
        return await self.resolver.resolve(doi)

    async def create_article(self, fields: ArticleFields, upload: Optional[Upload] = None) -> Article:
        validate_fields(fields)

        blob_ref = None
        if upload is not None:
            blob_ref = await run_in_threadpool(self.blobs.put, upload.data, upload.filename)

        submitted = fields.summary or ""
        if submitted.strip():
            summary = submitted
        elif upload is not None:
            summary = await self.summarize_upload(upload)
        else:
            summary = ""

        try:
            return await self.store.create(fields.model_copy(update={"summary": summary}), blob_ref)
        except Exception:
            if blob_ref is not None:
                self._discard_blob(blob_ref)
            raise

    async def delete_article(self, article_id: str) -> Article:
        return await self.store.delete_by_id(article_id)

    def _discard_blob(self, ref: str) -> None:
        try:
            self.blobs.delete(ref)
        except (BlobNotFound, BlobDeletionFailed) as e:
            logger.warning("Could not discard upload %s after failed create: %s", ref, e)
