from __future__ import annotations

import logging
import re
from typing import Any, Optional, Protocol

from .blobs import BlobStorage
from .errors import BlobDeletionFailed, BlobNotFound, NotFound, ValidationError
from .models import Article, ArticleFields


logger = logging.getLogger("article_intake.store")


class RecordCollection(Protocol):
    async def insert(self, doc: dict[str, Any]) -> None: ...

    async def find_all(self, term: Optional[str] = None) -> list[dict[str, Any]]: ...

    async def find_by_id(self, article_id: str) -> Optional[dict[str, Any]]: ...

    async def delete_by_id(self, article_id: str) -> Optional[dict[str, Any]]: ...


class MongoRecords:
    """Article documents in a motor collection, keyed by our own string `id`."""

    def __init__(self, collection) -> None:
        self.collection = collection

    async def insert(self, doc: dict[str, Any]) -> None:
        # insert_one adds `_id` to the dict it is given.
        await self.collection.insert_one(dict(doc))

    async def find_all(self, term: Optional[str] = None) -> list[dict[str, Any]]:
        query = {"title": {"$regex": re.escape(term), "$options": "i"}} if term else {}
        cursor = self.collection.find(query, {"_id": 0}).sort([("created_at", 1), ("id", 1)])
        return await cursor.to_list(None)

    async def find_by_id(self, article_id: str) -> Optional[dict[str, Any]]:
        return await self.collection.find_one({"id": article_id}, {"_id": 0})

    async def delete_by_id(self, article_id: str) -> Optional[dict[str, Any]]:
        return await self.collection.find_one_and_delete({"id": article_id}, projection={"_id": 0})


class MemoryRecords:
    """In-process fallback used when MongoDB isn't reachable."""

    def __init__(self) -> None:
        self._docs: dict[str, dict[str, Any]] = {}

    async def insert(self, doc: dict[str, Any]) -> None:
        self._docs[doc["id"]] = dict(doc)

    async def find_all(self, term: Optional[str] = None) -> list[dict[str, Any]]:
        docs = list(self._docs.values())
        if term:
            needle = term.lower()
            docs = [d for d in docs if needle in (d.get("title") or "").lower()]
        docs.sort(key=lambda d: (d.get("created_at", ""), d.get("id", "")))
        return [dict(d) for d in docs]

    async def find_by_id(self, article_id: str) -> Optional[dict[str, Any]]:
        doc = self._docs.get(article_id)
        return dict(doc) if doc is not None else None

    async def delete_by_id(self, article_id: str) -> Optional[dict[str, Any]]:
        return self._docs.pop(article_id, None)

    def __len__(self) -> int:
        return len(self._docs)


def validate_fields(fields: ArticleFields) -> None:
    if not fields.title or not fields.title.strip():
        raise ValidationError("Title is required")


def _to_doc(article: Article) -> dict[str, Any]:
    doc = article.model_dump()
    doc["created_at"] = doc["created_at"].isoformat()
    return doc


class ArticleRecordStore:
    """Article records plus the uploaded file each one may own."""

    def __init__(self, records: RecordCollection, blobs: BlobStorage) -> None:
        self.records = records
        self.blobs = blobs

    async def list_articles(self, search: Optional[str] = None) -> list[Article]:
        term = search.strip() if search else None
        docs = await self.records.find_all(term or None)
        return [Article.model_validate(d) for d in docs]

    async def get(self, article_id: str) -> Article:
        doc = await self.records.find_by_id(article_id)
        if doc is None:
            raise NotFound(article_id)
        return Article.model_validate(doc)

    async def create(self, fields: ArticleFields, blob_ref: Optional[str] = None) -> Article:
        validate_fields(fields)
        article = Article(
            title=fields.title.strip(),
            author=fields.author,
            summary=fields.summary or "",
            notes=fields.notes,
            doi=fields.doi,
            file=blob_ref,
        )
        await self.records.insert(_to_doc(article))
        logger.info("Created article id=%s file=%s", article.id, article.file)
        return article

    async def delete_by_id(self, article_id: str) -> Article:
        # Claiming the record first means a concurrent delete of the same id
        # gets NotFound instead of racing on the file.
        doc = await self.records.delete_by_id(article_id)
        if doc is None:
            raise NotFound(article_id)
        article = Article.model_validate(doc)

        if article.file:
            try:
                self.blobs.delete(article.file)
            except BlobNotFound:
                logger.warning("File %s for article %s was already missing", article.file, article_id)
            except BlobDeletionFailed as e:
                logger.warning("Blob deletion failed for article %s: %s", article_id, e)

        logger.info("Deleted article id=%s", article_id)
        return article
