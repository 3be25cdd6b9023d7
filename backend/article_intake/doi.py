from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Optional
from urllib.parse import quote

import httpx

from .config import DoiSettings
from .errors import DoiNotFound
from .summarize import Summarizer
from .text import strip_markup


logger = logging.getLogger("article_intake.doi")

_BRACKETED_RE = re.compile(r"\[.*?\]")


@dataclass(frozen=True)
class DoiMetadata:
    title: str
    authors: str
    abstract: str
    doi: str


def normalize_title(titles: Any) -> str:
    if isinstance(titles, str):
        title = titles
    else:
        title = (titles or [""])[0] or ""
    return _BRACKETED_RE.sub("", str(title)).strip()


def normalize_authors(authors: Any) -> str:
    names = []
    for a in authors or []:
        if not isinstance(a, dict):
            continue
        name = " ".join([x for x in [a.get("given"), a.get("family")] if x])
        if name:
            names.append(name)
    return ", ".join(names)


class DoiResolver:
    """Crossref works lookup, normalized into article fields.

    Docs: https://api.crossref.org/
    """

    def __init__(
        self,
        settings: DoiSettings,
        summarizer: Summarizer,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.settings = settings
        self.summarizer = summarizer
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        return {
            "User-Agent": "research-article-manager/0.1 (mailto:%s)" % (self.settings.mailto or ""),
            "Accept": "application/json",
        }

    async def fetch_work(self, doi: str) -> dict[str, Any]:
        """Raw Crossref `message` document for a DOI."""
        doi = (doi or "").strip()
        if not doi:
            raise DoiNotFound(doi, "empty DOI")

        url = f"{self.settings.base_url.rstrip('/')}/works/{quote(doi, safe='/')}"
        try:
            async with httpx.AsyncClient(
                timeout=self.settings.timeout_s,
                headers=self._headers(),
                transport=self._transport,
                follow_redirects=True,
            ) as client:
                r = await client.get(url)
                r.raise_for_status()
                payload = r.json()
        except httpx.HTTPStatusError as e:
            raise DoiNotFound(doi, f"registry returned {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise DoiNotFound(doi, f"registry unreachable: {e}") from e
        except ValueError as e:
            raise DoiNotFound(doi, "registry returned invalid JSON") from e

        message = payload.get("message") if isinstance(payload, dict) else None
        if not isinstance(message, dict):
            raise DoiNotFound(doi, "registry response has no work record")
        return message

    async def resolve(self, doi: str) -> DoiMetadata:
        work = await self.fetch_work(doi)
        try:
            title = normalize_title(work.get("title"))
            authors = normalize_authors(work.get("author"))
            abstract = strip_markup(str(work.get("abstract") or ""))
            description = str(work.get("description") or "")
        except (AttributeError, KeyError, TypeError) as e:
            raise DoiNotFound(doi, f"malformed registry response: {e}") from e

        if not abstract:
            pseudo_doc = f"Title: {title}\nAuthors: {authors}\n{description}"
            abstract = strip_markup(await self.summarizer.summarize_text(pseudo_doc))

        logger.info("Retrieved DOI data: doi=%s title=%r authors=%r", doi, title, authors)
        return DoiMetadata(title=title, authors=authors, abstract=abstract, doi=doi)
