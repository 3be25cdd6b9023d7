from __future__ import annotations

import asyncio

import httpx
import pytest

from article_intake.config import DoiSettings, SummarizerSettings
from article_intake.doi import DoiMetadata, DoiResolver, normalize_authors, normalize_title
from article_intake.errors import DoiNotFound
from article_intake.summarize import Summarizer


def _resolver(handler, summarizer: Summarizer | None = None) -> DoiResolver:
    return DoiResolver(
        DoiSettings(mailto="lab@example.org"),
        summarizer or Summarizer(SummarizerSettings()),
        transport=httpx.MockTransport(handler),
    )


def _crossref(message: dict) -> httpx.Response:
    return httpx.Response(200, json={"status": "ok", "message-type": "work", "message": message})


def test_normalize_title_takes_first_and_drops_brackets():
    assert normalize_title(["  Attention Is All You Need [Preprint] ", "Other"]) == "Attention Is All You Need"
    assert normalize_title(None) == ""
    assert normalize_title([]) == ""


def test_normalize_authors_keeps_registry_order():
    authors = [{"given": "Ada", "family": "Lovelace"}, {"family": "Turing"}, {"given": "Grace", "family": "Hopper"}]
    assert normalize_authors(authors) == "Ada Lovelace, Turing, Grace Hopper"
    assert normalize_authors(None) == ""


def test_resolve_normalizes_crossref_work():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return _crossref(
            {
                "DOI": "10.1000/XYZ",
                "title": ["Neural Fields [Extended abstract]"],
                "author": [{"given": "Jane", "family": "Doe"}, {"given": "John", "family": "Roe"}],
                "abstract": "<jats:p>We study <jats:italic>neural</jats:italic> fields.</jats:p>",
            }
        )

    meta = asyncio.run(_resolver(handler).resolve("10.1000/xyz"))

    assert meta == DoiMetadata(
        title="Neural Fields",
        authors="Jane Doe, John Roe",
        abstract="We study neural fields.",
        doi="10.1000/xyz",
    )
    assert seen[0].url.path == "/works/10.1000/xyz"
    assert "mailto:lab@example.org" in seen[0].headers["User-Agent"]


def test_missing_abstract_is_synthesized_from_title_and_authors():
    handler = lambda request: _crossref(  # noqa: E731
        {"title": ["Short Title"], "author": [{"given": "A", "family": "B"}], "description": "A note."}
    )
    meta = asyncio.run(_resolver(handler).resolve("10.1/abc"))
    # Three short lines stay under the verbatim threshold of the local summarizer.
    assert meta.abstract == "Title: Short Title\nAuthors: A B\nA note."


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(404, text="Resource not found."),
        httpx.Response(503),
        httpx.Response(200, text="<html>oops</html>"),
        httpx.Response(200, json={"status": "ok"}),
        httpx.Response(200, json=["not", "a", "work"]),
    ],
)
def test_registry_failures_raise_doi_not_found(response):
    with pytest.raises(DoiNotFound):
        asyncio.run(_resolver(lambda request: response).resolve("10.1/missing"))


def test_unreachable_registry_raises_doi_not_found():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(DoiNotFound) as exc:
        asyncio.run(_resolver(handler).resolve("10.1/offline"))
    assert exc.value.doi == "10.1/offline"


def test_blank_doi_is_rejected_without_request():
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    with pytest.raises(DoiNotFound):
        asyncio.run(_resolver(handler).resolve("   "))
