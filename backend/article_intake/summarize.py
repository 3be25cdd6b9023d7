from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import httpx

from .config import SummarizerSettings
from .text import split_sentences


logger = logging.getLogger("article_intake.summarize")

SYSTEM_PROMPT = (
    "You are an academic article summarization expert. "
    "Create a concise summary by extracting the key points from the given text."
)
OMISSION_MARKER = " [...] "

# Extractive fallback shape: texts longer than this many sentences are cut
# down to the leading and trailing sentences.
_MAX_VERBATIM_SENTENCES = 5
_LEADING_SENTENCES = 3
_TRAILING_SENTENCES = 2


class SummaryMode(str, Enum):
    EMPTY = "empty"  # nothing to summarize, no call made
    LOCAL = "local"  # no credential configured
    REMOTE = "remote"
    DEGRADED = "degraded"  # remote call failed, local fallback used


@dataclass
class SummarizeResult:
    summary: str
    mode: SummaryMode
    elapsed_ms: float


def summarize_locally(text: str) -> str:
    """First three sentences, the omission marker, then the last two.

    Texts of five sentences or fewer are returned as-is.
    """
    sentences = split_sentences(text)
    if len(sentences) <= _MAX_VERBATIM_SENTENCES:
        return text
    first_part = " ".join(sentences[:_LEADING_SENTENCES])
    last_part = " ".join(sentences[-_TRAILING_SENTENCES:])
    return first_part + OMISSION_MARKER + last_part


class Summarizer:
    """Summarizes text through an OpenAI-compatible chat endpoint.

    Without a configured credential, or whenever the remote call fails, the
    deterministic extractive heuristic is used instead. `summarize` never
    raises for remote problems.
    """

    def __init__(
        self,
        settings: SummarizerSettings,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.settings = settings
        self._transport = transport

    @property
    def has_credential(self) -> bool:
        return self.settings.has_credential

    async def summarize(self, text: str) -> SummarizeResult:
        start = time.perf_counter()
        if not text or not text.strip():
            return SummarizeResult(summary="", mode=SummaryMode.EMPTY, elapsed_ms=0.0)

        if not self.has_credential:
            summary, mode = summarize_locally(text), SummaryMode.LOCAL
        else:
            remote = await self._request_remote(text)
            if remote is not None:
                summary, mode = remote, SummaryMode.REMOTE
            else:
                logger.warning("Remote summarization unavailable; using extractive fallback")
                summary, mode = summarize_locally(text), SummaryMode.DEGRADED

        elapsed_ms = (time.perf_counter() - start) * 1000.0
        logger.info("summarize mode=%s input_chars=%d summary_chars=%d elapsed_ms=%.1f", mode.value, len(text), len(summary), elapsed_ms)
        return SummarizeResult(summary=summary, mode=mode, elapsed_ms=elapsed_ms)

    async def summarize_text(self, text: str) -> str:
        return (await self.summarize(text)).summary

    def _payload(self, text: str) -> dict:
        excerpt = text[: self.settings.max_input_chars]
        return {
            "model": self.settings.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": f"Summarize this text (do not exceed 200 words): {excerpt}"},
            ],
            "max_tokens": self.settings.max_output_tokens,
        }

    async def _request_remote(self, text: str) -> Optional[str]:
        """Return the generated summary, or None on any failure."""
        try:
            url = self.settings.api_base.rstrip("/") + "/chat/completions"
            headers = {
                "Authorization": f"Bearer {self.settings.api_key}",
                "Content-Type": "application/json",
                "X-Title": "Research Article Management System",
            }
            async with httpx.AsyncClient(timeout=self.settings.timeout_s, transport=self._transport) as client:
                response = await client.post(url, headers=headers, json=self._payload(text))
        except httpx.HTTPError as e:
            logger.warning("Summarization API error: %s", e)
            return None
        except Exception as e:
            # e.g. a key that cannot be encoded into the Authorization header
            logger.warning("Summarization request could not be sent: %r", e)
            return None

        if response.status_code != 200:
            logger.warning("Summarization API failed: status=%d body=%s", response.status_code, response.text[:200])
            return None

        try:
            content = response.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            logger.warning("Malformed summarization response: %s", e)
            return None

        if not isinstance(content, str) or not content.strip():
            logger.warning("Summarization API returned no text")
            return None
        return content.strip()


__all__ = ["Summarizer", "SummarizeResult", "SummaryMode", "summarize_locally", "OMISSION_MARKER"]
