from __future__ import annotations

import re

from bs4 import BeautifulSoup


_WS_RE = re.compile(r"\s+")
_CONTROL_CHARS_RE = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")
_SENTENCE_RE = re.compile(r"[^.!?]+[.!?]+")


def strip_markup(text: str) -> str:
    """Remove HTML/XML tags (including JATS ones) and return visible text."""
    if not text:
        return ""
    if "<" not in text and ">" not in text:
        return text
    soup = BeautifulSoup(text, "html.parser")
    for tag in soup(["script", "style"]):
        tag.decompose()
    return normalize_whitespace(soup.get_text(" "))


def normalize_whitespace(text: str) -> str:
    return _WS_RE.sub(" ", text).strip()


def clean_text(text: str | None) -> str:
    """Drop control characters left behind by document decoders."""
    if text is None:
        return ""
    return _CONTROL_CHARS_RE.sub(" ", str(text)).replace("\u00a0", " ")


def split_sentences(text: str) -> list[str]:
    """Sentences end at `.`, `!` or `?`; a trailing unterminated fragment is dropped."""
    if not text:
        return []
    return [s.strip() for s in _SENTENCE_RE.findall(text) if s.strip()]
