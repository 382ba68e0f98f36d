from __future__ import annotations

import re


_WS_RE = re.compile(r"\s+")
_ANGLE_RE = re.compile(r"[<>]")

MAX_ARTICLE_CHARS = 1024


def strip_html(text: str) -> str:
    """Remove HTML tags, scripts/styles, and return visible text."""
    if "<" not in text and ">" not in text:
        return text
    from bs4 import BeautifulSoup

    soup = BeautifulSoup(text, "html.parser")
    for tag in soup(["script", "style"]):
        tag.decompose()
    return soup.get_text(" ")


def normalize_whitespace(text: str) -> str:
    return _WS_RE.sub(" ", text).strip()


def extract_main_text(html: str, *, max_chars: int = MAX_ARTICLE_CHARS) -> str:
    """Reduce a fetched page to a bounded plain-text snippet.

    Angle brackets surviving the parse (unclosed tags, decoded `&lt;`) are
    dropped so the result never looks like markup.
    """
    if not html:
        return ""
    text = strip_html(html)
    text = _ANGLE_RE.sub(" ", text)
    text = normalize_whitespace(text)
    return text[:max_chars]
