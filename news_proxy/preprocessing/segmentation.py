from __future__ import annotations

import re
from typing import Optional


# Break on whitespace after terminal punctuation, but not after dotted
# abbreviations ("e.g. ", "U.S. ") or short capitalised ones ("Mr. ", "Dr. ").
_SENT_RE = re.compile(r"(?<!\w\.\w.)(?<![A-Z][a-z]\.)(?<=[.?!])\s")

NO_CONTENT_MESSAGE = "No content available for summarization."


def split_sentences(text: str) -> list[str]:
    """Approximate sentence split; good enough for a degraded-mode summary."""
    if not text:
        return []
    return _SENT_RE.split(text)


def fallback_summary(text: Optional[str], sentences: int = 3) -> str:
    """Extractive summary: the first `sentences` sentences of `text`."""
    if not text:
        return NO_CONTENT_MESSAGE

    parts = split_sentences(text)
    if len(parts) <= sentences:
        return text
    return " ".join(parts[:sentences])
