from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

import httpx

from news_proxy.config import FetchSettings
from news_proxy.errors import ModelNotReady, UpstreamUnavailable
from news_proxy.preprocessing.cleaning import extract_main_text
from news_proxy.preprocessing.segmentation import fallback_summary
from news_proxy.summarizer.inference import InferenceClient, InferenceSuccess
from news_proxy.summarizer.readiness import ReadinessState
from news_proxy.utils.analytics import SummarySource
from news_proxy.utils.cache import SummaryCache


logger = logging.getLogger("news_proxy.summarizer")

MODEL_LOADING_MESSAGE = "AI model is still loading. Please try again in 30 seconds."
SUMMARY_FAILED_MESSAGE = "Failed to generate summary. Please try another article."


@dataclass
class SummarizeOutcome:
    summary: str
    source: SummarySource
    input_chars: int
    elapsed_ms: float


class SummarizationService:
    """Cache lookup, readiness gate, article fetch, extraction, inference with extractive fallback."""

    def __init__(
        self,
        fetch_cfg: FetchSettings,
        inference: InferenceClient,
        cache: SummaryCache,
        readiness: ReadinessState,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.fetch_cfg = fetch_cfg
        self.inference = inference
        self.cache = cache
        self.readiness = readiness
        self._transport = transport

    async def summarize_url(self, url: str) -> SummarizeOutcome:
        start = time.perf_counter()

        cached = self.cache.get(url)
        if cached is not None:
            logger.info("Serving cached summary for: %s", url)
            return SummarizeOutcome(cached, "cache", 0, _elapsed_ms(start))

        if not self.readiness.ready:
            raise ModelNotReady(MODEL_LOADING_MESSAGE)

        html = await self.fetch_article(url)
        text = extract_main_text(html, max_chars=self.fetch_cfg.max_text_chars)

        result = await self.inference.summarize(text)
        if isinstance(result, InferenceSuccess):
            summary, source = result.summary, "model"
        else:
            logger.warning("Inference failed for %s, using fallback: %s", url, result.reason)
            summary, source = fallback_summary(text), "fallback"

        self.cache.set(url, summary)
        return SummarizeOutcome(summary, source, len(text), _elapsed_ms(start))

    async def fetch_article(self, url: str) -> str:
        timeout = self.fetch_cfg.timeout_seconds
        try:
            # httpx timeouts apply per read; wait_for bounds the whole request.
            return await asyncio.wait_for(self._get_article(url), timeout=timeout)
        except asyncio.TimeoutError as e:
            self._log_fetch_failure(url, f"timeout of {timeout}s exceeded")
            raise UpstreamUnavailable(SUMMARY_FAILED_MESSAGE, details=f"timeout of {timeout}s exceeded") from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            self._log_fetch_failure(url, e)
            raise UpstreamUnavailable(SUMMARY_FAILED_MESSAGE, details=str(e)) from e

    async def _get_article(self, url: str) -> str:
        async with httpx.AsyncClient(
            transport=self._transport,
            timeout=self.fetch_cfg.timeout_seconds,
            follow_redirects=True,
        ) as client:
            response = await client.get(url, headers={"User-Agent": self.fetch_cfg.user_agent})
            response.raise_for_status()
            return response.text

    def _log_fetch_failure(self, url: str, message: object) -> None:
        logger.error(
            "Summary error details: message=%s url=%s timestamp=%s",
            message,
            url,
            datetime.now(timezone.utc).isoformat(),
        )


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000.0


__all__ = ["SummarizationService", "SummarizeOutcome", "MODEL_LOADING_MESSAGE", "SUMMARY_FAILED_MESSAGE"]
