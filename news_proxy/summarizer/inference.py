from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Optional, Union

import httpx

from news_proxy.config import InferenceSettings


logger = logging.getLogger("news_proxy.inference")

TOO_SHORT_MESSAGE = "Article content too short for summarization"


@dataclass(frozen=True)
class InferenceSuccess:
    summary: str


@dataclass(frozen=True)
class InferenceFailure:
    reason: str
    status_code: Optional[int] = None
    response_body: Optional[Any] = None
    text_snippet: str = ""


InferenceResult = Union[InferenceSuccess, InferenceFailure]


def _response_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text or None


def _extract_summary(payload: Any) -> Optional[str]:
    # Hugging Face summarization models answer with [{"summary_text": "..."}].
    if isinstance(payload, list) and payload and isinstance(payload[0], dict):
        summary = payload[0].get("summary_text")
        if isinstance(summary, str) and summary:
            return summary
    return None


class InferenceClient:
    """Calls the hosted summarization model. Transport, timeout and payload errors come back as `InferenceFailure`."""

    def __init__(
        self,
        cfg: InferenceSettings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.cfg = cfg
        self._transport = transport

    async def summarize(self, text: Optional[str]) -> InferenceResult:
        if not text or len(text) < self.cfg.min_input_chars:
            return InferenceSuccess(TOO_SHORT_MESSAGE)

        snippet = text[:100]
        try:
            # httpx timeouts apply per read; wait_for bounds the whole request.
            response = await asyncio.wait_for(self._post(text), timeout=self.cfg.timeout_seconds)
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            return self._fail(f"Inference request timed out: {e.__class__.__name__}", text_snippet=snippet)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            return self._fail(f"Inference request failed: {e}", text_snippet=snippet)

        body = _response_body(response)
        if response.status_code >= 400:
            return self._fail(
                f"Inference API returned HTTP {response.status_code}",
                status_code=response.status_code,
                response_body=body,
                text_snippet=snippet,
            )

        summary = _extract_summary(body)
        if summary is None:
            return self._fail(
                "Summary not available from inference API",
                status_code=response.status_code,
                response_body=body,
                text_snippet=snippet,
            )
        return InferenceSuccess(summary)

    async def _post(self, text: str) -> httpx.Response:
        async with httpx.AsyncClient(transport=self._transport, timeout=self.cfg.timeout_seconds) as client:
            return await client.post(
                self.cfg.api_url,
                headers={"Authorization": f"Bearer {self.cfg.api_key}"},
                json={"inputs": text},
            )

    def _fail(self, reason: str, **details: Any) -> InferenceFailure:
        failure = InferenceFailure(reason=reason, **details)
        logger.error(
            "Inference API error: reason=%s status=%s response=%r snippet=%r",
            failure.reason,
            failure.status_code,
            failure.response_body,
            failure.text_snippet,
        )
        return failure


__all__ = [
    "InferenceClient",
    "InferenceFailure",
    "InferenceResult",
    "InferenceSuccess",
    "TOO_SHORT_MESSAGE",
]
