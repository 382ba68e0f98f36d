from __future__ import annotations

import asyncio
import logging

from news_proxy.summarizer.inference import InferenceClient, InferenceResult, InferenceSuccess


logger = logging.getLogger("news_proxy.readiness")


class ReadinessState:
    """Whether the hosted model has answered at least once since the last failed probe."""

    def __init__(self, ready: bool = False) -> None:
        self.ready = ready

    def mark_ready(self) -> None:
        self.ready = True

    def mark_not_ready(self) -> None:
        self.ready = False


class ReadinessProber:
    def __init__(self, client: InferenceClient, state: ReadinessState, warmup_text: str) -> None:
        self.client = client
        self.state = state
        self.warmup_text = warmup_text

    async def probe(self) -> InferenceResult:
        result = await self.client.summarize(self.warmup_text)
        if isinstance(result, InferenceSuccess):
            self.state.mark_ready()
        else:
            self.state.mark_not_ready()
        return result

    async def warmup_after(self, delay_seconds: float) -> None:
        """Startup warm-up: one probe after `delay_seconds`, outcome only logged."""
        await asyncio.sleep(delay_seconds)
        result = await self.probe()
        if isinstance(result, InferenceSuccess):
            logger.info("Model warmup: %s", result.summary)
        else:
            logger.error("Model warmup failed: %s", result.reason)
