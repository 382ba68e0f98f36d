from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import httpx
from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import BaseModel
from starlette.concurrency import run_in_threadpool
from starlette.middleware.cors import CORSMiddleware

from news_proxy.config import Settings, load_settings
from news_proxy.errors import CorsRejected, ProxyError, RateLimited
from news_proxy.news import NewsRelay
from news_proxy.summarizer.inference import InferenceClient, InferenceSuccess
from news_proxy.summarizer.readiness import ReadinessProber, ReadinessState
from news_proxy.summarizer.service import SummarizationService
from news_proxy.utils.analytics import AnalyticsStore, RequestLogRecord
from news_proxy.utils.cache import SummaryCache
from news_proxy.utils.logging import setup_logging
from news_proxy.utils.ratelimit import SlidingWindowRateLimiter


logger = logging.getLogger("news_proxy.api")

RATE_LIMIT_MESSAGE = "Too many summarization requests, please try again later"


@dataclass
class AppState:
    """Process-scoped state shared by the request handlers."""

    settings: Settings
    cache: SummaryCache
    readiness: ReadinessState
    limiter: SlidingWindowRateLimiter
    prober: ReadinessProber
    summarizer: SummarizationService
    news: NewsRelay
    analytics: Optional[AnalyticsStore] = None
    background: set[asyncio.Task] = field(default_factory=set)


def build_state(
    settings: Settings,
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    analytics: Optional[AnalyticsStore] = None,
) -> AppState:
    cache = SummaryCache(ttl_seconds=settings.cache.ttl_seconds, max_entries=settings.cache.max_entries)
    readiness = ReadinessState()
    inference = InferenceClient(settings.inference, transport=transport)
    return AppState(
        settings=settings,
        cache=cache,
        readiness=readiness,
        limiter=SlidingWindowRateLimiter(
            max_requests=settings.rate_limit.max_requests,
            window_seconds=settings.rate_limit.window_seconds,
        ),
        prober=ReadinessProber(inference, readiness, settings.warmup.text),
        summarizer=SummarizationService(settings.fetch, inference, cache, readiness, transport=transport),
        news=NewsRelay(settings.news, transport=transport),
        analytics=analytics,
    )


class SummarizeRequest(BaseModel):
    url: str


class SummarizeResponse(BaseModel):
    summary: str


def get_state(request: Request) -> AppState:
    return request.app.state.proxy


def client_identity(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def enforce_rate_limit(request: Request, state: AppState = Depends(get_state)) -> None:
    key = client_identity(request)
    if not state.limiter.hit(key):
        logger.warning("Rate limit exceeded for %s on %s", key, request.url.path)
        raise RateLimited(RATE_LIMIT_MESSAGE)


def create_app(
    settings: Settings,
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    analytics: Optional[AnalyticsStore] = None,
) -> FastAPI:
    state = build_state(settings, transport=transport, analytics=analytics)

    app = FastAPI(title="News Proxy")
    app.state.proxy = state

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    allowed_origins = set(settings.cors.allowed_origins)

    # Added after CORSMiddleware so it wraps it and sees the request first.
    @app.middleware("http")
    async def reject_unknown_origins(request: Request, call_next):
        origin = request.headers.get("origin")
        if origin is not None and "*" not in allowed_origins and origin not in allowed_origins:
            logger.warning("Rejected request from origin %s to %s", origin, request.url.path)
            exc = CorsRejected("Not allowed by CORS")
            return JSONResponse(status_code=exc.status_code, content=exc.to_payload())
        return await call_next(request)

    @app.exception_handler(ProxyError)
    async def _proxy_error_handler(request: Request, exc: ProxyError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content=exc.to_payload())

    @app.on_event("startup")
    async def _startup() -> None:
        logger.info("Allowed origins: %s", ", ".join(settings.cors.allowed_origins))
        if not settings.warmup.enabled:
            return
        task = asyncio.create_task(state.prober.warmup_after(settings.warmup.delay_seconds))
        state.background.add(task)
        task.add_done_callback(state.background.discard)

    @app.on_event("shutdown")
    async def _shutdown() -> None:
        for task in list(state.background):
            task.cancel()

    @app.get("/", response_class=PlainTextResponse)
    async def root() -> str:
        return "News Proxy Server is running!"

    @app.get("/health")
    async def health(state: AppState = Depends(get_state)):
        """Warm the hosted model and report whether it answered."""
        result = await state.prober.probe()
        if isinstance(result, InferenceSuccess):
            return {"status": "ok", "summary": result.summary}
        return JSONResponse(status_code=500, content={"status": "error", "error": result.reason})

    @app.get("/api/news")
    async def news(request: Request, state: AppState = Depends(get_state)):
        return await state.news.top_headlines(request.query_params)

    @app.post(
        "/summarize",
        response_model=SummarizeResponse,
        dependencies=[Depends(enforce_rate_limit)],
    )
    async def summarize(req: SummarizeRequest, state: AppState = Depends(get_state)) -> SummarizeResponse:
        logger.info("Received summarization request for: %s", req.url)
        outcome = await state.summarizer.summarize_url(req.url)

        if state.analytics is not None:
            record = RequestLogRecord(
                ts=time.time(),
                url=req.url,
                source=outcome.source,
                latency_ms=outcome.elapsed_ms,
                input_chars=outcome.input_chars,
                summary_chars=len(outcome.summary),
            )
            try:
                await run_in_threadpool(state.analytics.append_request, record)
            except OSError as e:
                logger.warning("Analytics write failed for %s: %s", req.url, e)

        logger.info(
            "summarize source=%s latency_ms=%.1f summary_chars=%d",
            outcome.source,
            outcome.elapsed_ms,
            len(outcome.summary),
        )
        return SummarizeResponse(summary=outcome.summary)

    return app


settings = load_settings()
log_dir = Path(settings.logging.log_dir)
setup_logging(log_dir)

app = create_app(
    settings,
    analytics=AnalyticsStore(
        log_dir=log_dir,
        requests_jsonl=settings.logging.requests_jsonl,
        usage_json=settings.logging.usage_json,
    ),
)
