from __future__ import annotations

import threading
import time
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from typing import Callable, Optional

import httpx
import pytest
from fastapi.testclient import TestClient

from news_proxy.config import Settings


NEWS_KEY = "test-news-key"
HF_KEY = "test-hf-key"

ARTICLE_URL = "https://example.com/story"
ARTICLE_HTML = """
<html><head><style>body { color: red; }</style><script>var x = "<b>";</script></head>
<body><h1>Big news</h1>
<p>The council approved the new park on Monday. Construction starts in spring.</p>
<p>Residents welcomed the plan. Critics worry about the cost. A vote on funding follows next month.</p>
</body></html>
"""

Handler = Callable[[httpx.Request], httpx.Response]


class FakeUpstreams:
    """Routes outbound calls by host and records every request it sees."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.news: Handler = lambda req: httpx.Response(200, json={"status": "ok", "articles": []})
        self.inference: Handler = lambda req: httpx.Response(200, json=[{"summary_text": "model summary"}])
        self.article: Handler = lambda req: httpx.Response(200, text=ARTICLE_HTML)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        host = request.url.host
        if host == "newsapi.org":
            return self.news(request)
        if host == "api-inference.huggingface.co":
            return self.inference(request)
        return self.article(request)

    def calls_to(self, host: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.host == host]

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


@pytest.fixture
def settings() -> Settings:
    return Settings.model_validate(
        {
            "news": {"api_key": NEWS_KEY},
            "inference": {"api_key": HF_KEY},
            "warmup": {"enabled": False},
        }
    )


@pytest.fixture
def upstreams() -> FakeUpstreams:
    return FakeUpstreams()


@pytest.fixture
def make_client(settings: Settings, upstreams: FakeUpstreams, tmp_path: Path):
    from news_proxy.api.app import create_app
    from news_proxy.utils.analytics import AnalyticsStore

    def _make(cfg: Optional[Settings] = None, *, ready: bool = True) -> TestClient:
        app = create_app(
            cfg or settings,
            transport=upstreams.transport,
            analytics=AnalyticsStore(log_dir=tmp_path, requests_jsonl="requests.jsonl", usage_json="usage.json"),
        )
        if ready:
            app.state.proxy.readiness.mark_ready()
        return TestClient(app)

    return _make


@pytest.fixture
def client(make_client) -> TestClient:
    return make_client()


class _TrickleHandler(BaseHTTPRequestHandler):
    """Answers every request with a 10-byte body sent one byte every 0.3 s."""

    def _trickle(self) -> None:
        length = int(self.headers.get("Content-Length") or 0)
        if length:
            self.rfile.read(length)
        self.send_response(200)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", "10")
        self.end_headers()
        try:
            for _ in range(10):
                self.wfile.write(b"a")
                self.wfile.flush()
                time.sleep(0.3)
        except OSError:
            # Client gave up and closed the socket.
            pass

    do_GET = _trickle
    do_POST = _trickle

    def log_message(self, format, *args) -> None:
        pass


@pytest.fixture
def slow_server():
    server = ThreadingHTTPServer(("127.0.0.1", 0), _TrickleHandler)
    server.daemon_threads = True
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield f"http://127.0.0.1:{server.server_address[1]}"
    finally:
        server.shutdown()
        server.server_close()
