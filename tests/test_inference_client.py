from __future__ import annotations

import asyncio
import json
import logging

import httpx

from news_proxy.config import InferenceSettings
from news_proxy.summarizer.inference import (
    TOO_SHORT_MESSAGE,
    InferenceClient,
    InferenceFailure,
    InferenceSuccess,
)


LONG_TEXT = "The city council approved a new park after a long debate about costs and benefits for residents."


def _client(handler) -> InferenceClient:
    cfg = InferenceSettings(api_key="secret-hf-key")
    return InferenceClient(cfg, transport=httpx.MockTransport(handler))


def test_short_text_short_circuits_without_network() -> None:
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json=[{"summary_text": "x"}])

    client = _client(handler)
    assert asyncio.run(client.summarize("too short")) == InferenceSuccess(TOO_SHORT_MESSAGE)
    assert asyncio.run(client.summarize("")) == InferenceSuccess(TOO_SHORT_MESSAGE)
    assert asyncio.run(client.summarize(None)) == InferenceSuccess(TOO_SHORT_MESSAGE)
    assert calls == []


def test_success_posts_inputs_with_bearer_token() -> None:
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["auth"] = request.headers["authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=[{"summary_text": "A park was approved."}])

    result = asyncio.run(_client(handler).summarize(LONG_TEXT))
    assert result == InferenceSuccess("A park was approved.")
    assert seen["auth"] == "Bearer secret-hf-key"
    assert seen["body"] == {"inputs": LONG_TEXT}


def test_error_status_becomes_failure_with_details(caplog) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, json={"error": "Model is currently loading"})

    with caplog.at_level(logging.ERROR, logger="news_proxy.inference"):
        result = asyncio.run(_client(handler).summarize(LONG_TEXT))

    assert isinstance(result, InferenceFailure)
    assert result.status_code == 503
    assert result.response_body == {"error": "Model is currently loading"}
    assert result.text_snippet == LONG_TEXT[:100]
    assert "secret-hf-key" not in repr(result)
    assert "secret-hf-key" not in caplog.text
    assert "HTTP 503" in caplog.text


def test_malformed_payload_is_failure() -> None:
    for payload in ([], [{}], {"summary_text": "not a list"}, [{"summary_text": ""}]):
        result = asyncio.run(_client(lambda req, p=payload: httpx.Response(200, json=p)).summarize(LONG_TEXT))
        assert isinstance(result, InferenceFailure)
        assert result.status_code == 200


def test_network_error_and_timeout_are_failures() -> None:
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    def slow(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    refused = asyncio.run(_client(refuse).summarize(LONG_TEXT))
    timed_out = asyncio.run(_client(slow).summarize(LONG_TEXT))

    assert isinstance(refused, InferenceFailure) and refused.status_code is None
    assert isinstance(timed_out, InferenceFailure)
    assert "timed out" in timed_out.reason


def test_invalid_endpoint_url_is_failure() -> None:
    cfg = InferenceSettings(api_url="http://exa\x00mple.com/model", api_key="secret-hf-key")
    client = InferenceClient(cfg, transport=httpx.MockTransport(lambda req: httpx.Response(200, json=[])))

    result = asyncio.run(client.summarize(LONG_TEXT))
    assert isinstance(result, InferenceFailure)
    assert result.reason.startswith("Inference request failed")
