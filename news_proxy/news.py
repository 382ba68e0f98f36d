from __future__ import annotations

import asyncio
import logging
from typing import Any, Mapping, Optional

import httpx

from news_proxy.config import NewsSettings
from news_proxy.errors import UpstreamUnavailable


logger = logging.getLogger("news_proxy.news")

NEWS_QUERY_PARAMS = ("country", "category", "page", "pageSize")


class NewsRelay:
    """Forwards headline queries to the news provider with the server-held API key."""

    def __init__(self, cfg: NewsSettings, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        self.cfg = cfg
        self._transport = transport

    def build_params(self, query: Mapping[str, str]) -> dict[str, str]:
        params = {name: query[name] for name in NEWS_QUERY_PARAMS if name in query}
        params["apiKey"] = self.cfg.api_key
        return params

    async def top_headlines(self, query: Mapping[str, str]) -> Any:
        params = self.build_params(query)
        timeout = self.cfg.timeout_seconds
        try:
            # httpx timeouts apply per read; wait_for bounds the whole request.
            return await asyncio.wait_for(self._get(params), timeout=timeout)
        except asyncio.TimeoutError as e:
            message = f"timeout of {timeout}s exceeded"
            logger.error("News API error: %s", message)
            raise UpstreamUnavailable("Proxy error", details=message) from e
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as e:
            message = self._redact(str(e))
            logger.error("News API error: %s", message)
            raise UpstreamUnavailable("Proxy error", details=message) from e

    async def _get(self, params: dict[str, str]) -> Any:
        async with httpx.AsyncClient(transport=self._transport, timeout=self.cfg.timeout_seconds) as client:
            response = await client.get(self.cfg.api_url, params=params)
            response.raise_for_status()
            return response.json()

    def _redact(self, message: str) -> str:
        # HTTPStatusError messages embed the request URL, query string included.
        if self.cfg.api_key:
            return message.replace(self.cfg.api_key, "***")
        return message
