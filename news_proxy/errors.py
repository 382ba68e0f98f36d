from __future__ import annotations

from typing import Any, Optional


class ProxyError(Exception):
    """Error surfaced to the client as JSON `{error[, details]}`."""

    status_code: int = 500

    def __init__(self, error: str, details: Optional[str] = None) -> None:
        super().__init__(error if details is None else f"{error}: {details}")
        self.error = error
        self.details = details

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": self.error}
        if self.details is not None:
            payload["details"] = self.details
        return payload


class UpstreamUnavailable(ProxyError):
    """The news provider or the article host could not be reached."""

    status_code = 500


class ModelNotReady(ProxyError):
    status_code = 503


class RateLimited(ProxyError):
    status_code = 429


class CorsRejected(ProxyError):
    status_code = 403


__all__ = ["ProxyError", "UpstreamUnavailable", "ModelNotReady", "RateLimited", "CorsRejected"]
