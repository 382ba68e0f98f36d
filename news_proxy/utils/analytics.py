from __future__ import annotations

import json
import logging
import threading
import time
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Literal, Optional


logger = logging.getLogger("news_proxy.analytics")

SummarySource = Literal["cache", "model", "fallback"]


@dataclass
class RequestLogRecord:
    ts: float
    url: str
    source: SummarySource
    latency_ms: float
    input_chars: int
    summary_chars: int


class AnalyticsStore:
    def __init__(self, log_dir: Path, requests_jsonl: str, usage_json: str):
        self.log_dir = log_dir
        self.requests_path = log_dir / requests_jsonl
        self.usage_path = log_dir / usage_json
        self._lock = threading.Lock()
        self.log_dir.mkdir(parents=True, exist_ok=True)

    def append_request(self, rec: RequestLogRecord) -> None:
        with self._lock:
            with self.requests_path.open("a", encoding="utf-8") as f:
                f.write(json.dumps(asdict(rec), ensure_ascii=False) + "\n")
            self._update_usage(rec)

    def read_usage(self) -> Optional[dict[str, Any]]:
        if not self.usage_path.exists():
            return None
        try:
            return json.loads(self.usage_path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            logger.warning("Unreadable usage file: %s", self.usage_path)
            return None

    def _update_usage(self, rec: RequestLogRecord) -> None:
        base: dict[str, Any] = {
            "updated_at": time.time(),
            "request_count": 0,
            "cache_hits": 0,
            "fallback_count": 0,
            "avg_latency_ms": 0.0,
            "avg_summary_chars": 0.0,
        }
        base.update(self.read_usage() or {})

        n = int(base["request_count"])
        n2 = n + 1
        base["request_count"] = n2
        base["avg_latency_ms"] = (float(base["avg_latency_ms"]) * n + rec.latency_ms) / n2
        base["avg_summary_chars"] = (float(base["avg_summary_chars"]) * n + rec.summary_chars) / n2
        if rec.source == "cache":
            base["cache_hits"] = int(base["cache_hits"]) + 1
        elif rec.source == "fallback":
            base["fallback_count"] = int(base["fallback_count"]) + 1
        base["updated_at"] = time.time()

        self.usage_path.write_text(json.dumps(base, indent=2), encoding="utf-8")
