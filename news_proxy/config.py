from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field


ROOT_DIR = Path(__file__).resolve().parents[1]


class ServerSettings(BaseModel):
    host: str = "0.0.0.0"
    port: int = 5000


class NewsSettings(BaseModel):
    api_url: str = "https://newsapi.org/v2/top-headlines"
    api_key: str = ""
    timeout_seconds: float = 10.0


class InferenceSettings(BaseModel):
    api_url: str = "https://api-inference.huggingface.co/models/facebook/bart-large-cnn"
    api_key: str = ""
    timeout_seconds: float = 30.0
    min_input_chars: int = 50


class FetchSettings(BaseModel):
    timeout_seconds: float = 10.0
    user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
    )
    max_text_chars: int = 1024


class CacheSettings(BaseModel):
    ttl_seconds: float = Field(default=60 * 60, gt=0)
    max_entries: int = Field(default=1024, ge=0)


class RateLimitSettings(BaseModel):
    window_seconds: float = Field(default=15 * 60, gt=0)
    # 0 disables the limiter.
    max_requests: int = Field(default=50, ge=0)


class WarmupSettings(BaseModel):
    enabled: bool = True
    delay_seconds: float = Field(default=5.0, ge=0.0)
    text: str = "This is a test text to warm up the model."


class CorsSettings(BaseModel):
    allowed_origins: list[str] = Field(
        default_factory=lambda: ["https://news-app-jade-gamma.vercel.app", "http://localhost:3000"]
    )


class LoggingSettings(BaseModel):
    log_dir: str = "logs"
    requests_jsonl: str = "requests.jsonl"
    usage_json: str = "usage.json"


class Settings(BaseModel):
    server: ServerSettings = Field(default_factory=ServerSettings)
    news: NewsSettings = Field(default_factory=NewsSettings)
    inference: InferenceSettings = Field(default_factory=InferenceSettings)
    fetch: FetchSettings = Field(default_factory=FetchSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    rate_limit: RateLimitSettings = Field(default_factory=RateLimitSettings)
    warmup: WarmupSettings = Field(default_factory=WarmupSettings)
    cors: CorsSettings = Field(default_factory=CorsSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


# env var -> (section, field)
_ENV_OVERRIDES: dict[str, tuple[str, str]] = {
    "HOST": ("server", "host"),
    "PORT": ("server", "port"),
    "NEWS_API_KEY": ("news", "api_key"),
    "HF_API_KEY": ("inference", "api_key"),
    "HF_API_URL": ("inference", "api_url"),
    "ALLOWED_ORIGINS": ("cors", "allowed_origins"),
    "LOG_DIR": ("logging", "log_dir"),
}


def _apply_env_overrides(raw: dict[str, Any], environ: dict[str, str]) -> dict[str, Any]:
    for env_name, (section, field) in _ENV_OVERRIDES.items():
        value = environ.get(env_name)
        if value is None or value == "":
            continue
        if env_name == "ALLOWED_ORIGINS":
            value = [o.strip() for o in value.split(",") if o.strip()]
        raw.setdefault(section, {})[field] = value
    return raw


def load_settings(
    config_path: Optional[str | Path] = None,
    *,
    environ: Optional[dict[str, str]] = None,
) -> Settings:
    """Build settings from an optional YAML file plus environment overrides.

    Secrets (API keys) are expected to come from the environment or a `.env`
    file next to the repo root, never from the YAML file checked into git.
    """
    if environ is None:
        load_dotenv(ROOT_DIR / ".env")
        environ = dict(os.environ)

    if config_path is None:
        config_path = environ.get("NEWS_PROXY_CONFIG") or ROOT_DIR / "config.yaml"
    path = Path(config_path)

    raw: Any = {}
    if path.exists():
        raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    return Settings.model_validate(_apply_env_overrides(raw, environ))
