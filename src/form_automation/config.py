"""
Service Configuration

Settings are read from the environment once, after loading the project `.env`.
"""

import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


DEFAULT_POST_SUBMIT_TIMEOUT_MS = 5000


def _get_bool_env(name: str, default: bool) -> bool:
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    raw_value = os.getenv(name)
    if raw_value is None or not raw_value.strip():
        return default
    try:
        return int(raw_value)
    except ValueError:
        raise RuntimeError(f"{name} must be an integer, got {raw_value!r}")


def parse_api_tokens(raw: Optional[str]) -> dict[str, str]:
    """Parse `token:uid,token:uid` into a token -> uid mapping."""
    tokens: dict[str, str] = {}
    if not raw:
        return tokens
    for pair in raw.split(","):
        pair = pair.strip()
        if not pair:
            continue
        token, sep, uid = pair.partition(":")
        if not sep or not token.strip() or not uid.strip():
            raise RuntimeError(f"Malformed API_TOKENS entry: {pair!r}")
        tokens[token.strip()] = uid.strip()
    return tokens


@dataclass(frozen=True)
class Settings:
    """Runtime settings for the form automation service."""
    database_url: Optional[str] = None
    bucket_dir: Path = Path("bucket")
    upload_prefix: str = "uploads/"
    headless: bool = True
    post_submit_timeout_ms: int = DEFAULT_POST_SUBMIT_TIMEOUT_MS
    api_tokens: dict[str, str] = field(default_factory=dict)
    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-4o"
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8003


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings built from the environment."""
    load_dotenv()

    post_submit_timeout_ms = _get_int_env("POST_SUBMIT_TIMEOUT_MS", DEFAULT_POST_SUBMIT_TIMEOUT_MS)
    if post_submit_timeout_ms < 0:
        raise RuntimeError("POST_SUBMIT_TIMEOUT_MS must be non-negative")

    return Settings(
        database_url=os.getenv("DATABASE_URL") or None,
        bucket_dir=Path(os.getenv("BUCKET_DIR", "bucket")),
        upload_prefix=os.getenv("UPLOAD_PREFIX", "uploads/"),
        headless=_get_bool_env("HEADLESS", True),
        post_submit_timeout_ms=post_submit_timeout_ms,
        api_tokens=parse_api_tokens(os.getenv("API_TOKENS")),
        openai_api_key=os.getenv("OPENAI_API_KEY") or None,
        openai_model=os.getenv("OPENAI_MODEL", "gpt-4o"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        host=os.getenv("HOST", "0.0.0.0"),
        port=_get_int_env("PORT", 8003),
    )
