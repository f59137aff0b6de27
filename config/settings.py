from __future__ import annotations

import os
from functools import lru_cache
from typing import List, Optional

from dotenv import load_dotenv


load_dotenv()


def _optional_float(name: str) -> Optional[float]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    return float(raw)


class Settings:
    """Application settings loaded from environment variables.

    Keep all credentials and config centralized here. The API key has no
    fallback value; it must come from the environment or .env.
    """

    app_env: str = os.getenv("APP_ENV", "development")
    google_api_key: Optional[str] = os.getenv("GOOGLE_API_KEY") or None
    gemini_model: str = os.getenv("GEMINI_MODEL", "gemini-1.5-flash")
    temperature: float = float(os.getenv("MODEL_TEMPERATURE", "0.3"))
    top_p: float = float(os.getenv("MODEL_TOP_P", "0.9"))
    request_timeout: Optional[float] = _optional_float("MODEL_TIMEOUT")
    max_retries: int = int(os.getenv("MODEL_MAX_RETRIES", "0"))
    max_sessions: int = int(os.getenv("MAX_CHAT_SESSIONS", "1000"))
    static_dir: str = os.getenv("STATIC_DIR", "public")
    cors_allow_origins: List[str] = [
        origin.strip()
        for origin in os.getenv("CORS_ALLOW_ORIGINS", "*").split(",")
        if origin.strip()
    ]
    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = int(os.getenv("PORT", "3000"))


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
