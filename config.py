from __future__ import annotations

import os
from typing import List


def _database_url() -> str:
    url = os.getenv("DATABASE_URL", "sqlite:///./wordmath.db")

    # Render sometimes hands out postgres://; normalize to postgresql://
    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql://", 1)

    # Force psycopg3 driver if using Postgres
    if url.startswith("postgresql://") and "+psycopg" not in url:
        url = url.replace("postgresql://", "postgresql+psycopg://", 1)
    return url


DATABASE_URL = _database_url()

DEFAULT_MODELS = ["gemini-2.5-flash", "gemini-1.5-flash", "gemini-1.5-flash-8b"]
DEFAULT_GEMINI_BASE_URL = "https://generativelanguage.googleapis.com"


def gemini_api_key() -> str:
    return os.getenv("GEMINI_API_KEY", "")


def gemini_base_url() -> str:
    return os.getenv("GEMINI_BASE_URL", DEFAULT_GEMINI_BASE_URL).rstrip("/")


def gemini_timeout() -> float:
    try:
        return float(os.getenv("GEMINI_TIMEOUT_S", "30"))
    except ValueError:
        return 30.0


def model_candidates() -> List[str]:
    """
    Ordered list of Gemini models to try. GEMINI_MODELS is comma-separated;
    blank entries are ignored and an empty value means the defaults.
    """
    raw = os.getenv("GEMINI_MODELS", "")
    models = [m.strip() for m in raw.split(",") if m.strip()]
    return models or list(DEFAULT_MODELS)
