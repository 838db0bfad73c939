"""Centralised configuration loaded from environment / .env file."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from dotenv import load_dotenv

load_dotenv()

DEFAULT_TERMS_PATH = Path(__file__).with_name("moderation_terms.json")


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


def _env_list(name: str, default: str) -> List[str]:
    return [item.strip() for item in os.getenv(name, default).split(",") if item.strip()]


@dataclass
class Config:
    # ── OpenAI ─────────────────────────────────────────────────────
    openai_api_key: str = field(
        default_factory=lambda: os.getenv("OPENAI_API_KEY", "")
    )
    openai_timeout: float = field(
        default_factory=lambda: float(os.getenv("OPENAI_TIMEOUT", "30"))
    )

    # ── Embeddings ─────────────────────────────────────────────────
    embed_model: str = field(
        default_factory=lambda: os.getenv("EMBED_MODEL", "text-embedding-3-small")
    )
    embed_dimension: int = field(
        default_factory=lambda: int(os.getenv("EMBED_DIMENSION", "1536"))
    )

    # ── Moderation ─────────────────────────────────────────────────
    moderation_model: str = field(
        default_factory=lambda: os.getenv("MODERATION_MODEL", "omni-moderation-latest")
    )
    moderation_terms_path: Path = field(
        default_factory=lambda: Path(
            os.getenv("MODERATION_TERMS_PATH", str(DEFAULT_TERMS_PATH))
        )
    )

    # ── Chat models ────────────────────────────────────────────────
    llm_provider: str = field(
        default_factory=lambda: os.getenv("LLM_PROVIDER", "openai")
    )
    chat_model: str = field(
        default_factory=lambda: os.getenv("CHAT_MODEL", "gpt-4o-mini")
    )
    suggestion_model: str = field(
        default_factory=lambda: os.getenv("SUGGESTION_MODEL", "gpt-3.5-turbo")
    )
    ollama_model: str = field(
        default_factory=lambda: os.getenv("OLLAMA_MODEL", "llama3")
    )

    # ── Caches ─────────────────────────────────────────────────────
    embed_cache_size: int = field(
        default_factory=lambda: int(os.getenv("EMBED_CACHE_SIZE", "4096"))
    )
    moderation_cache_size: int = field(
        default_factory=lambda: int(os.getenv("MODERATION_CACHE_SIZE", "2048"))
    )
    cache_ttl_seconds: float = field(
        default_factory=lambda: float(os.getenv("CACHE_TTL_SECONDS", "0"))
    )

    # ── Search ─────────────────────────────────────────────────────
    search_default_limit: int = field(
        default_factory=lambda: int(os.getenv("SEARCH_DEFAULT_LIMIT", "10"))
    )
    search_min_query_length: int = field(
        default_factory=lambda: int(os.getenv("SEARCH_MIN_QUERY_LENGTH", "2"))
    )

    # ── HTTP layer ─────────────────────────────────────────────────
    rate_limit_window_seconds: float = field(
        default_factory=lambda: float(os.getenv("RATE_LIMIT_WINDOW_SECONDS", "900"))
    )
    rate_limit_max_requests: int = field(
        default_factory=lambda: int(os.getenv("RATE_LIMIT_MAX_REQUESTS", "50"))
    )
    cors_origins: List[str] = field(
        default_factory=lambda: _env_list(
            "CORS_ORIGINS", "https://launchit.site,https://launchitsite.netlify.app"
        )
    )
    fetch_timeout: float = field(
        default_factory=lambda: float(os.getenv("FETCH_TIMEOUT", "2.0"))
    )

    # ── Logging ────────────────────────────────────────────────────
    log_level: str = field(
        default_factory=lambda: os.getenv("LOG_LEVEL", "INFO")
    )
    log_json: bool = field(
        default_factory=lambda: _env_bool("LOG_JSON")
    )


# Singleton used everywhere
cfg = Config()
