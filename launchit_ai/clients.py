"""Explicit construction of the external API clients."""

from __future__ import annotations

from typing import Optional

from openai import OpenAI

from .config import Config, cfg


def build_openai_client(config: Optional[Config] = None) -> OpenAI:
    """Create the OpenAI client shared by the embedder, moderator and advisor."""
    config = config or cfg
    return OpenAI(
        api_key=config.openai_api_key or None,
        timeout=config.openai_timeout,
    )
