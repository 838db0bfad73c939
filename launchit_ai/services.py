"""Wiring: builds every component from one explicitly constructed OpenAI client."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from .advisor import Advisor
from .clients import build_openai_client
from .config import Config, cfg
from .embedder import Embedder
from .moderation import ContentModerator
from .search import SemanticSearch


@dataclass
class Services:
    embedder: Embedder
    search: SemanticSearch
    moderator: ContentModerator
    advisor: Advisor

    def close(self) -> None:
        self.advisor.close()


def build_services(config: Optional[Config] = None, client: Any = None) -> Services:
    config = config or cfg
    client = client if client is not None else build_openai_client(config)
    embedder = Embedder(client, config=config)
    return Services(
        embedder=embedder,
        search=SemanticSearch(embedder),
        moderator=ContentModerator(client, config=config),
        advisor=Advisor(client, config=config),
    )
