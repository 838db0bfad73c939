"""
Embedding module.

Converts text → dense float vectors through the OpenAI embeddings endpoint.
Vectors are cached under a normalised key so repeated submissions of the same
text cost one API call per process (until evicted).
"""

from __future__ import annotations

from typing import Any, List, Mapping, Optional

from .cache import LRUCache, normalize_key
from .config import Config, cfg
from .errors import EmbeddingUnavailable
from .log import get_logger
from .projects import project_text

log = get_logger(__name__)


class Embedder:
    """
    Cached text embedder.

    Usage
    -----
    embedder = Embedder(build_openai_client())
    vector = embedder.embed("AI note taking app")
    """

    def __init__(
        self,
        client: Any,
        model: Optional[str] = None,
        cache: Optional[LRUCache[List[float]]] = None,
        config: Optional[Config] = None,
    ) -> None:
        config = config or cfg
        self._client = client
        self.model = model or config.embed_model
        self.cache: LRUCache[List[float]] = cache or LRUCache(
            maxsize=config.embed_cache_size,
            ttl_seconds=config.cache_ttl_seconds,
        )

    def embed(self, text: str) -> List[float]:
        """Return the embedding vector for *text*, calling the model on a cache miss."""
        if not text or not text.strip():
            raise ValueError("Cannot embed empty text")

        key = normalize_key(text)
        cached = self.cache.get(key)
        if cached is not None:
            log.debug("embedding_cache_hit", length=len(text))
            return cached

        try:
            response = self._client.embeddings.create(model=self.model, input=text)
            vector = list(response.data[0].embedding)
        except Exception as exc:
            log.error("embedding_failed", model=self.model, error=str(exc))
            raise EmbeddingUnavailable("Failed to generate embedding") from exc

        self.cache.set(key, vector)
        log.debug("embedding_cached", model=self.model, dimension=len(vector))
        return vector

    def embed_item(self, item: Mapping[str, Any]) -> List[float]:
        """Embed the textual projection of a catalog item."""
        text = project_text(item)
        if not text:
            raise ValueError("Project has no text content for embedding")
        return self.embed(text)
