"""
Semantic search over catalog items.

Items are plain mappings (as returned by the database layer or posted by the
frontend). Each hit is a shallow copy of the item with ``similarity`` and
``search_score`` added; the input list is never mutated.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from .embedder import Embedder
from .log import get_logger
from .projects import project_category, project_embedding, project_tags, project_text
from .similarity import cosine_similarity

log = get_logger(__name__)


def _hit(item: Mapping[str, Any], score: float) -> Dict[str, Any]:
    hit = dict(item)
    hit["similarity"] = score
    hit["search_score"] = score
    return hit


def rank(hits: List[Dict[str, Any]], limit: int) -> List[Dict[str, Any]]:
    """Sort by descending similarity (stable) and keep the first *limit*."""
    ordered = sorted(hits, key=lambda h: h["similarity"], reverse=True)
    return ordered[: max(limit, 0)]


def filter_results(
    hits: Iterable[Dict[str, Any]],
    category: Optional[str] = None,
    tags: Optional[Sequence[str]] = None,
) -> List[Dict[str, Any]]:
    """Keep hits matching *category* exactly and sharing at least one of *tags*."""
    results = list(hits)
    if category:
        results = [h for h in results if project_category(h) == category]
    if tags:
        wanted = set(tags)
        results = [h for h in results if wanted.intersection(project_tags(h))]
    return results


def keyword_search(
    query: str, items: Sequence[Mapping[str, Any]], limit: int = 10
) -> List[Dict[str, Any]]:
    """Case-insensitive substring match; the degraded path when embeddings are down."""
    needle = query.lower().strip()
    hits = [
        _hit(item, 1.0 if needle and needle in project_text(item).lower() else 0.0)
        for item in items
    ]
    return rank([h for h in hits if h["similarity"] > 0], limit)


class SemanticSearch:
    """Ranks catalog items by cosine similarity to a query embedding."""

    def __init__(self, embedder: Embedder) -> None:
        self.embedder = embedder

    def score(self, query_embedding: Sequence[float], item: Mapping[str, Any]) -> float:
        embedding = project_embedding(item)
        if embedding is None or not project_text(item):
            return 0.0
        return cosine_similarity(query_embedding, embedding)

    def search(
        self, query: str, items: Sequence[Mapping[str, Any]], limit: int = 10
    ) -> List[Dict[str, Any]]:
        """
        Return the *limit* items most similar to *query*.

        Raises EmbeddingUnavailable if the query cannot be embedded. Items
        without an embedding score 0 and sort after any positive match.
        """
        query_embedding = self.embedder.embed(query)
        hits = [_hit(item, self.score(query_embedding, item)) for item in items]
        results = rank(hits, limit)
        log.info(
            "semantic_search_complete",
            candidates=len(items),
            returned=len(results),
            top_score=results[0]["similarity"] if results else None,
        )
        return results
