"""Tests for semantic search, keyword fallback and result filters."""

from unittest.mock import MagicMock

import pytest

from launchit_ai.errors import EmbeddingUnavailable
from launchit_ai.projects import project_text
from launchit_ai.search import SemanticSearch, filter_results, keyword_search


QUERY_VECTOR = [1.0, 0.0, 0.0]


def _search(query_vector=QUERY_VECTOR):
    embedder = MagicMock()
    embedder.embed.return_value = query_vector
    return SemanticSearch(embedder), embedder


def _catalog():
    return [
        {"id": 1, "name": "Weak", "description": "x", "embedding": [0.2, 1.0, 0.0]},
        {"id": 2, "name": "Best", "description": "x", "embedding": [1.0, 0.0, 0.0]},
        {"id": 3, "name": "Middle", "description": "x", "embedding": [1.0, 1.0, 0.0]},
    ]


def test_returns_limit_items_sorted_descending():
    search, embedder = _search()
    results = search.search("note taking", _catalog(), limit=2)

    assert [r["id"] for r in results] == [2, 3]
    assert results[0]["similarity"] >= results[1]["similarity"]
    embedder.embed.assert_called_once_with("note taking")


def test_hits_carry_similarity_and_search_score():
    search, _ = _search()
    best = search.search("q", _catalog(), limit=1)[0]
    assert best["similarity"] == pytest.approx(1.0)
    assert best["search_score"] == best["similarity"]


def test_input_items_not_mutated():
    search, _ = _search()
    items = _catalog()
    search.search("q", items, limit=3)
    assert all("similarity" not in item for item in items)


def test_item_without_embedding_scores_zero_and_sorts_last():
    search, _ = _search()
    items = [
        {"id": "none", "name": "No vector", "description": "x"},
        {"id": "pos", "name": "Has vector", "description": "x", "embedding": [0.5, 0.5, 0.0]},
    ]
    results = search.search("q", items, limit=10)

    assert [r["id"] for r in results] == ["pos", "none"]
    assert results[1]["similarity"] == 0


def test_item_with_empty_text_scores_zero():
    search, _ = _search()
    results = search.search("q", [{"embedding": [1.0, 0.0, 0.0]}], limit=1)
    assert results[0]["similarity"] == 0


def test_ties_keep_input_order():
    search, _ = _search()
    items = [{"id": i, "name": f"p{i}"} for i in range(5)]
    results = search.search("q", items, limit=5)
    assert [r["id"] for r in results] == [0, 1, 2, 3, 4]


def test_query_embedding_failure_propagates():
    search, embedder = _search()
    embedder.embed.side_effect = EmbeddingUnavailable("down")
    with pytest.raises(EmbeddingUnavailable):
        search.search("q", _catalog(), limit=2)


def test_project_text_concatenates_fields():
    item = {
        "name": "Notely",
        "description": "Shared notes ",
        "category_type": "productivity",
        "tagline": "Think together",
        "tags": ["notes", "ai"],
    }
    assert project_text(item) == "Notely Shared notes productivity Think together notes ai"


def test_keyword_search_matches_substring_case_insensitive():
    items = [
        {"id": 1, "name": "Notely", "description": "Team NOTES"},
        {"id": 2, "name": "Fitly", "description": "Workouts"},
    ]
    results = keyword_search("notes", items, limit=5)
    assert [r["id"] for r in results] == [1]
    assert results[0]["similarity"] == 1.0


def test_filter_results_by_category_and_tags():
    hits = [
        {"id": 1, "category_type": "ai", "tags": ["llm", "notes"]},
        {"id": 2, "category_type": "ai", "tags": ["vision"]},
        {"id": 3, "category_type": "fintech", "tags": ["llm"]},
    ]
    assert [h["id"] for h in filter_results(hits, category="ai")] == [1, 2]
    assert [h["id"] for h in filter_results(hits, tags=["llm"])] == [1, 3]
    assert [h["id"] for h in filter_results(hits, category="ai", tags=["llm"])] == [1]
    assert filter_results(hits) == hits
