"""Helpers for reading catalog items (project listings) as plain mappings."""

from __future__ import annotations

from typing import Any, List, Mapping, Optional


def project_category(item: Mapping[str, Any]) -> str:
    return item.get("category_type") or item.get("category") or ""


def project_tags(item: Mapping[str, Any]) -> List[str]:
    return [str(tag) for tag in (item.get("tags") or [])]


def project_text(item: Mapping[str, Any]) -> str:
    """Textual projection of a project: name, description, category, tagline and tags."""
    parts = [
        item.get("name") or item.get("title") or "",
        item.get("description") or "",
        project_category(item),
        item.get("tagline") or "",
        " ".join(project_tags(item)),
    ]
    return " ".join(str(p).strip() for p in parts if str(p).strip())


def project_embedding(item: Mapping[str, Any]) -> Optional[List[float]]:
    embedding = item.get("embedding")
    if embedding is None or len(embedding) == 0:
        return None
    return embedding
