"""
Advisor
=======
Chat-model helpers for project listings:

  • generate_launch_data – fetch a product page and let the model fill in the
    listing form (name, tagline, description, category, features, links)
  • generate_suggestions – improvement ideas, next steps and a marketing tip

The chat provider is OpenAI by default; LLM_PROVIDER=ollama routes the chat
calls to a local Ollama model instead.
"""

from __future__ import annotations

import json
import re
from typing import Any, Dict, List, Mapping, Optional
from urllib.parse import urlparse

import httpx

from .config import Config, cfg
from .errors import LaunchDataError, SuggestionError
from .log import get_logger

log = get_logger(__name__)

_USER_AGENT = "Mozilla/5.0"
_HTML_PROMPT_CHARS = 4000

_META_PATTERNS = [
    re.compile(r"""<meta\s+property=["']og:image["']\s+content=["']([^"']+)["']""", re.I),
    re.compile(r"""<meta\s+name=["']twitter:image["']\s+content=["']([^"']+)["']""", re.I),
    re.compile(r"""<link\s+rel=["']apple-touch-icon["']\s+href=["']([^"']+)["']""", re.I),
]
_FENCE = re.compile(r"```json\s*|\s*```")


# ── HTML helpers ──────────────────────────────────────────────────────────────

def og_image(html: str) -> Optional[str]:
    match = _META_PATTERNS[0].search(html)
    return match.group(1) if match else None


def extract_logo(html: str, metadata: Optional[Mapping[str, Any]] = None) -> Optional[str]:
    """Best logo candidate: metadata first, then og:image, twitter:image, apple-touch-icon."""
    metadata = metadata or {}
    for key in ("logo_url", "og_image"):
        if metadata.get(key):
            return metadata[key]
    for pattern in _META_PATTERNS:
        match = pattern.search(html)
        if match:
            return match.group(1)
    return None


def parse_model_json(raw: str) -> Dict[str, Any]:
    """Parse a JSON object from model output, tolerating ```json fences."""
    data = json.loads(_FENCE.sub("", raw.strip()).strip())
    if not isinstance(data, dict):
        raise ValueError("Expected a JSON object")
    return data


def placeholder_launch_data(url: str) -> Dict[str, Any]:
    """Listing fields derived from the URL alone, used when the model output is unusable."""
    host = urlparse(url).hostname or url
    if host.startswith("www."):
        host = host[4:]
    return {
        "name": host.replace(".", " ").upper(),
        "tagline": "Innovative solution for modern needs",
        "description": "This product offers cutting-edge features designed to solve real-world problems.",
        "category": "startup ecosystem",
        "features": ["User-friendly", "Scalable", "Secure"],
        "social_links": [],
        "other_links": [],
    }


_LAUNCH_PROMPT = """Extract JSON only:
{
  "name": "company/product name",
  "tagline": "short tagline",
  "description": "2-3 sentences",
  "category": "category",
  "features": ["tag1", "tag2", "tag3", "tag4", "tag5"],
  "social_links": [],
  "other_links": []
}
HTML: """

_SUGGESTION_SYSTEM = (
    "You are a startup advisor helping founders improve their projects. "
    "Provide practical, actionable advice."
)

_SUGGESTION_PROMPT = """Based on this startup project, suggest improvements and next steps:

Project: {name}
Description: {description}
Category: {category}
Tagline: {tagline}

Please provide:
1. 3 specific improvement suggestions
2. 2 potential next steps
3. 1 marketing tip

Format as JSON with keys: improvements, nextSteps, marketingTip"""


# ── Advisor ───────────────────────────────────────────────────────────────────

class Advisor:
    """Chat-model features for the listing form."""

    def __init__(
        self,
        client: Any,
        http_client: Optional[httpx.Client] = None,
        config: Optional[Config] = None,
    ) -> None:
        self.config = config or cfg
        self._client = client
        self._http = http_client or httpx.Client(
            timeout=self.config.fetch_timeout,
            follow_redirects=True,
            headers={"User-Agent": _USER_AGENT},
        )

    def close(self) -> None:
        """Release the page-fetch connection pool."""
        self._http.close()

    # ── Provider abstraction ─────────────────────────────────────────────────

    def _chat_openai(self, messages: List[Dict[str, str]], model: str, **params: Any) -> str:
        response = self._client.chat.completions.create(
            model=model, messages=messages, **params
        )
        return (response.choices[0].message.content or "").strip()

    def _chat_ollama(self, messages: List[Dict[str, str]]) -> str:
        import ollama

        response = ollama.chat(model=self.config.ollama_model, messages=messages)
        return response["message"]["content"].strip()

    def _llm(self, messages: List[Dict[str, str]], model: str, **params: Any) -> str:
        if self.config.llm_provider == "ollama":
            return self._chat_ollama(messages)
        return self._chat_openai(messages, model, **params)

    # ── Launch data ──────────────────────────────────────────────────────────

    def fetch_html(self, url: str) -> str:
        """Page HTML, or "" if the URL is malformed or the page cannot be fetched in time."""
        try:
            response = self._http.get(url)
            response.raise_for_status()
            return response.text
        except (httpx.HTTPError, httpx.InvalidURL, UnicodeError, ValueError) as exc:
            log.warning("page_fetch_failed", url=url, error=str(exc))
            return ""

    def generate_launch_data(self, url: str) -> Dict[str, Any]:
        """
        Build listing fields for the product at *url*.

        Raises ValueError for a non-http URL and LaunchDataError if the chat
        model call fails. Unparseable model output falls back to
        placeholder_launch_data().
        """
        if not url or not url.startswith("http"):
            raise ValueError("Invalid or missing URL")

        html = self.fetch_html(url)
        logo_url = extract_logo(html)
        thumbnail_url = og_image(html)

        try:
            raw = self._llm(
                [{"role": "user", "content": _LAUNCH_PROMPT + html[:_HTML_PROMPT_CHARS]}],
                self.config.chat_model,
                temperature=0,
                max_tokens=400,
            )
        except Exception as exc:
            log.error("launch_data_model_failed", url=url, error=str(exc))
            raise LaunchDataError(f"OpenAI API failed: {exc}") from exc

        try:
            result = parse_model_json(raw)
        except ValueError:
            log.warning("launch_data_unparseable", url=url)
            result = placeholder_launch_data(url)

        return {
            "name": result.get("name") or "",
            "website_url": url,
            "tagline": result.get("tagline") or "",
            "description": result.get("description") or "",
            "category": result.get("category") or "",
            "links": [*(result.get("social_links") or []), *(result.get("other_links") or [])],
            "features": result.get("features") or [],
            "logo_url": logo_url,
            "thumbnail_url": thumbnail_url,
            "success": True,
        }

    # ── Suggestions ──────────────────────────────────────────────────────────

    def generate_suggestions(self, project: Mapping[str, Any]) -> Dict[str, Any]:
        """Ask the model for improvements, next steps and a marketing tip."""
        prompt = _SUGGESTION_PROMPT.format(
            name=project.get("name", ""),
            description=project.get("description", ""),
            category=project.get("category_type") or project.get("category", ""),
            tagline=project.get("tagline", ""),
        )
        try:
            raw = self._llm(
                [
                    {"role": "system", "content": _SUGGESTION_SYSTEM},
                    {"role": "user", "content": prompt},
                ],
                self.config.suggestion_model,
                temperature=0.7,
                max_tokens=500,
            )
        except Exception as exc:
            log.error("suggestions_model_failed", error=str(exc))
            raise SuggestionError("Failed to generate project suggestions") from exc

        try:
            data = parse_model_json(raw)
        except ValueError:
            return {"improvements": [], "next_steps": [], "marketing_tip": "", "raw": raw}

        return {
            "improvements": list(data.get("improvements") or []),
            "next_steps": list(data.get("nextSteps") or data.get("next_steps") or []),
            "marketing_tip": data.get("marketingTip") or data.get("marketing_tip") or "",
            "raw": None,
        }
