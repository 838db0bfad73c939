"""
Moderation
==========
Scores user-submitted content as ``approve``, ``review`` or ``reject``.

Two signals are combined:

  ① The OpenAI moderation model
       • any hate / self-harm / violence / sexual flag  → reject
       • otherwise the aggregate ``flagged`` bit        → review
       • otherwise                                      → approve

  ② Local heuristics (always run, can only lift approve → review)
       • more than N exclamation marks
       • mostly upper-case letters
       • profanity list hits
       • spam phrase hits

If the moderation model itself fails the content is approved (fail-open) so
that an outage never blocks a legitimate submission. That verdict is not
cached, so the next submission of the same text asks the model again.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .cache import LRUCache, normalize_key
from .config import Config, cfg
from .log import get_logger

log = get_logger(__name__)

APPROVE = "approve"
REVIEW = "review"
REJECT = "reject"

MESSAGES = {
    APPROVE: "Content approved",
    REVIEW: "Content flagged for review",
    REJECT: "Content violates community guidelines",
}
UNAVAILABLE_MESSAGE = "Moderation service unavailable; content approved by default"


# ── Data model ────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class ModerationTerms:
    """Thresholds and word lists for the local heuristics."""

    reject_categories: Tuple[str, ...] = ("hate", "self-harm", "violence", "sexual")
    max_exclamation_marks: int = 3
    max_uppercase_ratio: float = 0.7
    profanity: Tuple[str, ...] = ()
    spam_phrases: Tuple[str, ...] = ()

    @classmethod
    def from_file(cls, path: Path) -> "ModerationTerms":
        with open(path, encoding="utf-8") as fh:
            data = json.load(fh)
        defaults = cls()
        return cls(
            reject_categories=tuple(data.get("reject_categories", defaults.reject_categories)),
            max_exclamation_marks=int(data.get("max_exclamation_marks", defaults.max_exclamation_marks)),
            max_uppercase_ratio=float(data.get("max_uppercase_ratio", defaults.max_uppercase_ratio)),
            profanity=tuple(w.lower() for w in data.get("profanity", [])),
            spam_phrases=tuple(p.lower() for p in data.get("spam_phrases", [])),
        )


@dataclass(frozen=True)
class ModerationVerdict:
    action: str
    message: str
    flagged: bool = False
    categories: Mapping[str, bool] = field(default_factory=dict)
    category_scores: Mapping[str, float] = field(default_factory=dict)
    issues: Tuple[str, ...] = ()
    recommendations: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["categories"] = dict(self.categories)
        data["category_scores"] = dict(self.category_scores)
        data["issues"] = list(self.issues)
        data["recommendations"] = list(self.recommendations)
        return data


# ── Heuristics ────────────────────────────────────────────────────────────────

def heuristic_issues(content: str, terms: ModerationTerms) -> Tuple[List[str], List[str]]:
    """Return (issues, recommendations) found by the local checks."""
    issues: List[str] = []
    recommendations: List[str] = []

    if content.count("!") > terms.max_exclamation_marks:
        issues.append("Too many exclamation marks")
        recommendations.append("Reduce exclamation marks for a less promotional tone")

    letters = [c for c in content if c.isalpha()]
    if letters:
        upper_ratio = sum(1 for c in letters if c.isupper()) / len(letters)
        if upper_ratio > terms.max_uppercase_ratio:
            issues.append("Excessive capitalization")
            recommendations.append("Use normal sentence case instead of all caps")

    lowered = content.lower()
    bad_words = [w for w in terms.profanity if w in lowered]
    if bad_words:
        issues.append(f"Inappropriate language detected: {', '.join(bad_words)}")
        recommendations.append("Remove inappropriate language")

    spam = [p for p in terms.spam_phrases if p in lowered]
    if spam:
        issues.append(f"Spam-like phrases detected: {', '.join(spam)}")
        recommendations.append("Avoid pushy sales phrases and describe what the product does")

    return issues, recommendations


def _as_dict(obj: Any) -> Dict[str, Any]:
    if obj is None:
        return {}
    if isinstance(obj, Mapping):
        return dict(obj)
    return obj.model_dump(by_alias=True)


def _matches_category(key: str, roots: Tuple[str, ...]) -> bool:
    name = key.lower().replace("_", "-")
    return any(
        name == root or name.startswith(root + "/") or name.startswith(root + "-")
        for root in roots
    )


# ── Scorer ────────────────────────────────────────────────────────────────────

class ContentModerator:
    """
    Moderation scorer with a verdict cache.

    Usage
    -----
    moderator = ContentModerator(build_openai_client())
    verdict = moderator.moderate("Check out my new app!")
    verdict.action   # "approve"
    """

    def __init__(
        self,
        client: Any,
        terms: Optional[ModerationTerms] = None,
        model: Optional[str] = None,
        cache: Optional[LRUCache[ModerationVerdict]] = None,
        config: Optional[Config] = None,
    ) -> None:
        config = config or cfg
        self._client = client
        self.model = model or config.moderation_model
        self.terms = terms or ModerationTerms.from_file(config.moderation_terms_path)
        self.cache: LRUCache[ModerationVerdict] = cache or LRUCache(
            maxsize=config.moderation_cache_size,
            ttl_seconds=config.cache_ttl_seconds,
        )

    def _classify(self, content: str) -> Tuple[bool, Dict[str, bool], Dict[str, float]]:
        response = self._client.moderations.create(model=self.model, input=content)
        result = response.results[0]
        categories = {k: bool(v) for k, v in _as_dict(result.categories).items()}
        scores = {k: float(v or 0.0) for k, v in _as_dict(result.category_scores).items()}
        return bool(result.flagged), categories, scores

    def moderate(self, content: str) -> ModerationVerdict:
        """Return the verdict for *content*. Never raises because of the moderation model."""
        key = normalize_key(content)
        cached = self.cache.get(key)
        if cached is not None:
            log.debug("moderation_cache_hit", length=len(content))
            return cached

        try:
            flagged, categories, scores = self._classify(content)
        except Exception as exc:
            log.warning("moderation_unavailable", model=self.model, error=str(exc))
            return ModerationVerdict(action=APPROVE, message=UNAVAILABLE_MESSAGE)

        if any(hit and _matches_category(name, self.terms.reject_categories)
               for name, hit in categories.items()):
            action = REJECT
        elif flagged:
            action = REVIEW
        else:
            action = APPROVE

        issues, recommendations = heuristic_issues(content, self.terms)
        if issues and action == APPROVE:
            action = REVIEW

        verdict = ModerationVerdict(
            action=action,
            message=MESSAGES[action],
            flagged=flagged,
            categories=categories,
            category_scores=scores,
            issues=tuple(issues),
            recommendations=tuple(recommendations),
        )
        self.cache.set(key, verdict)
        log.info(
            "content_moderated",
            action=action,
            flagged=flagged,
            issues=len(issues),
            length=len(content),
        )
        return verdict
