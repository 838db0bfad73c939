"""
LaunchIT AI REST API
====================
A lightweight FastAPI server exposing semantic search, moderation and the
listing helpers to the frontend.

Endpoints
---------
GET  /health                   → liveness check
POST /api/search/semantic      → rank posted projects against a query
POST /api/embeddings/generate  → embedding for a text or a project
POST /api/moderate             → approve / review / reject verdict
POST /api/suggestions          → AI improvement suggestions for a project
POST /generatelaunchdata       → prefill a listing from a product URL
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from functools import lru_cache
from typing import Any, Dict, List, Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import cfg
from .errors import EmbeddingUnavailable, LaunchDataError, SuggestionError
from .projects import project_embedding
from .log import get_logger, setup_logging
from .ratelimit import RateLimiter
from .search import filter_results, keyword_search
from .services import Services, build_services

log = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(cfg.log_level, cfg.log_json)
    log.info("api_started", cors_origins=cfg.cors_origins)
    yield
    if get_services.cache_info().currsize:
        get_services().close()
    log.info("api_stopped")


app = FastAPI(
    lifespan=lifespan,
    title="LaunchIT AI API",
    description="Semantic search and content moderation for the LaunchIT startup directory.",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=cfg.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "1; mode=block",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}


@app.middleware("http")
async def security_headers(request: Request, call_next):
    response = await call_next(request)
    response.headers.update(_SECURITY_HEADERS)
    return response


@app.exception_handler(StarletteHTTPException)
async def http_error(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": True, "message": exc.detail},
    )


@app.exception_handler(RequestValidationError)
async def validation_error(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"error": True, "message": "Invalid request body"},
    )


# ── Dependencies ──────────────────────────────────────────────────────────────

@lru_cache(maxsize=1)
def get_services() -> Services:
    return build_services(cfg)


@lru_cache(maxsize=1)
def get_rate_limiter() -> RateLimiter:
    return RateLimiter(
        max_requests=cfg.rate_limit_max_requests,
        window_seconds=cfg.rate_limit_window_seconds,
    )


def rate_limit(request: Request, limiter: RateLimiter = Depends(get_rate_limiter)) -> None:
    client_id = request.client.host if request.client else "unknown"
    if not limiter.allow(client_id):
        log.warning("rate_limited", client=client_id, path=request.url.path)
        raise HTTPException(status_code=429, detail="Rate limit exceeded. Please try again later.")


# ── Request / Response models ─────────────────────────────────────────────────

class SearchFilters(BaseModel):
    category: Optional[str] = None
    tags: List[str] = Field(default_factory=list)


class SearchRequest(BaseModel):
    query: str = ""
    limit: int = Field(default_factory=lambda: cfg.search_default_limit, ge=0)
    filters: SearchFilters = Field(default_factory=SearchFilters)
    projects: List[Dict[str, Any]] = Field(default_factory=list)


class SearchResponse(BaseModel):
    success: bool = True
    results: List[Dict[str, Any]]
    total: int
    query: str
    mode: str
    search_time: str


class EmbeddingRequest(BaseModel):
    text: Optional[str] = None
    project: Optional[Dict[str, Any]] = None


class EmbeddingResponse(BaseModel):
    success: bool = True
    embedding: List[float]
    dimension: int


class ModerationRequest(BaseModel):
    content: str


class ModerationResponse(BaseModel):
    action: str
    message: str
    flagged: bool
    categories: Dict[str, bool]
    category_scores: Dict[str, float]
    issues: List[str]
    recommendations: List[str]


class LaunchDataRequest(BaseModel):
    url: str = ""


class SuggestionRequest(BaseModel):
    project: Dict[str, Any]


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _with_embeddings(services: Services, projects: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    *projects* with missing embeddings filled in from the project text.

    Filled items are copies, so the caller's dicts are never modified. Items
    with no text keep no embedding, and back-filling stops at the first
    upstream failure so the query embedding decides between semantic and
    keyword mode.
    """
    candidates = []
    available = True
    for item in projects:
        if available and project_embedding(item) is None:
            try:
                item = {**item, "embedding": services.embedder.embed_item(item)}
            except ValueError:
                pass  # no text
            except EmbeddingUnavailable as exc:
                log.warning("project_embedding_skipped", project_id=item.get("id"), error=str(exc))
                available = False
        candidates.append(item)
    return candidates


# ── Endpoints ─────────────────────────────────────────────────────────────────

@app.get("/health")
def health():
    return {"status": "healthy", "timestamp": _now(), "service": "launchit-ai-backend"}


@app.post("/api/search/semantic", response_model=SearchResponse, dependencies=[Depends(rate_limit)])
def semantic_search(body: SearchRequest, services: Services = Depends(get_services)):
    query = body.query.strip()
    if len(query) < cfg.search_min_query_length:
        raise HTTPException(
            status_code=400,
            detail=f"Search query must be at least {cfg.search_min_query_length} characters long",
        )

    mode = "semantic"
    if not body.projects:
        results: List[Dict[str, Any]] = []
    else:
        candidates = _with_embeddings(services, body.projects)
        try:
            results = services.search.search(query, candidates, body.limit)
        except EmbeddingUnavailable:
            log.warning("semantic_search_fallback", candidates=len(candidates))
            mode = "keyword"
            results = keyword_search(query, candidates, body.limit)

    results = filter_results(results, body.filters.category, body.filters.tags)
    for hit in results:
        hit.pop("embedding", None)

    return SearchResponse(
        results=results,
        total=len(results),
        query=query,
        mode=mode,
        search_time=_now(),
    )


@app.post("/api/embeddings/generate", response_model=EmbeddingResponse, dependencies=[Depends(rate_limit)])
def generate_embedding(body: EmbeddingRequest, services: Services = Depends(get_services)):
    try:
        if body.text and body.text.strip():
            vector = services.embedder.embed(body.text)
        elif body.project is not None:
            vector = services.embedder.embed_item(body.project)
        else:
            raise ValueError("Text or project is required")
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except EmbeddingUnavailable as exc:
        raise HTTPException(status_code=502, detail=f"Embedding generation failed: {exc}")

    return EmbeddingResponse(embedding=vector, dimension=len(vector))


@app.post("/api/moderate", response_model=ModerationResponse, dependencies=[Depends(rate_limit)])
def moderate(body: ModerationRequest, services: Services = Depends(get_services)):
    if not body.content.strip():
        raise HTTPException(status_code=400, detail="Content is required")
    verdict = services.moderator.moderate(body.content)
    return ModerationResponse(**verdict.to_dict())


@app.post("/api/suggestions", dependencies=[Depends(rate_limit)])
def suggestions(body: SuggestionRequest, services: Services = Depends(get_services)):
    try:
        return services.advisor.generate_suggestions(body.project)
    except SuggestionError as exc:
        raise HTTPException(status_code=500, detail=str(exc))


@app.post("/generatelaunchdata", dependencies=[Depends(rate_limit)])
def generate_launch_data(body: LaunchDataRequest, services: Services = Depends(get_services)):
    try:
        return services.advisor.generate_launch_data(body.url)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except LaunchDataError as exc:
        raise HTTPException(status_code=500, detail=str(exc))
