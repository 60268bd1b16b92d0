"""Search routes."""

from fastapi import APIRouter, Depends, HTTPException
import logging

from ...search import format_compact, format_hit
from ...search import searcher as search_defaults

from ..schemas import (
    ExplainRequest,
    ExplainResponse,
    SearchRequest,
    SearchResponse,
    SearchResult,
    SimilarRequest,
    StatsResponse,
)
from ..services import Services, get_services

logger = logging.getLogger(__name__)

router = APIRouter()


def _to_result(hit, compact: bool = False, excerpt_lines: int = 0) -> SearchResult:
    if compact:
        rendered, content = format_compact(hit), None
    else:
        rendered, content = format_hit(hit, excerpt_lines=excerpt_lines), hit.content
    return SearchResult(
        id=hit.id,
        file_path=hit.file_path,
        start_line=hit.start_line,
        end_line=hit.end_line,
        language=hit.language,
        score=hit.score,
        rendered=rendered,
        content=content,
    )


def _to_response(hits, compact: bool, excerpt_lines: int) -> SearchResponse:
    return SearchResponse(results=[_to_result(hit, compact, excerpt_lines) for hit in hits])


@router.post("/search", response_model=SearchResponse)
def search(request: SearchRequest, services: Services = Depends(get_services)):
    if not request.query.strip():
        raise HTTPException(status_code=400, detail="query must not be empty")

    search_cfg = services.cfg.get("search", {})
    limit = request.limit or search_cfg.get("top_k", search_defaults.DEFAULT_LIMIT)
    min_score = request.min_score
    if min_score is None:
        min_score = search_cfg.get("min_score", search_defaults.DEFAULT_MIN_SCORE)

    try:
        hits = services.searcher.search(request.query, limit=limit, min_score=min_score)
    except Exception as e:
        logger.error(f"Search failed: {e}")
        raise HTTPException(status_code=500, detail=f"Search failed: {e}")
    return _to_response(hits, request.compact, request.excerpt_lines)


@router.post("/similar", response_model=SearchResponse)
def find_similar(request: SimilarRequest, services: Services = Depends(get_services)):
    if not request.code_snippet.strip():
        raise HTTPException(status_code=400, detail="code_snippet must not be empty")

    search_cfg = services.cfg.get("search", {})
    limit = request.limit or search_cfg.get("top_k", search_defaults.DEFAULT_LIMIT)
    min_score = request.min_score
    if min_score is None:
        min_score = search_cfg.get("similar_min_score", search_defaults.DEFAULT_SIMILAR_MIN_SCORE)

    try:
        hits = services.searcher.find_similar(request.code_snippet, limit=limit, min_score=min_score)
    except Exception as e:
        logger.error(f"Similar code search failed: {e}")
        raise HTTPException(status_code=500, detail=f"Search failed: {e}")
    return _to_response(hits, request.compact, request.excerpt_lines)


@router.get("/stats", response_model=StatsResponse)
def index_stats(services: Services = Depends(get_services)):
    try:
        info = services.searcher.index_stats()
    except Exception as e:
        raise HTTPException(status_code=404, detail=f"Failed to get stats: {e}")
    return StatsResponse(
        collection_name=services.store.collection_name,
        points_count=info.points_count,
        vector_dim=info.vector_dim,
    )


@router.post("/explain", response_model=ExplainResponse)
def explain_code(request: ExplainRequest, services: Services = Depends(get_services)):
    """Return a file together with related code from the rest of the index."""
    if not request.file_path.strip():
        raise HTTPException(status_code=400, detail="file_path must not be empty")

    try:
        explanation = services.searcher.explain(request.file_path, focus=request.focus)
    except FileNotFoundError:
        raise HTTPException(status_code=404, detail=f"File not found: {request.file_path}")
    except OSError as e:
        raise HTTPException(status_code=400, detail=f"Failed to read file: {e}")
    except Exception as e:
        logger.error(f"Explain failed: {e}")
        raise HTTPException(status_code=500, detail=f"Search failed: {e}")

    return ExplainResponse(
        file_path=explanation.file_path,
        content=explanation.content,
        related=[_to_result(hit) for hit in explanation.related],
    )
