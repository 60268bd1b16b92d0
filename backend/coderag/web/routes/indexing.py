"""Indexing routes with SSE support."""

from fastapi import APIRouter, Depends, HTTPException, Query
from sse_starlette.sse import EventSourceResponse
import asyncio
import logging
import os
from pathlib import Path
from typing import Optional

from ...indexing import IndexStatus, ReindexError, reindex_pending

from ..schemas import (
    CancelResponse,
    IndexRequest,
    IndexResponse,
    ProgressResponse,
    ReindexRequest,
    ReindexResponse,
)
from ..services import Services, get_services

logger = logging.getLogger(__name__)

router = APIRouter()

PROGRESS_POLL_SECONDS = 1.0


@router.post("/index", response_model=IndexResponse)
async def start_indexing(request: IndexRequest, services: Services = Depends(get_services)):
    """Start indexing a directory in the background."""
    root = Path(request.path)
    if not root.exists():
        raise HTTPException(status_code=404, detail=f"Path does not exist: {request.path}")
    if not root.is_dir():
        raise HTTPException(status_code=400, detail="Path is not a directory")

    if not services.indexer.start(str(root.resolve()), request.extensions):
        raise HTTPException(status_code=409, detail="Indexing is already running")

    logger.info(f"Started background indexing for {root}")
    return IndexResponse(message=f"Indexing started for '{root}'", root_path=str(root.resolve()))


@router.post("/index/cancel", response_model=CancelResponse)
async def cancel_indexing(services: Services = Depends(get_services)):
    """Cancel ongoing indexing at the next batch boundary."""
    if not services.indexer.cancel():
        raise HTTPException(status_code=400, detail="Indexing is not running")
    return CancelResponse(success=True, message="Cancellation requested")


@router.get("/index/progress", response_model=ProgressResponse)
def index_progress(services: Services = Depends(get_services)):
    return ProgressResponse.from_stats(services.indexer.stats(), services.indexer.is_running)


@router.get("/index/progress/stream")
async def index_progress_stream(services: Services = Depends(get_services)):
    """SSE endpoint for real-time indexing progress."""

    async def event_generator():
        while True:
            # stats() may read the state file from disk
            stats = await asyncio.to_thread(services.indexer.stats)
            running = services.indexer.is_running
            yield {
                "event": "progress",
                "data": ProgressResponse.from_stats(stats, running).model_dump_json(),
            }
            if not running and (stats is None or stats.status != IndexStatus.IN_PROGRESS):
                break
            await asyncio.sleep(PROGRESS_POLL_SECONDS)

    return EventSourceResponse(event_generator())


@router.post("/index/reset", response_model=CancelResponse)
def reset_indexing(services: Services = Depends(get_services)):
    """Forget saved progress so the next run starts from scratch."""
    if not services.indexer.reset():
        raise HTTPException(status_code=409, detail="Indexing is running")
    return CancelResponse(success=True, message="Indexing state reset")


@router.post("/reindex", response_model=ReindexResponse)
def reindex_files(request: ReindexRequest, services: Services = Depends(get_services)):
    """Re-index an explicit list of files."""
    files = [f.strip() for f in request.files if f.strip()]
    if not files:
        raise HTTPException(status_code=400, detail="No files specified")

    logger.info(f"Received reindex request for {len(files)} files")
    try:
        result = services.coordinator.reindex_files(files)
    except ReindexError as e:
        logger.error(f"Reindex failed: {e}")
        raise HTTPException(status_code=500, detail=str(e))

    return ReindexResponse.from_result(
        result, f"Reindexed {result.files_reindexed}/{result.files_requested} files"
    )


@router.post("/reindex-pending", response_model=ReindexResponse)
def reindex_pending_files(
    workdir: Optional[str] = Query(default=None),
    services: Services = Depends(get_services),
):
    """Re-index the files listed in the pending-reindex marker of ``workdir``."""
    marker_path = os.path.join(workdir or os.getcwd(), services.cfg["reindex"]["marker_name"])
    if not os.path.exists(marker_path):
        return ReindexResponse(success=True, message="No pending reindex requests")

    try:
        result = reindex_pending(services.coordinator, marker_path)
    except ReindexError as e:
        logger.error(f"Pending reindex failed: {e}")
        return ReindexResponse(success=False, message="Pending reindex failed", errors=[str(e)])

    if result.files_requested == 0:
        return ReindexResponse(success=True, message="Marker file was empty")
    return ReindexResponse.from_result(
        result, f"Reindexed {result.files_reindexed}/{result.files_requested} files"
    )
