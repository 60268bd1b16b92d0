from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional, List, Dict

from ..indexing import ProgressStats, ReindexResult


class IndexRequest(BaseModel):
    path: str
    extensions: Optional[List[str]] = None


class IndexResponse(BaseModel):
    message: str
    root_path: str


class CancelResponse(BaseModel):
    success: bool
    message: str


class ProgressResponse(BaseModel):
    active: bool
    root_path: Optional[str] = None
    status: Optional[str] = None
    total_files: int = 0
    indexed_files: int = 0
    failed_files: Dict[str, str] = Field(default_factory=dict)
    total_chunks: int = 0
    progress: float = 0.0
    start_time: Optional[datetime] = None
    last_update: Optional[datetime] = None
    completion_time: Optional[datetime] = None
    duration_seconds: Optional[float] = None

    @classmethod
    def from_stats(cls, stats: Optional[ProgressStats], active: bool) -> "ProgressResponse":
        if stats is None:
            return cls(active=active)
        return cls(
            active=active,
            root_path=stats.root_path,
            status=stats.status.value,
            total_files=stats.total_files,
            indexed_files=stats.indexed_files,
            failed_files=stats.failed_files,
            total_chunks=stats.total_chunks,
            progress=stats.progress,
            start_time=stats.start_time,
            last_update=stats.last_update,
            completion_time=stats.completion_time,
            duration_seconds=stats.duration_seconds,
        )


class ReindexRequest(BaseModel):
    files: List[str]


class ReindexResponse(BaseModel):
    success: bool
    message: str
    files_indexed: int = 0
    files_deleted: int = 0
    files_missing: int = 0
    total_chunks: int = 0
    errors: List[str] = Field(default_factory=list)

    @classmethod
    def from_result(cls, result: ReindexResult, message: str) -> "ReindexResponse":
        return cls(
            success=True,
            message=message,
            files_indexed=result.files_reindexed,
            files_deleted=result.files_deleted,
            files_missing=result.files_missing,
            total_chunks=result.total_chunks,
            errors=[f"{path}: {err}" for path, err in result.delete_errors.items()],
        )


class SearchRequest(BaseModel):
    query: str
    limit: Optional[int] = None
    min_score: Optional[float] = None
    # compact: only file:line references, no code
    compact: bool = True
    excerpt_lines: int = Field(default=0, ge=0)


class SimilarRequest(BaseModel):
    code_snippet: str
    limit: Optional[int] = None
    min_score: Optional[float] = None
    compact: bool = True
    excerpt_lines: int = Field(default=0, ge=0)


class SearchResult(BaseModel):
    id: str
    file_path: str
    start_line: int
    end_line: int
    language: str
    score: float
    rendered: str
    content: Optional[str] = None


class SearchResponse(BaseModel):
    results: List[SearchResult]


class ExplainRequest(BaseModel):
    file_path: str
    focus: str = ""


class ExplainResponse(BaseModel):
    file_path: str
    content: str
    related: List[SearchResult]


class StatsResponse(BaseModel):
    collection_name: str
    points_count: int
    vector_dim: int
