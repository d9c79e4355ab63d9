"""
Retrieval models: vector hits, context retrieval and search.
"""

from typing import Any

from pydantic import BaseModel, Field

from src.models.document import Document
from src.models.relationships import Relationship

SUMMARY_FALLBACK = "Summary generation failed"


class VectorSearchResult(BaseModel):
    """Single hit from the vector store."""

    document_id: str
    content: str
    score: float
    metadata: dict[str, Any] = Field(default_factory=dict)


class ContextOptions(BaseModel):
    """Options for context retrieval."""

    max_documents: int = Field(default=10, gt=0)
    min_score: float = Field(default=0.5, ge=0.0, le=1.0)
    include_relationships: bool = True
    generate_summary: bool = True


class ContextResponse(BaseModel):
    """Context assembled for a query."""

    query: str
    documents: list[Document] = Field(default_factory=list)
    relationships: list[Relationship] = Field(default_factory=list)
    summary: str | None = None
    total_results: int = 0
    processing_time_ms: float = 0.0


class SearchOptions(BaseModel):
    """
    Options for search.

    sort_by is accepted for compatibility but results keep vector-store order.
    """

    limit: int = Field(default=10, gt=0)
    offset: int = Field(default=0, ge=0)
    min_score: float = Field(default=0.5, ge=0.0, le=1.0)
    filters: dict[str, Any] | None = None
    sort_by: str = "relevance"


class SearchResult(BaseModel):
    """Search results."""

    query: str
    documents: list[Document] = Field(default_factory=list)
    total_results: int = 0
    processing_time_ms: float = 0.0
