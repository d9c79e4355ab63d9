"""
Data models for the Context Memory Store.

- Document, DocumentSource, Chunk: ingested content
- Relationship, RelationshipExtraction, RelationshipDirection: graph edges
- ChatMessage: language model conversation turns
- IngestionOptions, IngestionResult, BatchIngestionResult, ProcessingStatus
- ContextOptions, ContextResponse, SearchOptions, SearchResult, VectorSearchResult
- MemoryStatistics
"""

from src.models.chat import ChatMessage
from src.models.document import Chunk, Document, DocumentSource
from src.models.ingestion import (
    BatchIngestionResult,
    IngestionOptions,
    IngestionResult,
    ProcessingStatus,
)
from src.models.relationships import (
    Relationship,
    RelationshipDirection,
    RelationshipExtraction,
)
from src.models.retrieval import (
    SUMMARY_FALLBACK,
    ContextOptions,
    ContextResponse,
    SearchOptions,
    SearchResult,
    VectorSearchResult,
)
from src.models.statistics import MemoryStatistics

__all__ = [
    "ChatMessage",
    "Chunk",
    "Document",
    "DocumentSource",
    "BatchIngestionResult",
    "IngestionOptions",
    "IngestionResult",
    "ProcessingStatus",
    "Relationship",
    "RelationshipDirection",
    "RelationshipExtraction",
    "SUMMARY_FALLBACK",
    "ContextOptions",
    "ContextResponse",
    "SearchOptions",
    "SearchResult",
    "VectorSearchResult",
    "MemoryStatistics",
]
