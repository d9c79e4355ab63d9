"""
Context Memory Store FastAPI Application

A REST API server for the memory orchestrator.
Provides endpoints for ingesting documents, retrieving context, searching,
and deleting documents.
"""

import json
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import BaseModel, Field, model_validator

from src.config import Config
from src.core.factory import (
    GraphStoreFactory,
    LanguageModelFactory,
    RepositoryFactory,
    VectorStoreFactory,
)
from src.models import (
    BatchIngestionResult,
    ContextOptions,
    ContextResponse,
    Document,
    DocumentSource,
    IngestionOptions,
    MemoryStatistics,
    SearchOptions,
    SearchResult,
)
from src.services.memory_orchestrator import MemoryOrchestrator
from src.utils.counters import OperationCounters
from src.utils.exceptions import BatchPartialFailure, ContextMemoryError
from src.utils.logger import get_logger, setup_logging

MAX_BATCH_SIZE = 100
MIN_CHUNK_SIZE = 100
MAX_CHUNK_SIZE = 10000

# Global orchestrator instance
orchestrator: MemoryOrchestrator | None = None
logger = get_logger(__name__)


# Pydantic models for API
class IngestOptionsRequest(BaseModel):
    """Ingestion options accepted over HTTP."""

    auto_summarize: bool = True
    extract_relationships: bool = True
    chunk_size: int | None = Field(default=None, ge=MIN_CHUNK_SIZE, le=MAX_CHUNK_SIZE)
    chunk_overlap: int | None = Field(default=None, ge=0)

    @model_validator(mode="after")
    def check_overlap(self) -> "IngestOptionsRequest":
        if (
            self.chunk_size is not None
            and self.chunk_overlap is not None
            and self.chunk_overlap >= self.chunk_size
        ):
            raise ValueError("chunk_overlap must be less than chunk_size")
        return self

    def to_options(self) -> IngestionOptions:
        return IngestionOptions(**self.model_dump())


class IngestDocumentRequest(BaseModel):
    """Single document to ingest."""

    id: str | None = Field(default=None, description="Document ID (generated if omitted)")
    content: str = Field(..., min_length=1, description="Document text")
    metadata: dict[str, Any] = Field(default_factory=dict)
    source: DocumentSource = Field(default_factory=DocumentSource)

    def to_document(self) -> Document:
        fields = self.model_dump(exclude_none=True)
        fields["source"] = self.source
        return Document(**fields)


class IngestRequest(BaseModel):
    """Request model for ingesting documents."""

    documents: list[IngestDocumentRequest] = Field(..., min_length=1, max_length=MAX_BATCH_SIZE)
    options: IngestOptionsRequest = Field(default_factory=IngestOptionsRequest)
    strict: bool = Field(
        default=False, description="Report partial batch failures with status 207"
    )


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    orchestrator_initialized: bool
    counters: dict[str, int] = Field(default_factory=dict)


def _http_error(error: ContextMemoryError) -> HTTPException:
    return HTTPException(status_code=error.status_code, detail=error.to_dict())


async def _ready_orchestrator() -> MemoryOrchestrator:
    """Return the orchestrator once every collaborator reports healthy."""
    if not orchestrator:
        raise HTTPException(status_code=503, detail="Orchestrator not initialized")

    try:
        await orchestrator.ensure_ready()
    except ContextMemoryError as e:
        raise _http_error(e) from e
    return orchestrator


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup/shutdown."""
    global orchestrator

    # Load configuration from environment or use defaults
    config = Config.from_env()

    setup_logging(
        level=config.logging.level,
        log_to_file=config.logging.log_to_file,
        log_dir=config.logging.log_dir,
        file_rotation=config.logging.file_rotation,
        file_retention=config.logging.file_retention,
        compression=config.logging.compression,
        serialize=config.logging.serialize,
    )

    logger.info("Starting Context Memory Store server")
    logger.info(
        f"Configuration: LLM={config.llm.provider}/{config.llm.model}, "
        f"Embedder={config.embedder.model} ({config.embedder.dimension}), "
        f"Repository={config.repository.backend}"
    )

    # Create components using factories
    language_model = LanguageModelFactory.create(config.llm, config.embedder)
    repository = RepositoryFactory.create(config.repository)
    graph_store = GraphStoreFactory.create(config.neo4j)
    vector_store = VectorStoreFactory.create(
        config.qdrant, language_model, config.embedder.dimension
    )

    orchestrator = MemoryOrchestrator(
        repository=repository,
        vector_store=vector_store,
        graph_store=graph_store,
        language_model=language_model,
        config=config,
        counters=OperationCounters(),
    )

    await orchestrator.initialize()
    logger.info("Memory orchestrator initialized")

    yield

    # Cleanup
    logger.info("Shutting down Context Memory Store server")
    await orchestrator.close()
    orchestrator = None
    logger.info("Cleanup complete")


# Create FastAPI app
app = FastAPI(
    title="Context Memory Store API",
    description="Document memory with semantic search and relationship graphs",
    version="1.0.0",
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint with operation counters."""
    if not orchestrator:
        return JSONResponse(
            status_code=503,
            content=HealthResponse(status="initializing", orchestrator_initialized=False).model_dump(),
        )

    healthy = await orchestrator.is_healthy()
    response = HealthResponse(
        status="healthy" if healthy else "unhealthy",
        orchestrator_initialized=True,
        counters=orchestrator.counters.snapshot(),
    )
    return JSONResponse(status_code=200 if healthy else 503, content=response.model_dump())


@app.post("/v1/memory/ingest", response_model=BatchIngestionResult)
async def ingest_documents(request: IngestRequest):
    """
    Ingest a batch of documents.

    Each document is chunked and embedded; relationships and a summary are
    extracted when requested. Failed documents are reported per document.
    With strict set, a batch where only some documents failed returns 207.
    """
    service = await _ready_orchestrator()

    # Overlap without a chunk size is checked against the configured size
    chunk_size = request.options.chunk_size or service.config.processing.chunk_size
    if request.options.chunk_overlap is not None and request.options.chunk_overlap >= chunk_size:
        raise HTTPException(
            status_code=422,
            detail=f"chunk_overlap must be less than chunk_size ({chunk_size})",
        )

    max_bytes = service.config.processing.max_file_size_mb * 1024 * 1024
    for document in request.documents:
        if len(document.content.encode("utf-8")) > max_bytes:
            raise HTTPException(
                status_code=422,
                detail=f"Document content exceeds {service.config.processing.max_file_size_mb} MB",
            )

    try:
        batch = await service.ingest_documents(
            [d.to_document() for d in request.documents],
            request.options.to_options(),
        )
        if request.strict:
            batch.raise_for_failures()
        return batch
    except BatchPartialFailure as e:
        return JSONResponse(
            status_code=e.status_code,
            content={**e.to_dict(), "results": [r.model_dump(mode="json") for r in e.results]},
        )
    except ContextMemoryError as e:
        raise _http_error(e) from e
    except Exception as e:
        logger.error(f"Error ingesting documents: {e}")
        raise HTTPException(status_code=500, detail=str(e)) from e


@app.get("/v1/memory/context", response_model=ContextResponse)
async def get_context(
    query: str = Query(..., min_length=1),
    max_documents: int = Query(default=10, ge=1, le=100),
    min_score: float = Query(default=0.5, ge=0.0, le=1.0),
    include_relationships: bool = Query(default=True),
    generate_summary: bool = Query(default=True),
):
    """
    Retrieve context for a query.

    Returns the matching documents, the relationships attached to them and
    a combined summary.
    """
    service = await _ready_orchestrator()

    try:
        return await service.get_context(
            query,
            ContextOptions(
                max_documents=max_documents,
                min_score=min_score,
                include_relationships=include_relationships,
                generate_summary=generate_summary,
            ),
        )
    except ContextMemoryError as e:
        raise _http_error(e) from e
    except Exception as e:
        logger.error(f"Error retrieving context: {e}")
        raise HTTPException(status_code=500, detail=str(e)) from e


def _sse(event: str, data: Any) -> str:
    payload = data if isinstance(data, str) else json.dumps(data)
    return f"event: {event}\ndata: {payload}\n\n"


@app.get("/v1/memory/analyze-stream")
async def analyze_stream(
    query: str = Query(..., min_length=1),
    max_documents: int = Query(default=10, ge=1, le=100),
    min_score: float = Query(default=0.5, ge=0.0, le=1.0),
):
    """
    Stream an analysis of the context retrieved for a query as Server-Sent Events.

    Events: status, metadata, analysis (text deltas), done, error.
    """
    service = await _ready_orchestrator()
    options = ContextOptions(
        max_documents=max_documents, min_score=min_score, generate_summary=False
    )

    async def events() -> AsyncIterator[str]:
        try:
            yield _sse("status", "Retrieving context")
            context = await service.get_context(query, options)
            yield _sse(
                "metadata",
                {
                    "documents_analyzed": len(context.documents),
                    "relationships_found": len(context.relationships),
                },
            )

            async for delta in service.stream_context_analysis(context):
                yield _sse("analysis", {"text": delta})

            yield _sse("done", "Analysis complete")
        except Exception as e:
            logger.error(f"Error streaming analysis: {e}")
            error = e.to_dict() if isinstance(e, ContextMemoryError) else {"message": str(e)}
            yield _sse("error", error)

    return StreamingResponse(
        events(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "Connection": "keep-alive"},
    )


@app.get("/v1/memory/search", response_model=SearchResult)
async def search_documents(
    query: str = Query(..., min_length=1),
    limit: int = Query(default=10, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    min_score: float = Query(default=0.5, ge=0.0, le=1.0),
    filter: str | None = Query(default=None, description="JSON object of metadata filters"),
    sort_by: str = Query(default="relevance"),
):
    """
    Search documents by semantic similarity.

    The filter is a JSON object; a document matches when each key exists in
    its metadata with an equal value.
    """
    filters = None
    if filter:
        try:
            filters = json.loads(filter)
        except json.JSONDecodeError as e:
            raise HTTPException(status_code=400, detail=f"Invalid filter JSON: {e}") from e
        if not isinstance(filters, dict):
            raise HTTPException(status_code=400, detail="Filter must be a JSON object")

    service = await _ready_orchestrator()

    try:
        return await service.search(
            query,
            SearchOptions(
                limit=limit,
                offset=offset,
                min_score=min_score,
                filters=filters,
                sort_by=sort_by,
            ),
        )
    except ContextMemoryError as e:
        raise _http_error(e) from e
    except Exception as e:
        logger.error(f"Error searching documents: {e}")
        raise HTTPException(status_code=500, detail=str(e)) from e


@app.get("/v1/memory/documents/{document_id}", response_model=Document)
async def get_document(document_id: str):
    """Retrieve a document by ID."""
    service = await _ready_orchestrator()

    try:
        return await service.get_document(document_id)
    except ContextMemoryError as e:
        raise _http_error(e) from e
    except Exception as e:
        logger.error(f"Error getting document: {e}")
        raise HTTPException(status_code=500, detail=str(e)) from e


@app.delete("/v1/memory/documents/{document_id}")
async def delete_document(document_id: str):
    """Delete a document together with its vectors and relationships."""
    service = await _ready_orchestrator()

    try:
        deleted = await service.delete_document(document_id)
    except ContextMemoryError as e:
        raise _http_error(e) from e
    except Exception as e:
        logger.error(f"Error deleting document: {e}")
        raise HTTPException(status_code=500, detail=str(e)) from e

    if not deleted:
        raise HTTPException(status_code=404, detail=f"Document {document_id} not found")

    return {"document_id": document_id, "deleted": True}


@app.get("/v1/memory/statistics", response_model=MemoryStatistics)
async def get_statistics():
    """Document, vector and relationship counts."""
    service = await _ready_orchestrator()

    try:
        return await service.get_statistics()
    except ContextMemoryError as e:
        raise _http_error(e) from e
    except Exception as e:
        logger.error(f"Error getting statistics: {e}")
        raise HTTPException(status_code=500, detail=str(e)) from e
