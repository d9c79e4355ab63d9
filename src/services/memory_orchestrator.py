"""
Memory Orchestrator - composes the repository, vector store, graph store and
language model into document ingestion and retrieval.

Brings together:
- Chunking and concurrent chunk embedding
- Best-effort relationship extraction and summarization
- Bounded-concurrency batch ingestion with per-document isolation
- Context retrieval, search, deletion and statistics
- A readiness gate over all four collaborators

There is no transaction across the stores. The repository write is the
durability anchor; vector and graph entries are derived from it and are
repaired by re-ingesting the same document id.
"""

import asyncio
import time
from collections.abc import AsyncIterator, Awaitable
from datetime import UTC, datetime
from typing import Any

from src.config import Config
from src.core.chunking.chunker import split_into_chunks
from src.core.graph_store.base import GraphStore
from src.core.llm.base import LanguageModel
from src.core.repository.base import DocumentRepository
from src.core.vector_store.base import VectorStore
from src.models.chat import ChatMessage
from src.models.document import Document
from src.models.ingestion import (
    BatchIngestionResult,
    IngestionOptions,
    IngestionResult,
    ProcessingStatus,
)
from src.models.relationships import Relationship, RelationshipDirection
from src.models.retrieval import (
    SUMMARY_FALLBACK,
    ContextOptions,
    ContextResponse,
    SearchOptions,
    SearchResult,
)
from src.models.statistics import MemoryStatistics
from src.utils.counters import OperationCounters
from src.utils.exceptions import (
    DocumentNotFoundError,
    ProcessingError,
    ServiceUnavailableError,
    ValidationError,
)
from src.utils.id_generator import generate_chunk_id
from src.utils.logger import get_logger

logger = get_logger(__name__)

ANALYSIS_SYSTEM_PROMPT = (
    "You are an expert context analyst. Provide streaming insights as you analyze "
    "the given context. Break your analysis into digestible chunks."
)


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000


async def _join_all(*operations: Awaitable[Any]) -> list[Any]:
    """Await every operation, then raise the first failure if any failed."""
    results = await asyncio.gather(*operations, return_exceptions=True)
    for result in results:
        if isinstance(result, BaseException):
            raise result
    return results


class MemoryOrchestrator:
    """
    Orchestrates document memory across independent stores.

    Features:
    - Ingest documents (repository, then chunk vectors, then optional enrichment)
    - Batch ingest under a concurrency bound
    - Context retrieval with relationships and a combined summary
    - Paginated, filtered search
    - Delete, statistics and readiness checks
    """

    def __init__(
        self,
        repository: DocumentRepository,
        vector_store: VectorStore,
        graph_store: GraphStore,
        language_model: LanguageModel,
        config: Config | None = None,
        counters: OperationCounters | None = None,
    ):
        """
        Initialize Memory Orchestrator.

        Args:
            repository: Source of truth for documents
            vector_store: Chunk embedding store (Qdrant)
            graph_store: Relationship store (Neo4j)
            language_model: Provider for summaries and relationship extraction
            config: Configuration object
            counters: Operation counters to report into
        """
        self.repository = repository
        self.vector_store = vector_store
        self.graph_store = graph_store
        self.language_model = language_model
        self.config = config or Config()
        self.counters = counters or OperationCounters()

    async def initialize(self) -> None:
        """Initialize all stores."""
        logger.info("Initializing Memory Orchestrator")

        await self.repository.initialize()
        logger.info("Document repository initialized")

        await self.graph_store.initialize()
        logger.info("Graph store initialized")

        await self.vector_store.initialize()
        logger.info("Vector store initialized")

        logger.info("Memory Orchestrator ready")

    # ═══════════════════════════════════════════════════════════
    # INGESTION
    # ═══════════════════════════════════════════════════════════

    def _chunk_parameters(self, options: IngestionOptions) -> tuple[int, int]:
        """
        Resolve chunk size and overlap from options and configuration.

        A configured default overlap that would not fit an overridden chunk
        size is scaled to a fifth of the chunk size.
        """
        processing = self.config.processing
        chunk_size = options.chunk_size or processing.chunk_size

        if options.chunk_overlap is not None:
            return chunk_size, options.chunk_overlap

        overlap = processing.chunk_overlap
        if overlap >= chunk_size:
            overlap = chunk_size // 5
        return chunk_size, overlap

    def _chunk_metadata(self, document: Document, index: int, created_at: str) -> dict[str, Any]:
        metadata: dict[str, Any] = {
            "chunk_index": index,
            "chunk_id": generate_chunk_id(document.id, index),
            "source": document.source.path or document.source.type,
            "created_at": created_at,
        }
        for key, value in document.metadata.items():
            metadata[f"doc_{key}"] = value
        return metadata

    async def _store_chunks(self, document: Document, chunks: list[str]) -> int:
        """Store every chunk concurrently; once all finish, the first failure propagates."""
        created_at = document.created_at.isoformat()

        await _join_all(
            *(
                self.vector_store.store_embeddings(
                    document.id, chunk, self._chunk_metadata(document, index, created_at)
                )
                for index, chunk in enumerate(chunks)
            )
        )
        return len(chunks)

    async def _extract_relationships(self, document: Document) -> int:
        """Extract and store relationships; failures are logged and yield 0."""
        try:
            extractions = await self.language_model.extract_relationships(document.content)
            if not extractions:
                return 0

            extracted_at = datetime.now(UTC)
            relationships = [
                extraction.to_relationship(document.id, extracted_at)
                for extraction in extractions
            ]
            stored = await self.graph_store.store_relationships(relationships)
            self.counters.increment("relationships_stored", stored)
            return stored
        except Exception as e:
            self.counters.increment("enrichment_failures")
            logger.warning(
                f"Relationship extraction failed for document {document.id}: {e}",
                extra={"document_id": document.id, "error_type": type(e).__name__},
            )
            return 0

    async def _summarize(self, document: Document) -> str | None:
        """Summarize the document; failures are logged and yield None."""
        try:
            return await self.language_model.generate_summary(
                document.content, self.config.processing.summary_max_length
            )
        except Exception as e:
            self.counters.increment("enrichment_failures")
            logger.warning(
                f"Summary generation failed for document {document.id}: {e}",
                extra={"document_id": document.id, "error_type": type(e).__name__},
            )
            return None

    async def ingest_document(
        self, document: Document, options: IngestionOptions | None = None
    ) -> IngestionResult:
        """
        Ingest a single document.

        Saves the document, stores every chunk embedding concurrently, then
        runs relationship extraction and summarization when requested and
        enabled. Enrichment failures are logged and leave the result without
        relationships or summary.

        Args:
            document: Document to ingest
            options: Ingestion options (defaults if omitted)

        Returns:
            Completed ingestion result

        Raises:
            ValidationError: If chunk parameters are invalid
            ProcessingError: If saving the document or storing a chunk fails;
                chunks already stored are left in place
        """
        options = options or IngestionOptions()
        start = time.perf_counter()

        chunk_size, overlap = self._chunk_parameters(options)
        try:
            chunks = split_into_chunks(document.content, chunk_size, overlap)
        except ValueError as e:
            raise ValidationError(str(e), context={"document_id": document.id}) from e

        logger.info(
            f"Ingesting document {document.id}",
            extra={
                "document_id": document.id,
                "content_length": len(document.content),
                "chunks": len(chunks),
            },
        )

        try:
            await self.repository.save(document)
            chunks_created = await self._store_chunks(document, chunks)
        except Exception as e:
            self.counters.increment("documents_failed")
            logger.error(
                f"Failed to ingest document {document.id}: {e}",
                extra={
                    "document_id": document.id,
                    "error": str(e),
                    "error_type": type(e).__name__,
                },
            )
            raise ProcessingError(
                document.id,
                f"Failed to ingest document '{document.id}': {e}",
                context={"error_type": type(e).__name__},
            ) from e

        self.counters.increment("chunks_stored", chunks_created)

        features = self.config.features
        relationships_extracted = 0
        if options.extract_relationships and features.relationship_extraction:
            relationships_extracted = await self._extract_relationships(document)

        summary = None
        if options.auto_summarize and features.contextual_summarization:
            summary = await self._summarize(document)

        self.counters.increment("documents_ingested")
        result = IngestionResult(
            document_id=document.id,
            status=ProcessingStatus.COMPLETED,
            chunks_created=chunks_created,
            relationships_extracted=relationships_extracted,
            summary=summary,
            processing_time_ms=_elapsed_ms(start),
        )

        logger.info(
            f"Document ingested: {document.id}",
            extra={
                "document_id": document.id,
                "chunks": chunks_created,
                "relationships": relationships_extracted,
                "processing_time_ms": result.processing_time_ms,
            },
        )
        return result

    async def ingest_documents(
        self, documents: list[Document], options: IngestionOptions | None = None
    ) -> BatchIngestionResult:
        """
        Ingest several documents with bounded concurrency.

        At most processing.max_concurrent_documents ingests run at once.
        A failing document becomes a failed result; it never raises or
        affects the other documents.

        Args:
            documents: Documents to ingest
            options: Ingestion options shared by all documents

        Returns:
            Per-document results and aggregate counts
        """
        start = time.perf_counter()
        semaphore = asyncio.Semaphore(max(1, self.config.processing.max_concurrent_documents))

        logger.info(
            f"Ingesting batch of {len(documents)} documents",
            extra={
                "documents": len(documents),
                "max_concurrent": self.config.processing.max_concurrent_documents,
            },
        )

        async def _ingest_isolated(document: Document) -> IngestionResult:
            async with semaphore:
                doc_start = time.perf_counter()
                try:
                    return await self.ingest_document(document, options)
                except Exception as e:
                    return IngestionResult(
                        document_id=document.id,
                        status=ProcessingStatus.FAILED,
                        error=str(e),
                        processing_time_ms=_elapsed_ms(doc_start),
                    )

        results = await asyncio.gather(*(_ingest_isolated(d) for d in documents))

        successful = sum(1 for r in results if r.succeeded)
        batch = BatchIngestionResult(
            results=list(results),
            total_documents=len(results),
            successful_documents=successful,
            failed_documents=len(results) - successful,
            total_processing_time_ms=_elapsed_ms(start),
        )

        logger.info(
            f"Batch ingested: {successful}/{len(results)} documents",
            extra={
                "successful": batch.successful_documents,
                "failed": batch.failed_documents,
                "processing_time_ms": batch.total_processing_time_ms,
            },
        )
        return batch

    # ═══════════════════════════════════════════════════════════
    # RETRIEVAL
    # ═══════════════════════════════════════════════════════════

    async def _matching_document_ids(self, query: str, limit: int, min_score: float) -> list[str]:
        """Distinct document ids of vector hits, in the store's ranking order."""
        hits = await self.vector_store.search(query, limit, min_score)
        return list(dict.fromkeys(hit.document_id for hit in hits if hit.score >= min_score))

    async def _resolve_documents(self, document_ids: list[str]) -> list[Document]:
        """Fetch documents by id, keeping order and skipping ids the repository lacks."""
        found = await asyncio.gather(
            *(self.repository.get_by_id(document_id) for document_id in document_ids)
        )
        missing = [i for i, doc in zip(document_ids, found, strict=True) if doc is None]
        if missing:
            logger.debug(
                f"Skipping {len(missing)} indexed documents missing from repository",
                extra={"document_ids": missing},
            )
        return [doc for doc in found if doc is not None]

    async def _document_relationships(self, documents: list[Document]) -> list[Relationship]:
        per_document = await asyncio.gather(
            *(
                self.graph_store.find_relationships(document.id, RelationshipDirection.BOTH)
                for document in documents
            )
        )
        return [relationship for group in per_document for relationship in group]

    async def get_context(
        self, query: str, options: ContextOptions | None = None
    ) -> ContextResponse:
        """
        Retrieve context relevant to a query.

        Missing documents are skipped. When the combined summary cannot be
        generated the summary is SUMMARY_FALLBACK instead of an error.

        Args:
            query: Query text
            options: Context options (defaults if omitted)

        Returns:
            Documents, relationships and optional summary
        """
        options = options or ContextOptions()
        start = time.perf_counter()
        self.counters.increment("context_requests")

        logger.info(
            f"Retrieving context: {query[:50]}",
            extra={"max_documents": options.max_documents, "min_score": options.min_score},
        )

        document_ids = await self._matching_document_ids(
            query, options.max_documents, options.min_score
        )
        documents = await self._resolve_documents(document_ids)

        relationships: list[Relationship] = []
        if options.include_relationships and self.config.features.relationship_extraction:
            relationships = await self._document_relationships(documents)

        summary = None
        if (
            options.generate_summary
            and self.config.features.contextual_summarization
            and documents
        ):
            combined = "\n\n".join(document.content for document in documents)
            try:
                summary = await self.language_model.generate_summary(
                    combined, self.config.processing.context_summary_max_length
                )
            except Exception as e:
                self.counters.increment("enrichment_failures")
                logger.warning(
                    f"Context summary generation failed: {e}",
                    extra={"documents": len(documents), "error_type": type(e).__name__},
                )
                summary = SUMMARY_FALLBACK

        return ContextResponse(
            query=query,
            documents=documents,
            relationships=relationships,
            summary=summary,
            total_results=len(documents),
            processing_time_ms=_elapsed_ms(start),
        )

    async def stream_context_analysis(self, context: ContextResponse) -> AsyncIterator[str]:
        """
        Stream a language model analysis of retrieved context.

        Args:
            context: Result of get_context

        Yields:
            Analysis text deltas; nothing when the context has no documents
        """
        if not context.documents:
            return

        documents_text = "\n\n".join(
            f"Document: {document.title or document.id}\nContent: {document.content}"
            for document in context.documents
        )
        relationships_text = ""
        if context.relationships:
            relationships_text = "\n\nRelationships:\n" + "\n".join(
                f"- {r.source} {r.type} {r.target}" for r in context.relationships
            )

        prompt = (
            f"Analyze the following context to answer the query: '{context.query}'\n\n"
            f"Context:\n{documents_text}{relationships_text}\n\n"
            "Provide insights, connections, and a comprehensive analysis:"
        )
        messages = [ChatMessage.system(ANALYSIS_SYSTEM_PROMPT), ChatMessage.user(prompt)]

        async for delta in self.language_model.stream_chat_completion(messages):
            if delta:
                yield delta

    async def search(self, query: str, options: SearchOptions | None = None) -> SearchResult:
        """
        Search documents by semantic similarity.

        The offset applies to the de-duplicated document ids. Filters match
        when every key exists in the document metadata with an equal value.
        sort_by is accepted and ignored; results keep vector store order.

        Args:
            query: Query text
            options: Search options (defaults if omitted)

        Returns:
            Matching documents
        """
        options = options or SearchOptions()
        start = time.perf_counter()
        self.counters.increment("searches")

        document_ids = await self._matching_document_ids(query, options.limit, options.min_score)
        page = document_ids[options.offset : options.offset + options.limit]
        documents = await self._resolve_documents(page)

        if options.filters:
            documents = [d for d in documents if self._matches_filters(d, options.filters)]

        return SearchResult(
            query=query,
            documents=documents,
            total_results=len(documents),
            processing_time_ms=_elapsed_ms(start),
        )

    @staticmethod
    def _matches_filters(document: Document, filters: dict[str, Any]) -> bool:
        return all(
            key in document.metadata and document.metadata[key] == value
            for key, value in filters.items()
        )

    async def get_document(self, document_id: str) -> Document:
        """
        Get a document from the repository.

        Raises:
            DocumentNotFoundError: If the document doesn't exist
        """
        document = await self.repository.get_by_id(document_id)
        if document is None:
            raise DocumentNotFoundError(document_id)
        return document

    # ═══════════════════════════════════════════════════════════
    # DELETION & STATISTICS
    # ═══════════════════════════════════════════════════════════

    async def delete_document(self, document_id: str) -> bool:
        """
        Delete a document with its vectors and relationships.

        The three deletes run concurrently and are all awaited. A failure in
        any of them is then raised; deletes that succeeded are not undone.

        Args:
            document_id: Document identifier

        Returns:
            False if the document doesn't exist, True once deleted

        Raises:
            ProcessingError: If any of the deletes fails
        """
        document = await self.repository.get_by_id(document_id)
        if document is None:
            logger.warning(
                f"Document {document_id} not found for deletion",
                extra={"document_id": document_id},
            )
            return False

        try:
            vectors, relationships, _ = await _join_all(
                self.vector_store.delete_embeddings(document_id),
                self.graph_store.delete_relationships(document_id),
                self.repository.delete(document_id),
            )
        except Exception as e:
            logger.error(
                f"Failed to delete document {document_id}: {e}",
                extra={"document_id": document_id, "error_type": type(e).__name__},
            )
            raise ProcessingError(
                document_id,
                f"Failed to delete document '{document_id}': {e}",
                context={"error_type": type(e).__name__},
            ) from e

        self.counters.increment("documents_deleted")
        logger.info(
            f"Document deleted: {document_id}",
            extra={"document_id": document_id, "vectors": vectors, "relationships": relationships},
        )
        return True

    async def get_statistics(self) -> MemoryStatistics:
        """
        Count documents, vectors and relationships.

        The counts are queried concurrently and are not a consistent snapshot.

        Returns:
            Counts and an estimated memory footprint
        """
        documents, vectors, relationships = await asyncio.gather(
            self.repository.count(),
            self.vector_store.get_vector_count(),
            self.graph_store.get_relationship_count(),
        )

        return MemoryStatistics(
            total_documents=documents,
            total_vectors=vectors,
            total_relationships=relationships,
            memory_usage_bytes=MemoryStatistics.estimate_bytes(documents, vectors, relationships),
            last_updated=datetime.now(UTC),
        )

    # ═══════════════════════════════════════════════════════════
    # READINESS
    # ═══════════════════════════════════════════════════════════

    async def is_healthy(self) -> bool:
        """
        True only if repository, vector store, graph store and language
        model all report healthy. A probe that raises counts as unhealthy.
        """
        names = ("repository", "vector_store", "graph_store", "language_model")
        probes = await asyncio.gather(
            self.repository.is_healthy(),
            self.vector_store.is_healthy(),
            self.graph_store.is_healthy(),
            self.language_model.is_healthy(),
            return_exceptions=True,
        )

        unhealthy = [name for name, ok in zip(names, probes, strict=True) if ok is not True]
        if unhealthy:
            logger.warning(
                f"Unhealthy components: {', '.join(unhealthy)}",
                extra={"unhealthy": unhealthy},
            )
            return False
        return True

    async def ensure_ready(self) -> None:
        """
        Readiness gate run before orchestrator operations.

        Raises:
            ServiceUnavailableError: If any collaborator is unhealthy
        """
        if not await self.is_healthy():
            raise ServiceUnavailableError("Memory services are not ready")

    # LIFECYCLE MANAGEMENT

    async def close(self) -> None:
        """Close all connections."""
        logger.info("Shutting down Memory Orchestrator")

        await self.vector_store.close()
        await self.graph_store.close()
        await self.repository.close()
        await self.language_model.close()

        logger.info("Memory Orchestrator closed")
