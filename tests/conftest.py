"""
Shared test fixtures.

In-memory fakes of the store and language model interfaces so the
orchestrator and API can be tested without Qdrant, Neo4j or a model server.
"""

from collections.abc import AsyncIterator

import pytest

from src.config import Config
from src.core.graph_store.base import GraphStore
from src.core.llm.base import RELATIONSHIP_SYSTEM_PROMPT, LanguageModel
from src.core.repository.memory import InMemoryDocumentRepository
from src.core.vector_store.base import VectorStore
from src.models.chat import ChatMessage
from src.models.document import Document
from src.models.relationships import Relationship, RelationshipDirection
from src.models.retrieval import VectorSearchResult
from src.services.memory_orchestrator import MemoryOrchestrator
from src.utils.counters import OperationCounters
from src.utils.exceptions import GraphStoreError, LanguageServiceError, VectorStoreError


class FakeVectorStore(VectorStore):
    """List-backed vector store; search returns the configured hits."""

    def __init__(self):
        self.points: list[dict] = []
        self.search_results: list[VectorSearchResult] = []
        self.search_calls: list[tuple[str, int, float]] = []
        self.failing_documents: set[str] = set()
        self.healthy = True

    async def initialize(self) -> None:
        pass

    async def store_embeddings(self, document_id, text, metadata=None) -> int:
        if document_id in self.failing_documents:
            raise VectorStoreError("Embedding service unavailable", context={"document_id": document_id})
        self.points.append({"document_id": document_id, "content": text, **(metadata or {})})
        return 1

    async def search(self, query, limit=10, min_score=0.0):
        self.search_calls.append((query, limit, min_score))
        return self.search_results[:limit]

    async def delete_embeddings(self, document_id) -> int:
        before = len(self.points)
        self.points = [p for p in self.points if p["document_id"] != document_id]
        return before - len(self.points)

    async def get_vector_count(self) -> int:
        return len(self.points)

    async def is_healthy(self) -> bool:
        return self.healthy

    async def close(self) -> None:
        pass


class FakeGraphStore(GraphStore):
    """List-backed graph store."""

    def __init__(self):
        self.relationships: list[Relationship] = []
        self.fail_writes = False
        self.healthy = True

    async def initialize(self) -> None:
        pass

    async def store_relationship(self, relationship: Relationship) -> None:
        await self.store_relationships([relationship])

    async def store_relationships(self, relationships: list[Relationship]) -> int:
        if self.fail_writes:
            raise GraphStoreError("Graph unavailable")
        self.relationships.extend(relationships)
        return len(relationships)

    async def delete_relationships(self, document_id: str) -> int:
        before = len(self.relationships)
        self.relationships = [r for r in self.relationships if r.document_id != document_id]
        return before - len(self.relationships)

    async def find_relationships(self, entity_name, direction=RelationshipDirection.BOTH):
        matches = []
        for rel in self.relationships:
            outgoing = rel.source == entity_name
            incoming = rel.target == entity_name
            if (
                (direction == RelationshipDirection.OUTGOING and outgoing)
                or (direction == RelationshipDirection.INCOMING and incoming)
                or (direction == RelationshipDirection.BOTH and (outgoing or incoming))
            ):
                matches.append(rel)
        return matches

    async def find_relationships_by_type(self, relationship_type, limit=100):
        return [r for r in self.relationships if r.type == relationship_type][:limit]

    async def get_connected_entities(self, entity_name, max_depth=2):
        return []

    async def get_relationship_count(self) -> int:
        return len(self.relationships)

    async def is_healthy(self) -> bool:
        return self.healthy

    async def close(self) -> None:
        pass


class FakeLanguageModel(LanguageModel):
    """Scripted language model; extraction and summary prompts get separate replies."""

    def __init__(self):
        self.summary_reply = "A short summary."
        self.relationships_reply = "[]"
        self.stream_parts = ["Insight ", "one."]
        self.fail_chat = False
        self.healthy = True
        self.chat_calls: list[list[ChatMessage]] = []
        self.closed = False

    async def generate_embedding(self, text: str) -> list[float]:
        return [0.1, 0.2, 0.3]

    async def generate_chat_completion(self, messages: list[ChatMessage]) -> str:
        self.chat_calls.append(messages)
        if self.fail_chat:
            raise LanguageServiceError("Model offline")
        if messages[0].content == RELATIONSHIP_SYSTEM_PROMPT:
            return self.relationships_reply
        return self.summary_reply

    async def stream_chat_completion(self, messages: list[ChatMessage]) -> AsyncIterator[str]:
        self.chat_calls.append(messages)
        for part in self.stream_parts:
            yield part

    async def list_models(self) -> list[str]:
        return ["llama3:latest", "mxbai-embed-large:latest"]

    async def is_healthy(self) -> bool:
        return self.healthy

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def make_document():
    """Build a document with the given id, content and metadata."""

    def _make(doc_id: str, content: str = "alpha beta gamma delta", **metadata) -> Document:
        return Document(id=doc_id, content=content, metadata=metadata)

    return _make


@pytest.fixture
def make_hit():
    """Build a vector search hit."""

    def _make(document_id: str, score: float) -> VectorSearchResult:
        return VectorSearchResult(document_id=document_id, content="chunk", score=score)

    return _make


@pytest.fixture
def repository():
    return InMemoryDocumentRepository()


@pytest.fixture
def vector_store():
    return FakeVectorStore()


@pytest.fixture
def graph_store():
    return FakeGraphStore()


@pytest.fixture
def language_model():
    return FakeLanguageModel()


@pytest.fixture
def test_config():
    config = Config()
    config.processing.chunk_size = 4
    config.processing.chunk_overlap = 1
    config.processing.max_concurrent_documents = 2
    return config


@pytest.fixture
def counters():
    return OperationCounters()


@pytest.fixture
def orchestrator(repository, vector_store, graph_store, language_model, test_config, counters):
    return MemoryOrchestrator(
        repository=repository,
        vector_store=vector_store,
        graph_store=graph_store,
        language_model=language_model,
        config=test_config,
        counters=counters,
    )
