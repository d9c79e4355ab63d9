"""
Base interface for vector storage.

Vector stores hold chunk embeddings keyed by their parent document. They
embed text themselves through a language model, so callers pass plain text.
"""

from abc import ABC, abstractmethod
from typing import Any

from src.models.retrieval import VectorSearchResult


class VectorStore(ABC):
    """Abstract base class for vector storage implementations."""

    @abstractmethod
    async def initialize(self) -> None:
        """
        Initialize the vector store (create collections/indices).

        Raises:
            VectorStoreError: If initialization fails
        """
        pass

    @abstractmethod
    async def store_embeddings(
        self, document_id: str, text: str, metadata: dict[str, Any] | None = None
    ) -> int:
        """
        Embed text and store it for a document.

        Args:
            document_id: Owning document
            text: Text to embed (usually one chunk)
            metadata: Extra payload stored with the vector

        Returns:
            Number of vectors stored

        Raises:
            ValidationError: If document_id or text is empty
            VectorStoreError: If embedding or storage fails
        """
        pass

    @abstractmethod
    async def search(
        self, query: str, limit: int = 10, min_score: float = 0.0
    ) -> list[VectorSearchResult]:
        """
        Similarity search for a text query.

        Args:
            query: Query text
            limit: Maximum results
            min_score: Minimum similarity score

        Returns:
            Hits ranked by the store, best first

        Raises:
            VectorStoreError: If search fails
        """
        pass

    @abstractmethod
    async def delete_embeddings(self, document_id: str) -> int:
        """
        Delete every vector belonging to a document.

        Args:
            document_id: Owning document

        Returns:
            Number of vectors deleted

        Raises:
            VectorStoreError: If deletion fails
        """
        pass

    @abstractmethod
    async def get_vector_count(self) -> int:
        """
        Count stored vectors.

        Returns:
            Number of vectors
        """
        pass

    @abstractmethod
    async def is_healthy(self) -> bool:
        """Whether the store is reachable; never raises."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close the connection to the vector store."""
        pass
