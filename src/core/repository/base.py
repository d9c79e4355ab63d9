"""
Base interface for document repositories.

The repository is the source of truth for document existence. Vector and
graph entries are derived from what it holds.
"""

from abc import ABC, abstractmethod

from src.models.document import Document


class DocumentRepository(ABC):
    """Abstract base class for document storage implementations."""

    @abstractmethod
    async def initialize(self) -> None:
        """
        Prepare the backing store (create tables, open connections).

        Raises:
            RepositoryError: If initialization fails
        """
        pass

    @abstractmethod
    async def create(self, document: Document) -> Document:
        """
        Insert a new document.

        Args:
            document: Document to insert

        Returns:
            The stored document

        Raises:
            ProcessingError: If a document with the same ID already exists
        """
        pass

    @abstractmethod
    async def update(self, document: Document) -> Document:
        """
        Replace an existing document.

        Args:
            document: Document with updated fields

        Returns:
            The stored document

        Raises:
            DocumentNotFoundError: If no document has this ID
        """
        pass

    @abstractmethod
    async def save(self, document: Document) -> Document:
        """
        Insert or replace a document (upsert, last write wins).

        Args:
            document: Document to store

        Returns:
            The stored document
        """
        pass

    @abstractmethod
    async def get_by_id(self, document_id: str) -> Document | None:
        """
        Retrieve a document by ID.

        Args:
            document_id: Document identifier

        Returns:
            Document or None if not found
        """
        pass

    @abstractmethod
    async def get_by_ids(self, document_ids: list[str]) -> list[Document]:
        """
        Retrieve several documents, skipping IDs that don't exist.

        Args:
            document_ids: Document identifiers

        Returns:
            Found documents in the order of the requested IDs
        """
        pass

    @abstractmethod
    async def get_all(self, skip: int = 0, take: int = 100) -> list[Document]:
        """
        Page through documents ordered by creation time.

        Args:
            skip: Number of documents to skip
            take: Maximum number of documents to return

        Returns:
            Page of documents
        """
        pass

    @abstractmethod
    async def delete(self, document_id: str) -> bool:
        """
        Delete a document.

        Args:
            document_id: Document identifier

        Returns:
            True if a document was removed
        """
        pass

    @abstractmethod
    async def count(self) -> int:
        """Number of stored documents."""
        pass

    @abstractmethod
    async def exists(self, document_id: str) -> bool:
        """Whether a document with this ID is stored."""
        pass

    @abstractmethod
    async def is_healthy(self) -> bool:
        """Whether the backing store is reachable."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release resources held by the repository."""
        pass
