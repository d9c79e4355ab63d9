"""Document repository implementations."""

from src.core.repository.base import DocumentRepository
from src.core.repository.memory import InMemoryDocumentRepository
from src.core.repository.sqlite import SQLiteDocumentRepository

__all__ = ["DocumentRepository", "InMemoryDocumentRepository", "SQLiteDocumentRepository"]
