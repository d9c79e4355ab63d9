"""
Factory for creating document repositories.
"""

from src.config import RepositoryConfig
from src.core.repository.base import DocumentRepository
from src.core.repository.memory import InMemoryDocumentRepository
from src.core.repository.sqlite import SQLiteDocumentRepository


class RepositoryFactory:
    """Factory for creating document repositories from configuration."""

    @staticmethod
    def create(config: RepositoryConfig) -> DocumentRepository:
        """
        Create document repository from configuration.

        Args:
            config: Repository configuration

        Returns:
            Document repository instance

        Raises:
            ValueError: If backend is not supported
        """
        if config.backend == "memory":
            return InMemoryDocumentRepository()
        elif config.backend == "sqlite":
            return SQLiteDocumentRepository(db_path=config.sqlite_path)
        else:
            raise ValueError(f"Unsupported repository backend: {config.backend}")
