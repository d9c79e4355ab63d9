"""
Factory for creating vector store backends.
"""

from urllib.parse import urlparse

from src.config import QdrantConfig
from src.core.llm.base import LanguageModel
from src.core.vector_store.base import VectorStore
from src.core.vector_store.qdrant import QdrantStore


class VectorStoreFactory:
    """Factory for creating vector store backends from configuration."""

    @staticmethod
    def create(
        config: QdrantConfig, language_model: LanguageModel, vector_size: int
    ) -> VectorStore:
        """
        Create vector store from configuration.

        Args:
            config: Qdrant configuration
            language_model: Provider used for embeddings
            vector_size: Embedding dimension size

        Returns:
            Vector store instance
        """
        # Parse URL to extract host, port and scheme
        parsed = urlparse(config.url)
        host = parsed.hostname or "localhost"
        port = parsed.port or 6333

        return QdrantStore(
            language_model=language_model,
            host=host,
            port=port,
            collection_name=config.collection_name,
            vector_size=vector_size,
            distance=config.distance,
            api_key=config.api_key,
            https=parsed.scheme == "https",
            use_grpc=config.use_grpc,
            timeout=config.timeout,
        )
