"""Memory statistics model."""

from datetime import datetime

from pydantic import BaseModel

# Heuristic per-entity sizes used for the memory usage estimate
DOCUMENT_BYTES = 10_000
VECTOR_BYTES = 3_000
RELATIONSHIP_BYTES = 500


class MemoryStatistics(BaseModel):
    """Point-in-time counts across the three stores."""

    total_documents: int = 0
    total_vectors: int = 0
    total_relationships: int = 0
    memory_usage_bytes: int = 0
    last_updated: datetime

    @staticmethod
    def estimate_bytes(documents: int, vectors: int, relationships: int) -> int:
        """Approximate footprint; not a measured value."""
        return (
            documents * DOCUMENT_BYTES
            + vectors * VECTOR_BYTES
            + relationships * RELATIONSHIP_BYTES
        )
