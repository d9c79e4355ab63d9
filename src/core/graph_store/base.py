"""
Base interface for graph storage.

Graph stores hold typed relationships between named entities. Each
relationship records the document it was extracted from so all of a
document's relationships can be removed with it.
"""

from abc import ABC, abstractmethod

from src.models.relationships import Relationship, RelationshipDirection


class GraphStore(ABC):
    """Abstract base class for graph storage implementations."""

    @abstractmethod
    async def initialize(self) -> None:
        """Initialize the graph store (create indexes/constraints)."""
        pass

    # ═══════════════════════════════════════════════════════════
    # WRITE OPERATIONS
    # ═══════════════════════════════════════════════════════════

    @abstractmethod
    async def store_relationship(self, relationship: Relationship) -> None:
        """
        Store one relationship, creating its entities as needed.

        A relationship is unique by (source, target, type); storing it again
        overwrites confidence, document and metadata.

        Args:
            relationship: Relationship to store

        Raises:
            ValidationError: If source, target or type is empty
            GraphStoreError: If the write fails
        """
        pass

    @abstractmethod
    async def store_relationships(self, relationships: list[Relationship]) -> int:
        """
        Store several relationships.

        Args:
            relationships: Relationships to store

        Returns:
            Number of relationships stored

        Raises:
            GraphStoreError: If the write fails
        """
        pass

    @abstractmethod
    async def delete_relationships(self, document_id: str) -> int:
        """
        Delete every relationship attributed to a document.

        Args:
            document_id: Owning document

        Returns:
            Number of relationships deleted

        Raises:
            GraphStoreError: If the delete fails
        """
        pass

    # ═══════════════════════════════════════════════════════════
    # QUERY OPERATIONS
    # ═══════════════════════════════════════════════════════════

    @abstractmethod
    async def find_relationships(
        self,
        entity_name: str,
        direction: RelationshipDirection = RelationshipDirection.BOTH,
    ) -> list[Relationship]:
        """
        Find relationships touching an entity.

        Args:
            entity_name: Entity name
            direction: Outgoing, incoming or both

        Returns:
            Matching relationships
        """
        pass

    @abstractmethod
    async def find_relationships_by_type(
        self, relationship_type: str, limit: int = 100
    ) -> list[Relationship]:
        """
        Find relationships of one type.

        Args:
            relationship_type: Relationship type
            limit: Maximum results

        Returns:
            Matching relationships
        """
        pass

    @abstractmethod
    async def get_connected_entities(self, entity_name: str, max_depth: int = 2) -> list[str]:
        """
        Names of entities reachable from an entity, ignoring edge direction.

        Args:
            entity_name: Start entity
            max_depth: Maximum hops

        Returns:
            Distinct entity names, excluding the start entity
        """
        pass

    @abstractmethod
    async def get_relationship_count(self) -> int:
        """Number of stored relationships."""
        pass

    @abstractmethod
    async def is_healthy(self) -> bool:
        """Whether the store is reachable; never raises."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close connection to graph store."""
        pass
