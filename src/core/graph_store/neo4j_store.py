"""
Neo4j graph store implementation.

Entities are (:Entity {name}) nodes and relationships are [:RELATED] edges
carrying type, confidence, document_id, created_at and JSON-encoded metadata.
"""

import json
from datetime import datetime
from typing import Any

from neo4j import AsyncDriver, AsyncGraphDatabase

from src.core.graph_store.base import GraphStore
from src.models.relationships import Relationship, RelationshipDirection
from src.utils.exceptions import GraphStoreError, ValidationError
from src.utils.logger import get_logger

logger = get_logger(__name__)

_RETURN_RELATIONSHIP = """
RETURN source.name AS source, target.name AS target, r.type AS type,
       r.confidence AS confidence, r.document_id AS document_id,
       r.metadata AS metadata, r.created_at AS created_at
"""

_FIND_QUERIES = {
    RelationshipDirection.OUTGOING: (
        "MATCH (source:Entity {name: $name})-[r:RELATED]->(target:Entity)"
        + _RETURN_RELATIONSHIP
    ),
    RelationshipDirection.INCOMING: (
        "MATCH (source:Entity)-[r:RELATED]->(target:Entity {name: $name})"
        + _RETURN_RELATIONSHIP
    ),
    RelationshipDirection.BOTH: (
        "MATCH (source:Entity)-[r:RELATED]->(target:Entity) "
        "WHERE source.name = $name OR target.name = $name" + _RETURN_RELATIONSHIP
    ),
}


class Neo4jGraphStore(GraphStore):
    """
    Neo4j-based graph store for entity relationships.

    Features:
    - MERGE-based idempotent writes
    - Direction-aware relationship lookup
    - Variable-length traversal for connected entities
    """

    def __init__(
        self,
        uri: str = "bolt://localhost:7687",
        username: str = "neo4j",
        password: str = "contextmemory",
        database: str = "neo4j",
    ):
        """
        Initialize Neo4j graph store.

        Args:
            uri: Neo4j connection URI
            username: Username
            password: Password
            database: Database name
        """
        self.uri = uri
        self.username = username
        self.password = password
        self.database = database
        self.driver: AsyncDriver | None = None

    async def connect(self) -> None:
        """
        Establish connection to Neo4j.

        Raises:
            GraphStoreError: If connection fails
        """
        if self.driver is None:
            try:
                self.driver = AsyncGraphDatabase.driver(
                    self.uri,
                    auth=(self.username, self.password),
                )
            except Exception as e:
                logger.error(
                    f"Failed to connect to Neo4j: {e}",
                    extra={"uri": self.uri, "error": str(e)},
                )
                raise GraphStoreError(f"Failed to connect to Neo4j: {e}") from e

    async def initialize(self) -> None:
        """
        Create indexes and constraints.

        Raises:
            GraphStoreError: If initialization fails
        """
        try:
            await self.connect()

            async with self.driver.session(database=self.database) as session:
                await session.run(
                    "CREATE CONSTRAINT entity_name IF NOT EXISTS "
                    "FOR (e:Entity) REQUIRE e.name IS UNIQUE"
                )
                await session.run(
                    "CREATE INDEX related_document IF NOT EXISTS "
                    "FOR ()-[r:RELATED]-() ON (r.document_id)"
                )
                await session.run(
                    "CREATE INDEX related_type IF NOT EXISTS "
                    "FOR ()-[r:RELATED]-() ON (r.type)"
                )
        except Exception as e:
            logger.error(
                f"Failed to initialize Neo4j: {e}",
                extra={"database": self.database, "error": str(e)},
            )
            raise GraphStoreError(f"Failed to initialize Neo4j: {e}") from e

    # ═══════════════════════════════════════════════════════════
    # WRITE OPERATIONS
    # ═══════════════════════════════════════════════════════════

    def _relationship_params(self, relationship: Relationship) -> dict[str, Any]:
        if not relationship.source or not relationship.target or not relationship.type:
            raise ValidationError("Relationship source, target and type are required")

        return {
            "source": relationship.source,
            "target": relationship.target,
            "type": relationship.type,
            "confidence": relationship.confidence,
            "document_id": relationship.document_id,
            "created_at": relationship.created_at.isoformat(),
            "metadata": json.dumps(relationship.metadata, default=str),
        }

    async def store_relationship(self, relationship: Relationship) -> None:
        await self.store_relationships([relationship])

    async def store_relationships(self, relationships: list[Relationship]) -> int:
        if not relationships:
            return 0

        rows = [self._relationship_params(rel) for rel in relationships]

        try:
            await self.connect()

            async with self.driver.session(database=self.database) as session:
                result = await session.run(
                    """
                    UNWIND $rows AS row
                    MERGE (source:Entity {name: row.source})
                    MERGE (target:Entity {name: row.target})
                    MERGE (source)-[r:RELATED {type: row.type}]->(target)
                    SET r.confidence = row.confidence,
                        r.document_id = row.document_id,
                        r.created_at = row.created_at,
                        r.metadata = row.metadata
                    RETURN count(r) AS stored
                    """,
                    {"rows": rows},
                )
                record = await result.single()
                stored = record["stored"] if record else 0

            logger.info(f"Stored {stored} relationships", extra={"count": stored})
            return stored
        except ValidationError:
            raise
        except Exception as e:
            logger.error(
                f"Failed to store relationships: {e}",
                extra={"count": len(relationships), "error": str(e)},
            )
            raise GraphStoreError(f"Failed to store relationships: {e}") from e

    async def delete_relationships(self, document_id: str) -> int:
        if not document_id or not document_id.strip():
            raise ValidationError("Document ID cannot be empty")

        try:
            await self.connect()

            async with self.driver.session(database=self.database) as session:
                result = await session.run(
                    "MATCH ()-[r:RELATED {document_id: $document_id}]->() "
                    "DELETE r RETURN count(r) AS deleted",
                    {"document_id": document_id},
                )
                record = await result.single()
                deleted = record["deleted"] if record else 0

            logger.info(
                f"Deleted {deleted} relationships for document {document_id}",
                extra={"document_id": document_id},
            )
            return deleted
        except ValidationError:
            raise
        except Exception as e:
            logger.error(
                f"Failed to delete relationships for document {document_id}: {e}",
                extra={"document_id": document_id, "error": str(e)},
            )
            raise GraphStoreError(
                f"Failed to delete relationships: {e}", context={"document_id": document_id}
            ) from e

    # ═══════════════════════════════════════════════════════════
    # QUERY OPERATIONS
    # ═══════════════════════════════════════════════════════════

    async def _fetch_relationships(self, query: str, params: dict[str, Any]) -> list[Relationship]:
        await self.connect()

        async with self.driver.session(database=self.database) as session:
            result = await session.run(query, params)
            records = await result.data()

        return [self._record_to_relationship(record) for record in records]

    async def find_relationships(
        self,
        entity_name: str,
        direction: RelationshipDirection = RelationshipDirection.BOTH,
    ) -> list[Relationship]:
        try:
            return await self._fetch_relationships(
                _FIND_QUERIES[RelationshipDirection(direction)], {"name": entity_name}
            )
        except Exception as e:
            logger.error(
                f"Failed to find relationships for entity {entity_name}: {e}",
                extra={"entity": entity_name, "direction": str(direction), "error": str(e)},
            )
            raise GraphStoreError(
                f"Failed to find relationships for entity '{entity_name}': {e}"
            ) from e

    async def find_relationships_by_type(
        self, relationship_type: str, limit: int = 100
    ) -> list[Relationship]:
        try:
            return await self._fetch_relationships(
                "MATCH (source:Entity)-[r:RELATED {type: $type}]->(target:Entity)"
                + _RETURN_RELATIONSHIP
                + " LIMIT $limit",
                {"type": relationship_type, "limit": limit},
            )
        except Exception as e:
            logger.error(
                f"Failed to find relationships of type {relationship_type}: {e}",
                extra={"type": relationship_type, "error": str(e)},
            )
            raise GraphStoreError(f"Failed to find relationships by type: {e}") from e

    async def get_connected_entities(self, entity_name: str, max_depth: int = 2) -> list[str]:
        if max_depth < 1:
            raise ValidationError("max_depth must be at least 1")

        # Variable-length bounds cannot be query parameters
        query = (
            f"MATCH (start:Entity {{name: $name}})-[:RELATED*1..{int(max_depth)}]-(other:Entity) "
            "WHERE other.name <> $name "
            "RETURN DISTINCT other.name AS name"
        )

        try:
            await self.connect()

            async with self.driver.session(database=self.database) as session:
                result = await session.run(query, {"name": entity_name})
                records = await result.data()

            return [record["name"] for record in records]
        except Exception as e:
            logger.error(
                f"Failed to traverse from entity {entity_name}: {e}",
                extra={"entity": entity_name, "max_depth": max_depth, "error": str(e)},
            )
            raise GraphStoreError(f"Failed to traverse graph: {e}") from e

    async def get_relationship_count(self) -> int:
        try:
            await self.connect()

            async with self.driver.session(database=self.database) as session:
                result = await session.run("MATCH ()-[r:RELATED]->() RETURN count(r) AS count")
                record = await result.single()

            return record["count"] if record else 0
        except Exception as e:
            logger.error(f"Failed to count relationships: {e}", extra={"error": str(e)})
            raise GraphStoreError(f"Failed to count relationships: {e}") from e

    async def is_healthy(self) -> bool:
        try:
            await self.connect()

            async with self.driver.session(database=self.database) as session:
                result = await session.run("RETURN 1 AS ok")
                record = await result.single()

            return bool(record and record["ok"] == 1)
        except Exception as e:
            logger.warning(f"Neo4j health check failed: {e}", extra={"uri": self.uri})
            return False

    async def close(self) -> None:
        """Close the Neo4j driver."""
        if self.driver is not None:
            await self.driver.close()
            self.driver = None

    # ═══════════════════════════════════════════════════════════
    # HELPER METHODS
    # ═══════════════════════════════════════════════════════════

    def _record_to_relationship(self, record: dict[str, Any]) -> Relationship:
        """Convert a query record to a Relationship."""
        metadata = record.get("metadata")
        created_at = record.get("created_at")

        fields: dict[str, Any] = {
            "source": record["source"],
            "target": record["target"],
            "type": record["type"],
            "confidence": record.get("confidence") if record.get("confidence") is not None else 1.0,
            "document_id": record.get("document_id") or "",
            "metadata": json.loads(metadata) if metadata else {},
        }
        if created_at:
            fields["created_at"] = datetime.fromisoformat(created_at)

        return Relationship(**fields)
