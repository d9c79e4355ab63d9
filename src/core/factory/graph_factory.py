"""
Factory for creating graph store backends.
"""

from src.config import Neo4jConfig
from src.core.graph_store.base import GraphStore
from src.core.graph_store.neo4j_store import Neo4jGraphStore


class GraphStoreFactory:
    """Factory for creating graph store backends from configuration."""

    @staticmethod
    def create(config: Neo4jConfig) -> GraphStore:
        """
        Create graph store from configuration.

        Args:
            config: Neo4j configuration

        Returns:
            Graph store instance
        """
        return Neo4jGraphStore(
            uri=config.uri,
            username=config.username,
            password=config.password,
            database=config.database,
        )
