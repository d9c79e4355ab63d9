"""
Graph store implementations.

Provides abstract base and concrete implementations for graph storage.

Available backends:
- Neo4jGraphStore: Entity/relationship graph in Neo4j
"""

from src.core.graph_store.base import GraphStore
from src.core.graph_store.neo4j_store import Neo4jGraphStore

__all__ = [
    "GraphStore",
    "Neo4jGraphStore",
]
