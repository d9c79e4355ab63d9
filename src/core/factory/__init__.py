"""
Factory modules for creating Context Memory Store components.

Provides modular factories for the language model, document repository,
graph store and vector store.
"""

from src.core.factory.graph_factory import GraphStoreFactory
from src.core.factory.llm_factory import LanguageModelFactory
from src.core.factory.repository_factory import RepositoryFactory
from src.core.factory.vector_factory import VectorStoreFactory

__all__ = [
    "LanguageModelFactory",
    "RepositoryFactory",
    "GraphStoreFactory",
    "VectorStoreFactory",
]
