"""
Services for the context memory system.

- MemoryOrchestrator: document ingestion and retrieval across the
  repository, vector store, graph store and language model
"""

from src.services.memory_orchestrator import MemoryOrchestrator

__all__ = ["MemoryOrchestrator"]
