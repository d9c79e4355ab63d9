"""
Chunking module.

Splits document content into overlapping word windows for embedding.
"""

from src.core.chunking.chunker import build_chunks, split_into_chunks

__all__ = ["split_into_chunks", "build_chunks"]
