"""
ID generation utilities.

- Documents: doc_xxx
- Chunks: <document_id>_<index>
"""

from uuid import uuid4


def generate_document_id() -> str:
    """
    Generate unique Document ID.

    Returns:
        ID in format "doc_xxx" where xxx is 12 hex characters
    """
    return f"doc_{uuid4().hex[:12]}"


def generate_chunk_id(document_id: str, chunk_index: int) -> str:
    """
    Generate Chunk ID based on parent document.

    Args:
        document_id: Parent document ID
        chunk_index: Zero-based chunk index

    Returns:
        ID in format "<document_id>_<chunk_index>"
    """
    return f"{document_id}_{chunk_index}"


def generate_point_id() -> str:
    """Random UUID for a vector store point."""
    return str(uuid4())
