"""
Word-window chunking.

Content is split on whitespace. Windows of ``chunk_size`` words start every
``chunk_size - overlap`` words, so consecutive chunks share ``overlap`` words.
The last window may be shorter than ``chunk_size``.
"""

from src.models.document import Chunk


def split_into_chunks(content: str, chunk_size: int, overlap: int) -> list[str]:
    """
    Split content into overlapping word-bounded chunks.

    Args:
        content: Text to split
        chunk_size: Words per chunk
        overlap: Words shared between consecutive chunks

    Returns:
        Ordered chunk strings; empty list for empty content

    Raises:
        ValueError: If chunk_size <= 0 or overlap is not in [0, chunk_size)
    """
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")
    if overlap < 0 or overlap >= chunk_size:
        raise ValueError(f"overlap must be in [0, {chunk_size}), got {overlap}")

    words = content.split()
    step = chunk_size - overlap

    chunks = []
    for start in range(0, len(words), step):
        chunk = " ".join(words[start : start + chunk_size])
        if chunk.strip():
            chunks.append(chunk)

    return chunks


def build_chunks(document_id: str, content: str, chunk_size: int, overlap: int) -> list[Chunk]:
    """Split content and wrap each piece as an indexed Chunk of the document."""
    return [
        Chunk(document_id=document_id, index=index, text=text)
        for index, text in enumerate(split_into_chunks(content, chunk_size, overlap))
    ]
