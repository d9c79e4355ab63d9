"""
Document and Chunk models.

Documents are the unit of ingestion and live in the document repository.
Chunks are derived word windows of a document's content; they are embedded
into the vector store but never persisted as entities of their own.
"""

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field

from src.utils.id_generator import generate_document_id


def _utcnow() -> datetime:
    return datetime.now(UTC)


class DocumentSource(BaseModel):
    """Where a document came from."""

    type: str = Field(default="text", description="Source type (text, file, url, ...)")
    path: str | None = Field(default=None, description="Source path or locator")
    modified_at: datetime | None = Field(default=None, description="Last modification time")


class Document(BaseModel):
    """
    Ingested document.

    Metadata is a free-form dictionary. Well-known keys are ``title``,
    ``author``, ``type`` and ``tags``; search filters match against it with
    exact equality.
    """

    id: str = Field(default_factory=generate_document_id, description="Unique document ID")
    content: str = Field(..., description="Full document text")
    metadata: dict[str, Any] = Field(default_factory=dict, description="Document metadata")
    source: DocumentSource = Field(default_factory=DocumentSource, description="Document origin")
    created_at: datetime = Field(default_factory=_utcnow, description="Creation timestamp")

    class Config:
        """Pydantic configuration."""

        json_encoders = {datetime: lambda v: v.isoformat()}

    @property
    def title(self) -> str | None:
        return self.metadata.get("title")

    @property
    def tags(self) -> list[str]:
        tags = self.metadata.get("tags")
        return list(tags) if isinstance(tags, list) else []


class Chunk(BaseModel):
    """Word window of a document's content."""

    document_id: str = Field(..., description="Parent document ID")
    index: int = Field(..., ge=0, description="Zero-based index within document")
    text: str = Field(..., description="Chunk text")
