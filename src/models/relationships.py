"""
Relationship models.

Relationships are typed, confidence-scored directed edges between named
entities. Every relationship is attributed to the document it was extracted
from and is deleted together with that document.
"""

from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class RelationshipDirection(str, Enum):
    """Direction of relationships relative to an entity."""

    OUTGOING = "outgoing"
    INCOMING = "incoming"
    BOTH = "both"


class Relationship(BaseModel):
    """Stored relationship between two entities."""

    source: str = Field(..., description="Source entity name")
    target: str = Field(..., description="Target entity name")
    type: str = Field(..., description="Relationship type (e.g. works_for, uses)")
    confidence: float = Field(default=1.0, ge=0.0, le=1.0, description="Confidence score")
    document_id: str = Field(default="", description="Document the relationship came from")
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    class Config:
        """Pydantic configuration."""

        json_encoders = {datetime: lambda v: v.isoformat()}


class RelationshipExtraction(BaseModel):
    """Relationship as returned by the language model, before storage."""

    source: str
    target: str
    type: str
    confidence: float = Field(default=0.5, ge=0.0, le=1.0)
    context: str | None = None

    def to_relationship(self, document_id: str, extracted_at: datetime) -> Relationship:
        """
        Attach the extraction to its source document.

        Args:
            document_id: Owning document
            extracted_at: Extraction timestamp stored in metadata

        Returns:
            Relationship ready for the graph store
        """
        return Relationship(
            source=self.source,
            target=self.target,
            type=self.type,
            confidence=self.confidence,
            document_id=document_id,
            metadata={
                "context": self.context or "",
                "extracted_at": extracted_at.isoformat(),
            },
        )
