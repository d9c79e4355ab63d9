"""
Ingestion models.

Options and per-document / per-batch results of document ingestion.
"""

from enum import Enum

from pydantic import BaseModel, Field

from src.utils.exceptions import BatchPartialFailure


class ProcessingStatus(str, Enum):
    """Status of a document ingestion."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class IngestionOptions(BaseModel):
    """
    Per-request ingestion options.

    chunk_size / chunk_overlap of None fall back to the configured defaults.
    """

    auto_summarize: bool = True
    extract_relationships: bool = True
    chunk_size: int | None = Field(default=None, gt=0)
    chunk_overlap: int | None = Field(default=None, ge=0)


class IngestionResult(BaseModel):
    """Result of ingesting a single document."""

    document_id: str
    status: ProcessingStatus
    chunks_created: int = 0
    relationships_extracted: int = 0
    summary: str | None = None
    error: str | None = Field(default=None, description="Failure reason when status is failed")
    processing_time_ms: float = 0.0

    @property
    def succeeded(self) -> bool:
        return self.status == ProcessingStatus.COMPLETED


class BatchIngestionResult(BaseModel):
    """Aggregated result of a batch ingestion."""

    results: list[IngestionResult] = Field(default_factory=list)
    total_documents: int = 0
    successful_documents: int = 0
    failed_documents: int = 0
    total_processing_time_ms: float = 0.0

    @property
    def is_partial_failure(self) -> bool:
        return self.successful_documents > 0 and self.failed_documents > 0

    def raise_for_failures(self) -> None:
        """
        Raise when some, but not all, documents failed.

        Raises:
            BatchPartialFailure: Carrying the per-document results
        """
        if self.is_partial_failure:
            failed_ids = [r.document_id for r in self.results if not r.succeeded]
            raise BatchPartialFailure(
                f"{self.failed_documents} of {self.total_documents} documents failed",
                results=self.results,
                context={"failed_document_ids": failed_ids},
            )
