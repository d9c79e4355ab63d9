"""
In-memory document repository.

Backed by a dict keyed by document ID. Every read and write is a single
dict operation with no suspension point in between, so concurrent tasks on
one event loop observe last-write-wins semantics.
"""

from src.core.repository.base import DocumentRepository
from src.models.document import Document
from src.utils.exceptions import DocumentNotFoundError, ProcessingError, ValidationError
from src.utils.logger import get_logger

logger = get_logger(__name__)


class InMemoryDocumentRepository(DocumentRepository):
    """Process-local document repository."""

    def __init__(self):
        self._documents: dict[str, Document] = {}

    async def initialize(self) -> None:
        logger.info("In-memory document repository ready")

    def _validate(self, document: Document) -> None:
        if not document.id:
            raise ValidationError("Document ID cannot be empty")

    async def create(self, document: Document) -> Document:
        self._validate(document)
        if document.id in self._documents:
            raise ProcessingError(
                document.id, f"Document with ID '{document.id}' already exists"
            )

        self._documents[document.id] = document.model_copy(deep=True)
        logger.debug(f"Created document {document.id}", extra={"document_id": document.id})
        return document

    async def update(self, document: Document) -> Document:
        self._validate(document)
        if document.id not in self._documents:
            raise DocumentNotFoundError(document.id)

        self._documents[document.id] = document.model_copy(deep=True)
        logger.debug(f"Updated document {document.id}", extra={"document_id": document.id})
        return document

    async def save(self, document: Document) -> Document:
        self._validate(document)
        self._documents[document.id] = document.model_copy(deep=True)
        logger.debug(f"Saved document {document.id}", extra={"document_id": document.id})
        return document

    async def get_by_id(self, document_id: str) -> Document | None:
        document = self._documents.get(document_id)
        return document.model_copy(deep=True) if document else None

    async def get_by_ids(self, document_ids: list[str]) -> list[Document]:
        return [
            self._documents[document_id].model_copy(deep=True)
            for document_id in document_ids
            if document_id in self._documents
        ]

    async def get_all(self, skip: int = 0, take: int = 100) -> list[Document]:
        ordered = sorted(self._documents.values(), key=lambda d: d.created_at)
        return [d.model_copy(deep=True) for d in ordered[skip : skip + take]]

    async def delete(self, document_id: str) -> bool:
        removed = self._documents.pop(document_id, None) is not None
        if removed:
            logger.debug(f"Deleted document {document_id}", extra={"document_id": document_id})
        return removed

    async def count(self) -> int:
        return len(self._documents)

    async def exists(self, document_id: str) -> bool:
        return document_id in self._documents

    async def is_healthy(self) -> bool:
        return True

    async def close(self) -> None:
        """Nothing to release; documents stay in memory until the process exits."""
        pass
