"""
Custom exception hierarchy for the Context Memory Store.

Provides structured error types for better error handling and debugging.
All exceptions inherit from ContextMemoryError for easy catching, and carry
an error code plus the HTTP status the transport layer reports for them.
"""


class ContextMemoryError(Exception):
    """
    Base exception for all Context Memory Store errors.
    All custom exceptions should inherit from this class.
    """

    error_code = "MEMORY_STORE_ERROR"
    status_code = 500

    def __init__(self, message: str, context: dict | None = None):
        """
        Initialize error.
        Args:
            message: Error message
            context: Optional context dictionary with additional error details
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def to_dict(self) -> dict:
        """Serialize for error responses."""
        return {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.context,
        }


class ValidationError(ContextMemoryError):
    """
    Validation errors.
    Raised when input validation fails or data is invalid.
    """

    error_code = "VALIDATION_ERROR"
    status_code = 400


class DocumentNotFoundError(ContextMemoryError):
    """
    Raised when a requested document doesn't exist in the repository.
    """

    error_code = "DOCUMENT_NOT_FOUND"
    status_code = 404

    def __init__(self, document_id: str, context: dict | None = None):
        super().__init__(
            f"Document with ID '{document_id}' was not found",
            context={"document_id": document_id, **(context or {})},
        )
        self.document_id = document_id


class ProcessingError(ContextMemoryError):
    """
    Document-scoped processing errors.
    Raised from ingestion and repository writes; always carries the document id.
    """

    error_code = "DOCUMENT_PROCESSING_ERROR"
    status_code = 422

    def __init__(self, document_id: str, message: str, context: dict | None = None):
        super().__init__(message, context={"document_id": document_id, **(context or {})})
        self.document_id = document_id


class StoreError(ContextMemoryError):
    """
    Base exception for store operations.
    Used for errors related to data storage operations.
    """

    error_code = "STORE_ERROR"


class VectorStoreError(StoreError):
    """
    Vector store operation errors.
    Raised when vector database operations fail.
    """

    error_code = "VECTOR_STORE_ERROR"
    status_code = 502


class GraphStoreError(StoreError):
    """
    Graph store operation errors.
    Raised when graph database operations fail.
    """

    error_code = "GRAPH_STORE_ERROR"
    status_code = 502


class RepositoryError(StoreError):
    """
    Document repository errors.
    Raised when the backing document store fails.
    """

    error_code = "REPOSITORY_ERROR"


class LanguageServiceError(ContextMemoryError):
    """
    Language model errors.
    Raised when embedding, chat, summary or extraction calls fail.
    """

    error_code = "LLM_SERVICE_ERROR"
    status_code = 502


class BatchPartialFailure(ContextMemoryError):
    """
    Some, but not all, documents of a batch failed to ingest.
    """

    error_code = "BATCH_PARTIAL_FAILURE"
    status_code = 207

    def __init__(self, message: str, results: list, context: dict | None = None):
        super().__init__(message, context)
        self.results = results


class ServiceUnavailableError(ContextMemoryError):
    """
    Raised by the readiness gate when a collaborator is unhealthy.
    """

    error_code = "SERVICE_UNAVAILABLE"
    status_code = 503
