"""Utility modules for the Context Memory Store."""

from src.utils.counters import OperationCounters
from src.utils.exceptions import (
    BatchPartialFailure,
    ContextMemoryError,
    DocumentNotFoundError,
    GraphStoreError,
    LanguageServiceError,
    ProcessingError,
    RepositoryError,
    ServiceUnavailableError,
    StoreError,
    ValidationError,
    VectorStoreError,
)
from src.utils.id_generator import generate_chunk_id, generate_document_id, generate_point_id
from src.utils.logger import get_logger, setup_logging

__all__ = [
    # Logging
    "get_logger",
    "setup_logging",
    # Counters
    "OperationCounters",
    # ID Generators
    "generate_document_id",
    "generate_chunk_id",
    "generate_point_id",
    # Exceptions
    "ContextMemoryError",
    "ValidationError",
    "DocumentNotFoundError",
    "ProcessingError",
    "StoreError",
    "VectorStoreError",
    "GraphStoreError",
    "RepositoryError",
    "LanguageServiceError",
    "BatchPartialFailure",
    "ServiceUnavailableError",
]
