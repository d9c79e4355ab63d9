"""
SQLite document repository.

Durable single-file repository using aiosqlite. Metadata and source are
stored as JSON columns.
"""

import json
from datetime import datetime
from pathlib import Path

import aiosqlite

from src.core.repository.base import DocumentRepository
from src.models.document import Document, DocumentSource
from src.utils.exceptions import (
    DocumentNotFoundError,
    ProcessingError,
    RepositoryError,
    ValidationError,
)
from src.utils.logger import get_logger

logger = get_logger(__name__)

_COLUMNS = "id, content, metadata, source, created_at"


class SQLiteDocumentRepository(DocumentRepository):
    """
    SQLite-backed document repository.

    Features:
    - Durable local storage
    - JSON metadata columns
    - Upsert via INSERT OR REPLACE
    """

    def __init__(self, db_path: str = "context_memory.db"):
        """
        Initialize SQLite repository.

        Args:
            db_path: Path to SQLite database file (":memory:" for a private in-memory db)
        """
        self.db_path = db_path
        self.connection: aiosqlite.Connection | None = None

        if db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    async def connect(self) -> None:
        """Establish connection to SQLite."""
        if self.connection is None:
            try:
                self.connection = await aiosqlite.connect(self.db_path)
                await self.connection.execute("PRAGMA journal_mode = WAL")
                await self.connection.commit()
            except Exception as e:
                logger.error(
                    f"Failed to open SQLite repository: {e}",
                    extra={"db_path": self.db_path, "error": str(e)},
                )
                raise RepositoryError(f"Failed to open SQLite repository: {e}") from e

    async def initialize(self) -> None:
        """Initialize database schema."""
        await self.connect()

        await self.connection.execute(
            """
            CREATE TABLE IF NOT EXISTS documents (
                id TEXT PRIMARY KEY,
                content TEXT NOT NULL,
                metadata TEXT DEFAULT '{}',
                source TEXT DEFAULT '{}',
                created_at TEXT NOT NULL
            )
        """
        )
        await self.connection.execute(
            "CREATE INDEX IF NOT EXISTS idx_documents_created ON documents(created_at)"
        )
        await self.connection.commit()

    # ═══════════════════════════════════════════════════════════
    # WRITE OPERATIONS
    # ═══════════════════════════════════════════════════════════

    async def _write(self, document: Document, replace: bool) -> None:
        verb = "INSERT OR REPLACE" if replace else "INSERT"
        await self.connection.execute(
            f"{verb} INTO documents ({_COLUMNS}) VALUES (?, ?, ?, ?, ?)",
            (
                document.id,
                document.content,
                json.dumps(document.metadata, default=str),
                document.source.model_dump_json(),
                document.created_at.isoformat(),
            ),
        )
        await self.connection.commit()

    async def create(self, document: Document) -> Document:
        if not document.id:
            raise ValidationError("Document ID cannot be empty")
        await self.connect()

        try:
            await self._write(document, replace=False)
        except aiosqlite.IntegrityError as e:
            raise ProcessingError(
                document.id, f"Document with ID '{document.id}' already exists"
            ) from e
        except Exception as e:
            logger.error(
                f"Failed to create document {document.id}: {e}",
                extra={"document_id": document.id, "error": str(e)},
            )
            raise RepositoryError(
                f"Failed to create document: {e}", context={"document_id": document.id}
            ) from e

        return document

    async def update(self, document: Document) -> Document:
        if not document.id:
            raise ValidationError("Document ID cannot be empty")
        if not await self.exists(document.id):
            raise DocumentNotFoundError(document.id)
        return await self.save(document)

    async def save(self, document: Document) -> Document:
        if not document.id:
            raise ValidationError("Document ID cannot be empty")
        await self.connect()

        try:
            await self._write(document, replace=True)
        except Exception as e:
            logger.error(
                f"Failed to save document {document.id}: {e}",
                extra={"document_id": document.id, "error": str(e)},
            )
            raise RepositoryError(
                f"Failed to save document: {e}", context={"document_id": document.id}
            ) from e

        return document

    async def delete(self, document_id: str) -> bool:
        await self.connect()

        cursor = await self.connection.execute(
            "DELETE FROM documents WHERE id = ?", (document_id,)
        )
        await self.connection.commit()
        return cursor.rowcount > 0

    # ═══════════════════════════════════════════════════════════
    # READ OPERATIONS
    # ═══════════════════════════════════════════════════════════

    async def get_by_id(self, document_id: str) -> Document | None:
        await self.connect()

        cursor = await self.connection.execute(
            f"SELECT {_COLUMNS} FROM documents WHERE id = ?", (document_id,)
        )
        row = await cursor.fetchone()
        return self._row_to_document(row) if row else None

    async def get_by_ids(self, document_ids: list[str]) -> list[Document]:
        if not document_ids:
            return []
        await self.connect()

        placeholders = ", ".join("?" for _ in document_ids)
        cursor = await self.connection.execute(
            f"SELECT {_COLUMNS} FROM documents WHERE id IN ({placeholders})",
            list(document_ids),
        )
        rows = await cursor.fetchall()
        found = {row[0]: self._row_to_document(row) for row in rows}

        return [found[document_id] for document_id in document_ids if document_id in found]

    async def get_all(self, skip: int = 0, take: int = 100) -> list[Document]:
        await self.connect()

        cursor = await self.connection.execute(
            f"SELECT {_COLUMNS} FROM documents ORDER BY created_at LIMIT ? OFFSET ?",
            (take, skip),
        )
        rows = await cursor.fetchall()
        return [self._row_to_document(row) for row in rows]

    async def count(self) -> int:
        await self.connect()

        cursor = await self.connection.execute("SELECT COUNT(*) FROM documents")
        row = await cursor.fetchone()
        return row[0] if row else 0

    async def exists(self, document_id: str) -> bool:
        await self.connect()

        cursor = await self.connection.execute(
            "SELECT 1 FROM documents WHERE id = ?", (document_id,)
        )
        return await cursor.fetchone() is not None

    async def is_healthy(self) -> bool:
        try:
            await self.connect()
            cursor = await self.connection.execute("SELECT 1")
            await cursor.fetchone()
            return True
        except Exception as e:
            logger.warning(f"SQLite repository health check failed: {e}")
            return False

    async def close(self) -> None:
        """Close the connection."""
        if self.connection is not None:
            await self.connection.close()
            self.connection = None

    # ═══════════════════════════════════════════════════════════
    # HELPER METHODS
    # ═══════════════════════════════════════════════════════════

    def _row_to_document(self, row: tuple) -> Document:
        """Convert database row to Document."""
        return Document(
            id=row[0],
            content=row[1],
            metadata=json.loads(row[2]) if row[2] else {},
            source=DocumentSource.model_validate_json(row[3]) if row[3] else DocumentSource(),
            created_at=datetime.fromisoformat(row[4]),
        )
