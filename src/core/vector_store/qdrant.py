"""
Qdrant vector store implementation.

Each stored chunk becomes one point with a random UUID; the owning document
id is kept in the payload and indexed so a document's points can be found
and deleted together.
"""

from datetime import UTC, datetime
from typing import Any

from qdrant_client import AsyncQdrantClient
from qdrant_client.models import (
    Distance,
    FieldCondition,
    Filter,
    HnswConfigDiff,
    MatchValue,
    PayloadSchemaType,
    PointStruct,
    VectorParams,
)

from src.core.llm.base import LanguageModel
from src.core.vector_store.base import VectorStore
from src.models.retrieval import VectorSearchResult
from src.utils.exceptions import ValidationError, VectorStoreError
from src.utils.id_generator import generate_point_id
from src.utils.logger import get_logger

logger = get_logger(__name__)

_RESERVED_PAYLOAD_KEYS = ("document_id", "content")


class QdrantStore(VectorStore):
    """
    Qdrant vector store for document chunks.

    Features:
    - Embeds text through the configured language model
    - HNSW indexing for fast search
    - Keyword payload index on document_id for per-document deletes
    """

    def __init__(
        self,
        language_model: LanguageModel,
        host: str = "localhost",
        port: int = 6333,
        collection_name: str = "documents",
        vector_size: int = 1024,
        distance: str = "Cosine",
        api_key: str | None = None,
        https: bool = False,
        use_grpc: bool = False,
        timeout: int = 30,
        scroll_batch_size: int = 1000,
    ):
        """
        Initialize Qdrant store.

        Args:
            language_model: Provider used to embed chunk and query text
            host: Qdrant host
            port: Qdrant port (6333 for HTTP, 6334 for gRPC)
            collection_name: Collection name
            vector_size: Embedding dimension
            distance: Distance metric name (Cosine, Euclid, Dot)
            api_key: Optional API key
            https: Use TLS
            use_grpc: Use gRPC connection
            timeout: Request timeout in seconds
            scroll_batch_size: Page size when scrolling a document's points
        """
        self.language_model = language_model
        self.host = host
        self.port = port
        self.collection_name = collection_name
        self.vector_size = vector_size
        self.distance = distance
        self.api_key = api_key
        self.https = https
        self.use_grpc = use_grpc
        self.timeout = timeout
        self.scroll_batch_size = scroll_batch_size
        self.client: AsyncQdrantClient | None = None

    async def connect(self) -> None:
        """
        Establish connection to Qdrant.

        Raises:
            VectorStoreError: If connection fails
        """
        if self.client is None:
            try:
                self.client = AsyncQdrantClient(
                    host=self.host,
                    port=self.port,
                    api_key=self.api_key,
                    https=self.https,
                    prefer_grpc=self.use_grpc,
                    timeout=self.timeout,
                )
            except Exception as e:
                logger.error(
                    f"Failed to connect to Qdrant: {e}",
                    extra={"host": self.host, "port": self.port, "error": str(e)},
                )
                raise VectorStoreError(f"Failed to connect to Qdrant: {e}") from e

    async def initialize(self) -> None:
        """
        Create the collection and payload index if missing.

        Raises:
            VectorStoreError: If initialization fails
        """
        try:
            await self.connect()

            if await self.client.collection_exists(self.collection_name):
                return

            await self.client.create_collection(
                collection_name=self.collection_name,
                vectors_config=VectorParams(
                    size=self.vector_size,
                    distance=Distance(self.distance),
                    hnsw_config=HnswConfigDiff(m=16, ef_construct=100),
                ),
            )
            await self.client.create_payload_index(
                collection_name=self.collection_name,
                field_name="document_id",
                field_schema=PayloadSchemaType.KEYWORD,
            )
            logger.info(
                f"Created Qdrant collection {self.collection_name}",
                extra={"vector_size": self.vector_size, "distance": self.distance},
            )
        except Exception as e:
            logger.error(
                f"Failed to initialize Qdrant collection: {e}",
                extra={"collection": self.collection_name, "error": str(e)},
            )
            raise VectorStoreError(f"Failed to initialize Qdrant collection: {e}") from e

    def _document_filter(self, document_id: str) -> Filter:
        return Filter(
            must=[FieldCondition(key="document_id", match=MatchValue(value=document_id))]
        )

    async def store_embeddings(
        self, document_id: str, text: str, metadata: dict[str, Any] | None = None
    ) -> int:
        if not document_id or not document_id.strip():
            raise ValidationError("Document ID cannot be empty")
        if not text or not text.strip():
            raise ValidationError("Text cannot be empty")

        try:
            await self.connect()

            embedding = await self.language_model.generate_embedding(text)

            payload = {
                **(metadata or {}),
                "document_id": document_id,
                "content": text,
                "stored_at": datetime.now(UTC).isoformat(),
            }

            await self.client.upsert(
                collection_name=self.collection_name,
                points=[PointStruct(id=generate_point_id(), vector=embedding, payload=payload)],
                wait=True,
            )
            return 1
        except ValidationError:
            raise
        except Exception as e:
            logger.error(
                f"Failed to store embeddings for document {document_id}: {e}",
                extra={"document_id": document_id, "error": str(e)},
            )
            raise VectorStoreError(
                f"Failed to store embeddings: {e}", context={"document_id": document_id}
            ) from e

    async def search(
        self, query: str, limit: int = 10, min_score: float = 0.0
    ) -> list[VectorSearchResult]:
        if not query or not query.strip():
            raise ValidationError("Query cannot be empty")

        try:
            await self.connect()

            vector = await self.language_model.generate_embedding(query)

            response = await self.client.query_points(
                collection_name=self.collection_name,
                query=vector,
                limit=limit,
                score_threshold=min_score,
                with_payload=True,
            )
        except ValidationError:
            raise
        except Exception as e:
            logger.error(
                f"Qdrant search failed: {e}",
                extra={"collection": self.collection_name, "error": str(e)},
            )
            raise VectorStoreError(f"Qdrant search failed: {e}") from e

        results = []
        for point in response.points:
            payload = point.payload or {}
            results.append(
                VectorSearchResult(
                    document_id=str(payload.get("document_id", "")),
                    content=str(payload.get("content", "")),
                    score=point.score,
                    metadata={
                        k: v for k, v in payload.items() if k not in _RESERVED_PAYLOAD_KEYS
                    },
                )
            )
        return results

    async def delete_embeddings(self, document_id: str) -> int:
        if not document_id or not document_id.strip():
            raise ValidationError("Document ID cannot be empty")

        try:
            await self.connect()

            point_ids = []
            offset = None
            while True:
                points, offset = await self.client.scroll(
                    collection_name=self.collection_name,
                    scroll_filter=self._document_filter(document_id),
                    limit=self.scroll_batch_size,
                    offset=offset,
                    with_payload=False,
                    with_vectors=False,
                )
                point_ids.extend(point.id for point in points)
                if offset is None:
                    break

            if point_ids:
                await self.client.delete(
                    collection_name=self.collection_name,
                    points_selector=point_ids,
                    wait=True,
                )

            logger.info(
                f"Deleted {len(point_ids)} vectors for document {document_id}",
                extra={"document_id": document_id},
            )
            return len(point_ids)
        except ValidationError:
            raise
        except Exception as e:
            logger.error(
                f"Failed to delete embeddings for document {document_id}: {e}",
                extra={"document_id": document_id, "error": str(e)},
            )
            raise VectorStoreError(
                f"Failed to delete embeddings: {e}", context={"document_id": document_id}
            ) from e

    async def get_vector_count(self) -> int:
        try:
            await self.connect()
            response = await self.client.count(collection_name=self.collection_name, exact=True)
            return response.count
        except Exception as e:
            logger.error(
                f"Failed to count vectors: {e}",
                extra={"collection": self.collection_name, "error": str(e)},
            )
            raise VectorStoreError(f"Failed to count vectors: {e}") from e

    async def is_healthy(self) -> bool:
        try:
            await self.connect()
            await self.client.get_collections()
            return True
        except Exception as e:
            logger.warning(f"Qdrant health check failed: {e}", extra={"host": self.host})
            return False

    async def close(self) -> None:
        """Close the connection to Qdrant."""
        if self.client is not None:
            await self.client.close()
            self.client = None
