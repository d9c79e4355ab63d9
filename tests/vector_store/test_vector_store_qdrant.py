"""
Tests for Qdrant vector store implementation.
"""

import uuid
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from src.core.vector_store.qdrant import QdrantStore
from src.utils.exceptions import ValidationError, VectorStoreError


@pytest.fixture
def qdrant_store(language_model):
    """Create Qdrant store with a mocked client."""
    store = QdrantStore(
        language_model=language_model,
        host="localhost",
        port=6333,
        collection_name="test_documents",
        vector_size=3,
    )
    store.client = AsyncMock()
    return store


def _point(point_id, score=0.0, payload=None):
    return MagicMock(id=point_id, score=score, payload=payload)


@pytest.mark.unit
@pytest.mark.asyncio
class TestQdrantStore:
    """Test Qdrant vector store implementation."""

    async def test_initialization(self, language_model):
        """Test store initialization."""
        store = QdrantStore(language_model=language_model, vector_size=1024)

        assert store.host == "localhost"
        assert store.port == 6333
        assert store.collection_name == "documents"
        assert store.vector_size == 1024
        assert store.client is None

    async def test_connect(self, language_model):
        """Test connection to Qdrant."""
        store = QdrantStore(language_model=language_model, use_grpc=True, port=6334)

        with patch("src.core.vector_store.qdrant.AsyncQdrantClient") as mock_client:
            await store.connect()

            assert store.client is mock_client.return_value
            assert mock_client.call_args.kwargs["prefer_grpc"] is True
            assert mock_client.call_args.kwargs["port"] == 6334

    async def test_connect_failure(self, language_model):
        store = QdrantStore(language_model=language_model)

        with patch("src.core.vector_store.qdrant.AsyncQdrantClient") as mock_client:
            mock_client.side_effect = Exception("bad url")

            with pytest.raises(VectorStoreError, match="Failed to connect"):
                await store.connect()

    async def test_initialize_creates_collection(self, qdrant_store):
        """Test collection and document_id index are created when missing."""
        qdrant_store.client.collection_exists.return_value = False

        await qdrant_store.initialize()

        create_kwargs = qdrant_store.client.create_collection.call_args.kwargs
        assert create_kwargs["collection_name"] == "test_documents"
        assert create_kwargs["vectors_config"].size == 3
        qdrant_store.client.create_payload_index.assert_called_once()
        assert (
            qdrant_store.client.create_payload_index.call_args.kwargs["field_name"]
            == "document_id"
        )

    async def test_initialize_existing_collection(self, qdrant_store):
        qdrant_store.client.collection_exists.return_value = True

        await qdrant_store.initialize()

        qdrant_store.client.create_collection.assert_not_called()

    async def test_initialize_failure(self, qdrant_store):
        qdrant_store.client.collection_exists.side_effect = Exception("unreachable")

        with pytest.raises(VectorStoreError, match="Failed to initialize"):
            await qdrant_store.initialize()

    async def test_store_embeddings(self, qdrant_store):
        """Test chunk is embedded and upserted with its payload."""
        stored = await qdrant_store.store_embeddings(
            "doc_1", "chunk text", {"chunk_index": 0, "chunk_id": "doc_1_0"}
        )

        assert stored == 1
        point = qdrant_store.client.upsert.call_args.kwargs["points"][0]
        uuid.UUID(str(point.id))
        assert point.vector == [0.1, 0.2, 0.3]
        assert point.payload["document_id"] == "doc_1"
        assert point.payload["content"] == "chunk text"
        assert point.payload["chunk_id"] == "doc_1_0"
        assert "stored_at" in point.payload

    async def test_metadata_cannot_override_document_id(self, qdrant_store):
        await qdrant_store.store_embeddings("doc_1", "text", {"document_id": "other"})

        point = qdrant_store.client.upsert.call_args.kwargs["points"][0]
        assert point.payload["document_id"] == "doc_1"

    @pytest.mark.parametrize("document_id, text", [("", "text"), ("doc_1", "  ")])
    async def test_store_embeddings_validation(self, qdrant_store, document_id, text):
        with pytest.raises(ValidationError):
            await qdrant_store.store_embeddings(document_id, text)

    async def test_store_embeddings_failure(self, qdrant_store):
        qdrant_store.client.upsert.side_effect = Exception("disk full")

        with pytest.raises(VectorStoreError) as exc_info:
            await qdrant_store.store_embeddings("doc_1", "text")

        assert exc_info.value.context == {"document_id": "doc_1"}

    async def test_search(self, qdrant_store):
        """Test hits map to results without reserved payload keys."""
        qdrant_store.client.query_points.return_value = MagicMock(
            points=[
                _point("p1", 0.92, {"document_id": "doc_1", "content": "first", "chunk_index": 0}),
                _point("p2", 0.81, {"document_id": "doc_2", "content": "second", "chunk_index": 3}),
            ]
        )

        results = await qdrant_store.search("query", limit=5, min_score=0.6)

        assert [(r.document_id, r.score) for r in results] == [("doc_1", 0.92), ("doc_2", 0.81)]
        assert results[0].content == "first"
        assert results[1].metadata == {"chunk_index": 3}
        kwargs = qdrant_store.client.query_points.call_args.kwargs
        assert kwargs["query"] == [0.1, 0.2, 0.3]
        assert kwargs["limit"] == 5
        assert kwargs["score_threshold"] == 0.6

    async def test_search_empty_query(self, qdrant_store):
        with pytest.raises(ValidationError):
            await qdrant_store.search("")

    async def test_search_failure(self, qdrant_store):
        qdrant_store.client.query_points.side_effect = Exception("timeout")

        with pytest.raises(VectorStoreError, match="search failed"):
            await qdrant_store.search("query")

    async def test_delete_embeddings_pages_through_points(self, qdrant_store):
        """Test every page of the document's points is deleted."""
        qdrant_store.client.scroll.side_effect = [
            ([_point("p1"), _point("p2")], "next-page"),
            ([_point("p3")], None),
        ]

        deleted = await qdrant_store.delete_embeddings("doc_1")

        assert deleted == 3
        assert qdrant_store.client.scroll.call_count == 2
        assert qdrant_store.client.scroll.call_args_list[1].kwargs["offset"] == "next-page"
        delete_kwargs = qdrant_store.client.delete.call_args.kwargs
        assert delete_kwargs["points_selector"] == ["p1", "p2", "p3"]

    async def test_delete_embeddings_nothing_stored(self, qdrant_store):
        qdrant_store.client.scroll.return_value = ([], None)

        assert await qdrant_store.delete_embeddings("doc_1") == 0
        qdrant_store.client.delete.assert_not_called()

    async def test_get_vector_count(self, qdrant_store):
        qdrant_store.client.count.return_value = MagicMock(count=7)

        assert await qdrant_store.get_vector_count() == 7
        assert qdrant_store.client.count.call_args.kwargs["exact"] is True

    async def test_is_healthy(self, qdrant_store):
        assert await qdrant_store.is_healthy() is True

        qdrant_store.client.get_collections.side_effect = Exception("down")
        assert await qdrant_store.is_healthy() is False

    async def test_close(self, qdrant_store):
        client = qdrant_store.client

        await qdrant_store.close()

        client.close.assert_awaited_once()
        assert qdrant_store.client is None
