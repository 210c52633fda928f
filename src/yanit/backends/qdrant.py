"""Qdrant vector index supporting memory, Docker, and cloud deployment modes."""

import logging
import uuid
from typing import List, Sequence, Tuple

from qdrant_client import AsyncQdrantClient
from qdrant_client.models import (
    Distance,
    HnswConfigDiff,
    PayloadSchemaType,
    PointIdsList,
    PointStruct,
    VectorParams,
)

from yanit.config import Settings
from yanit.exceptions import IndexInitializationError, VectorIndexError
from yanit.interfaces.vector_index import VectorIndex
from yanit.types import FAQ, MatchCandidate

logger = logging.getLogger(__name__)

# Qdrant point ids must be UUIDs or integers; FAQ ids are free-form strings
_FAQ_ID_NAMESPACE = uuid.UUID("6f1c7d3e-2b8a-4c5e-9a41-3d2f0b7e8c15")


def point_id(faq_id: str) -> str:
    """Deterministic Qdrant point id for an FAQ id."""
    return str(uuid.uuid5(_FAQ_ID_NAMESPACE, faq_id))


class QdrantIndex(VectorIndex):
    """Qdrant-based FAQ index.

    Deployment modes:
        - "memory": In-process, no persistence. Best for testing.
        - "docker": Connect to a local/remote Qdrant instance.
        - "cloud": Connect to Qdrant Cloud with API key.

    Qdrant returns query hits ordered by descending score.

    Args:
        settings: Yanıt Settings instance. If None, loads from environment.
    """

    sorted_results = True

    def __init__(self, settings: Settings | None = None):
        self._settings = settings or Settings()
        self._collection = self._settings.collection_name
        self._client: AsyncQdrantClient | None = None
        self._initialized = False

    @property
    def client(self) -> AsyncQdrantClient:
        if self._client is None:
            raise VectorIndexError("Index not connected. Call connect() first.")
        return self._client

    @property
    def collection_name(self) -> str:
        return self._collection

    async def connect(self) -> None:
        """Establish connection to Qdrant based on settings.

        Raises:
            IndexInitializationError: If connection fails.
        """
        if self._client is not None:
            return
        try:
            self._client = self._build_client()
            logger.info("Connected to Qdrant in '%s' mode", self._settings.qdrant_mode)
        except Exception as e:
            raise IndexInitializationError(
                f"Failed to connect to Qdrant in '{self._settings.qdrant_mode}' mode: {e}"
            ) from e

    async def initialize(self, dimension: int, **kwargs) -> None:
        """Create the FAQ collection (cosine distance) unless it already exists."""
        if self._initialized:
            return

        try:
            collections = await self.client.get_collections()
            existing = {c.name for c in collections.collections}

            if self._collection not in existing:
                await self.client.create_collection(
                    collection_name=self._collection,
                    vectors_config=VectorParams(
                        size=dimension,
                        distance=Distance.COSINE,
                        on_disk=self._settings.on_disk,
                    ),
                    hnsw_config=HnswConfigDiff(
                        m=kwargs.get("hnsw_m", self._settings.hnsw_m),
                        ef_construct=kwargs.get(
                            "hnsw_ef_construct", self._settings.hnsw_ef_construct
                        ),
                    ),
                )
                await self.client.create_payload_index(
                    collection_name=self._collection,
                    field_name="category",
                    field_schema=PayloadSchemaType.KEYWORD,
                )
                logger.info("Created collection '%s' (dim=%d)", self._collection, dimension)
            else:
                logger.info("Collection '%s' already exists, skipping creation", self._collection)

            self._initialized = True
        except VectorIndexError:
            raise
        except Exception as e:
            raise IndexInitializationError(
                f"Failed to initialize collection '{self._collection}': {e}"
            ) from e

    async def upsert(self, items: Sequence[Tuple[FAQ, List[float]]]) -> None:
        """Insert or replace FAQs in batches of ``settings.batch_size``."""
        try:
            points = [self._faq_to_point(faq, vector) for faq, vector in items]
            batch_size = self._settings.batch_size

            for i in range(0, len(points), batch_size):
                batch = points[i : i + batch_size]
                await self.client.upsert(
                    collection_name=self._collection,
                    wait=True,
                    points=batch,
                )
                logger.info("Upserted batch %d: %d FAQs", i // batch_size + 1, len(batch))
        except VectorIndexError:
            raise
        except Exception as e:
            raise VectorIndexError(f"Qdrant upsert failed on '{self._collection}': {e}") from e

    async def query(self, vector: List[float], top_k: int = 3) -> List[MatchCandidate]:
        try:
            response = await self.client.query_points(
                collection_name=self._collection,
                query=vector,
                limit=top_k,
                with_payload=True,
            )
            results = [self._point_to_candidate(point) for point in response.points]
            if results:
                logger.debug(
                    "Query '%s' returned %d results (top score=%.4f)",
                    self._collection,
                    len(results),
                    results[0].score,
                )
            else:
                logger.debug("Query '%s' returned 0 results", self._collection)
            return results
        except VectorIndexError:
            raise
        except Exception as e:
            raise VectorIndexError(f"Qdrant query failed on '{self._collection}': {e}") from e

    async def delete_by_ids(self, ids: Sequence[str]) -> None:
        if not ids:
            return
        try:
            await self.client.delete(
                collection_name=self._collection,
                points_selector=PointIdsList(points=[point_id(i) for i in ids]),
                wait=True,
            )
            logger.info("Deleted %d FAQs from '%s'", len(ids), self._collection)
        except VectorIndexError:
            raise
        except Exception as e:
            raise VectorIndexError(f"Qdrant delete failed on '{self._collection}': {e}") from e

    async def count(self) -> int:
        try:
            result = await self.client.count(collection_name=self._collection)
            return result.count
        except VectorIndexError:
            raise
        except Exception as e:
            raise VectorIndexError(f"Qdrant count failed on '{self._collection}': {e}") from e

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None
            self._initialized = False
            logger.info("Qdrant client closed")

    # --- Private methods ---

    def _build_client(self) -> AsyncQdrantClient:
        mode = self._settings.qdrant_mode
        if mode == "memory":
            return AsyncQdrantClient(":memory:")
        elif mode == "docker":
            url = self._settings.qdrant_url or (
                f"http://{self._settings.qdrant_host}:{self._settings.qdrant_port}"
            )
            return AsyncQdrantClient(url=url)
        elif mode == "cloud":
            return AsyncQdrantClient(
                url=self._settings.qdrant_url,
                api_key=self._settings.qdrant_api_key,
            )
        else:
            raise IndexInitializationError(f"Unknown qdrant_mode: '{mode}'")

    @staticmethod
    def _point_to_candidate(point) -> MatchCandidate:
        payload = point.payload or {}
        score = point.score if point.score is not None else 0.0
        # Cosine similarity can be negative; candidates live in [0, 1]
        score = max(0.0, min(1.0, score))
        return MatchCandidate(
            id=payload.get("faq_id", str(point.id)),
            question=payload.get("question", ""),
            answer=payload.get("answer", ""),
            category=payload.get("category") or "general",
            score=score,
        )

    @staticmethod
    def _faq_to_point(faq: FAQ, vector: List[float]) -> PointStruct:
        return PointStruct(
            id=point_id(faq.id),
            vector=vector,
            payload={
                "faq_id": faq.id,
                "question": faq.question,
                "answer": faq.answer,
                "category": faq.category,
                "keywords": faq.keywords,
            },
        )
