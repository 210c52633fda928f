"""Shared pytest fixtures for Yanıt tests."""

import hashlib
from typing import Any, Dict, List, Optional, Sequence, Tuple

import pytest

from yanit.backends.memory_store import MemoryStore
from yanit.config import Settings
from yanit.exceptions import EmbeddingError, StoreUnavailableError, VectorIndexError
from yanit.interfaces.analytics import AnalyticsSink
from yanit.interfaces.embedder import BaseEmbedder
from yanit.interfaces.kv_store import KeyValueStore
from yanit.interfaces.vector_index import VectorIndex
from yanit.types import FAQ, MatchCandidate


class MockEmbedder(BaseEmbedder):
    """Deterministic embedder for unit tests.

    Generates vectors by hashing the input text and spreading the hash
    across the requested dimension. Identical inputs always produce
    identical vectors. Every call is counted so cache tests can assert on
    provider traffic.
    """

    def __init__(self, dimension: int = 384):
        self._dimension = dimension
        self._model_name = "mock-embedder"
        self.calls: List[str] = []
        self.fail = False

    @property
    def dimension(self) -> int:
        return self._dimension

    @property
    def model_name(self) -> str:
        return self._model_name

    async def aembed(self, text: str) -> List[float]:
        """Generate a deterministic embedding from text hash."""
        text = self._require_text(text)
        self.calls.append(text)
        if self.fail:
            raise EmbeddingError("mock provider down")
        h = hashlib.sha256(text.encode("utf-8")).hexdigest()
        # Expand hash to fill dimension
        values = []
        for i in range(self._dimension):
            byte_val = int(h[(i * 2) % len(h) : (i * 2 + 2) % len(h) or len(h)], 16)
            values.append((byte_val / 255.0) * 2 - 1)  # Normalize to [-1, 1]
        # Normalize to unit vector
        magnitude = sum(v**2 for v in values) ** 0.5
        return [v / magnitude for v in values] if magnitude > 0 else values

    async def aembed_batch(self, texts: List[str]) -> List[List[float]]:
        return [await self.aembed(t) for t in texts]


def _cosine_similarity(a: List[float], b: List[float]) -> float:
    dot = sum(x * y for x, y in zip(a, b))
    mag_a = sum(x**2 for x in a) ** 0.5
    mag_b = sum(x**2 for x in b) ** 0.5
    if mag_a == 0 or mag_b == 0:
        return 0.0
    return dot / (mag_a * mag_b)


class InMemoryIndex(VectorIndex):
    """Brute-force cosine index kept in a dict."""

    def __init__(self):
        self._items: Dict[str, Tuple[FAQ, List[float]]] = {}
        self.dimension: Optional[int] = None
        self.closed = False

    async def initialize(self, dimension: int, **kwargs) -> None:
        self.dimension = dimension

    async def upsert(self, items: Sequence[Tuple[FAQ, List[float]]]) -> None:
        for faq, vector in items:
            self._items[faq.id] = (faq, vector)

    async def query(self, vector: List[float], top_k: int = 3) -> List[MatchCandidate]:
        scored = []
        for faq, v in self._items.values():
            score = max(0.0, min(1.0, _cosine_similarity(vector, v)))
            scored.append(
                MatchCandidate(
                    id=faq.id,
                    question=faq.question,
                    answer=faq.answer,
                    category=faq.category,
                    score=score,
                )
            )
        scored.sort(key=lambda c: c.score, reverse=True)
        return scored[:top_k]

    async def delete_by_ids(self, ids: Sequence[str]) -> None:
        for i in ids:
            self._items.pop(i, None)

    async def count(self) -> int:
        return len(self._items)

    async def close(self) -> None:
        self.closed = True


class StubIndex(VectorIndex):
    """Returns a fixed candidate list regardless of the query vector."""

    def __init__(self, candidates: List[MatchCandidate], sorted_results: bool = True):
        self.candidates = candidates
        self.sorted_results = sorted_results
        self.fail = False

    async def initialize(self, dimension: int, **kwargs) -> None:
        pass

    async def upsert(self, items: Sequence[Tuple[FAQ, List[float]]]) -> None:
        pass

    async def query(self, vector: List[float], top_k: int = 3) -> List[MatchCandidate]:
        if self.fail:
            raise VectorIndexError("stub index down")
        return list(self.candidates)

    async def delete_by_ids(self, ids: Sequence[str]) -> None:
        pass

    async def count(self) -> int:
        return len(self.candidates)

    async def close(self) -> None:
        pass


class FailingStore(KeyValueStore):
    """Store whose every operation raises StoreUnavailableError."""

    async def get(self, key: str) -> Optional[Any]:
        raise StoreUnavailableError("store down")

    async def put(self, key: str, value: Any, ttl_seconds: Optional[int] = None) -> None:
        raise StoreUnavailableError("store down")

    async def delete(self, key: str) -> bool:
        raise StoreUnavailableError("store down")

    async def list(self, prefix: str) -> List[str]:
        raise StoreUnavailableError("store down")


class RecordingSink(AnalyticsSink):
    """Collects tracked events in memory."""

    def __init__(self):
        self.events: List[Tuple[str, Dict[str, Any]]] = []
        self.closed = False

    async def track(self, event: str, properties: Dict[str, Any]) -> None:
        self.events.append((event, properties))

    async def close(self) -> None:
        self.closed = True


class ManualClock:
    """Settable time source in Unix seconds."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def candidate(id: str, score: float, category: str = "general") -> MatchCandidate:
    return MatchCandidate(
        id=id,
        question=f"Soru {id}",
        answer=f"Cevap {id}",
        category=category,
        score=score,
    )


@pytest.fixture
def mock_embedder():
    """Provide a mock embedder with dimension=384."""
    return MockEmbedder(dimension=384)


@pytest.fixture
def memory_store():
    return MemoryStore()


@pytest.fixture
def test_settings():
    """Provide test-friendly settings (in-memory Qdrant and store)."""
    return Settings(
        qdrant_mode="memory",
        store_backend="memory",
        similarity_threshold=0.70,
        fuzzy_threshold=0.60,
        top_k=3,
        mixpanel_token=None,
        faq_file=None,
    )


@pytest.fixture
def sample_faqs():
    """Provide a small Turkish FAQ corpus."""
    return [
        FAQ(
            id="sifre-1",
            question="Şifremi unuttum",
            answer="Giriş ekranındaki 'Şifremi unuttum' bağlantısını kullanın.",
            category="hesap",
            keywords=["şifre", "parola"],
        ),
        FAQ(
            id="sms-1",
            question="SMS doğrulama kodu gelmiyor",
            answer="Telefon numaranızın doğru olduğundan emin olun.",
            category="doğrulama",
        ),
        FAQ(
            id="qr-1",
            question="QR kodu okuturken hata alıyorum",
            answer="Kamera iznini kontrol edin.",
            category="giriş",
        ),
        FAQ(
            id="vardiya-1",
            question="Vardiyamı nasıl değiştiririm?",
            answer="Vardiya ekranından değişiklik talebi oluşturun.",
            category="vardiya",
        ),
    ]
