"""
Shared test fixtures and pytest configuration.

Markers:
    @pytest.mark.integration: requires a running Chroma server at CHROMA_URL

Run:
    pytest                        # in-memory fakes and mock transports only
    pytest -m integration         # also hit a live Chroma server
"""

from __future__ import annotations

import os
from typing import Any, Dict, List, Optional, Sequence

import httpx
import pytest

from grounded_rag.config.settings import RAGConfig
from grounded_rag.rag.embedding_provider import MockEmbeddingProvider
from grounded_rag.rag.generation_provider import MockGenerationProvider
from grounded_rag.rag.orchestrator import RAGOrchestrator
from grounded_rag.rag.types import CollectionRecord, QueryResult
from grounded_rag.rag.vector_store import VectorStore, check_aligned


def _chroma_available() -> bool:
    """Check if a Chroma server answers its heartbeat at CHROMA_URL."""
    url = os.environ.get("CHROMA_URL", "http://localhost:8000")
    try:
        resp = httpx.get(f"{url}/api/v2/heartbeat", timeout=2.0)
        return resp.status_code == 200
    except httpx.HTTPError:
        return False


_CHROMA_OK: Optional[bool] = None


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: requires a running Chroma server at CHROMA_URL")


def pytest_collection_modifyitems(config, items):
    """Auto-skip integration tests when no Chroma server is reachable."""
    global _CHROMA_OK

    if not any("integration" in item.keywords for item in items):
        return
    if _CHROMA_OK is None:
        _CHROMA_OK = _chroma_available()

    skip_chroma = pytest.mark.skip(reason="Chroma server not available")
    for item in items:
        if "integration" in item.keywords and not _CHROMA_OK:
            item.add_marker(skip_chroma)


# ── In-memory vector store ───────────────────────────────────────────────────


class FakeVectorStore(VectorStore):
    """
    In-memory VectorStore that records every call.

    ``query`` returns the configured ``query_documents`` if set, otherwise the
    stored documents in insertion order (no similarity ranking).
    """

    def __init__(
        self,
        collection_id: str = "abc",
        query_documents: Optional[List[str]] = None,
        delete_error: Optional[Exception] = None,
    ) -> None:
        self.collection_id = collection_id
        self.query_documents = query_documents
        self.delete_error = delete_error
        self.calls: List[tuple] = []
        self.records: List[Dict[str, Any]] = []

    def get_or_create_collection(self, name: str) -> CollectionRecord:
        self.calls.append(("get_or_create_collection", name))
        return CollectionRecord.from_dict({"id": self.collection_id, "name": name})

    def delete_collection(self, name: str) -> None:
        self.calls.append(("delete_collection", name))
        if self.delete_error is not None:
            raise self.delete_error
        self.records.clear()

    def add(
        self,
        collection_id: str,
        ids: Sequence[str],
        embeddings: Sequence[Sequence[float]],
        documents: Sequence[str],
        metadatas: Sequence[Dict[str, Any]],
    ) -> None:
        check_aligned(ids, embeddings, documents, metadatas)
        self.calls.append(("add", collection_id, list(ids), list(embeddings), list(documents), list(metadatas)))
        for i, doc_id in enumerate(ids):
            self.records.append(
                {"id": doc_id, "embedding": embeddings[i], "document": documents[i], "metadata": metadatas[i]}
            )

    def query(
        self,
        collection_id: str,
        query_embeddings: Sequence[Sequence[float]],
        n_results: int,
    ) -> QueryResult:
        self.calls.append(("query", collection_id, list(query_embeddings), n_results))
        if self.query_documents is not None:
            docs = list(self.query_documents)
            return QueryResult(ids=[[f"id{i}" for i in range(len(docs))]], documents=[docs])
        hits = self.records[:n_results]
        return QueryResult(
            ids=[[r["id"] for r in hits]],
            documents=[[r["document"] for r in hits]],
            metadatas=[[r["metadata"] for r in hits]],
            distances=[[0.0 for _ in hits]],
        )

    def calls_named(self, name: str) -> List[tuple]:
        return [c for c in self.calls if c[0] == name]


# ── Fixtures ─────────────────────────────────────────────────────────────────


@pytest.fixture
def fake_store():
    return FakeVectorStore()


@pytest.fixture
def mock_embedder():
    return MockEmbeddingProvider(vector=[0.1, 0.2])


@pytest.fixture
def mock_generator():
    return MockGenerationProvider(responses=["Answer"])


@pytest.fixture
def orchestrator(fake_store, mock_embedder, mock_generator):
    return RAGOrchestrator(
        vector_store=fake_store,
        embedding_provider=mock_embedder,
        generation_provider=mock_generator,
        collection_name="test_docs",
        config=RAGConfig(result_count=3),
    )


def mock_http_client(handler, base_url: str = "http://test.local") -> httpx.Client:
    """httpx client whose requests are answered by ``handler(request)``."""
    return httpx.Client(transport=httpx.MockTransport(handler), base_url=base_url)


@pytest.fixture
def mock_http():
    return mock_http_client


@pytest.fixture
def make_store():
    return FakeVectorStore
