"""
Embedding provider abstraction with Gemini, local and mock backends.

sentence-transformers is only needed for LocalEmbeddingProvider; install the
[local] extra to use it.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from grounded_rag.rag.gemini import GeminiClient

LOG = logging.getLogger("rag.embedding_provider")


class EmbeddingProvider(ABC):
    """Abstract interface for text → embedding vector conversion."""

    @abstractmethod
    def embed(self, text: str) -> list[float]:
        """
        Convert one text into an embedding vector.

        Dimensionality is fixed by the provider's model.
        """
        ...

    def close(self) -> None:
        """Release resources. Override if needed."""
        pass


class GeminiEmbeddingProvider(EmbeddingProvider):
    """Embeddings from the Gemini ``embedContent`` endpoint."""

    def __init__(self, client: GeminiClient, model: str = "gemini-embedding-001") -> None:
        self._client = client
        self._model = model

    def embed(self, text: str) -> list[float]:
        return self._client.embed_content(self._model, text)

    def close(self) -> None:
        self._client.close()


class LocalEmbeddingProvider(EmbeddingProvider):
    """
    Local embedding via sentence-transformers.

    Default model: all-MiniLM-L6-v2 (384 dimensions). Useful when no API key
    is available; do not mix its vectors with Gemini vectors in one collection.
    """

    def __init__(self, model_name: str = "all-MiniLM-L6-v2") -> None:
        from sentence_transformers import SentenceTransformer

        self._model_name = model_name
        LOG.info("Loading embedding model: %s", model_name)
        self._model = SentenceTransformer(model_name)
        self._dim = self._model.get_sentence_embedding_dimension()

    def embed(self, text: str) -> list[float]:
        vectors = self._model.encode([text], show_progress_bar=False)
        return [float(x) for x in vectors[0]]

    def dimension(self) -> int:
        return self._dim


class MockEmbeddingProvider(EmbeddingProvider):
    """Mock embedding provider for testing. Returns a fixed vector and records inputs."""

    def __init__(self, vector: list[float] | None = None, dim: int = 8) -> None:
        self._vector = list(vector) if vector is not None else [0.0] * dim
        self.calls: list[str] = []

    def embed(self, text: str) -> list[float]:
        self.calls.append(text)
        return list(self._vector)

    @property
    def call_count(self) -> int:
        return len(self.calls)
