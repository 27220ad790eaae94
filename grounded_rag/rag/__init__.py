"""
Retrieval-augmented generation: collaborator contracts, their HTTP-backed
implementations, and the orchestrator that sequences them.
"""

from __future__ import annotations

from grounded_rag.rag.embedding_provider import EmbeddingProvider
from grounded_rag.rag.generation_provider import GenerationProvider, build_grounded_prompt
from grounded_rag.rag.orchestrator import CONTEXT_SEPARATOR, NO_INFORMATION_ANSWER, RAGOrchestrator
from grounded_rag.rag.types import CollectionRecord, QueryResult
from grounded_rag.rag.vector_store import VectorStore, build_vector_store

__all__ = [
    "CONTEXT_SEPARATOR",
    "CollectionRecord",
    "EmbeddingProvider",
    "GenerationProvider",
    "NO_INFORMATION_ANSWER",
    "QueryResult",
    "RAGOrchestrator",
    "VectorStore",
    "build_grounded_prompt",
    "build_vector_store",
]
