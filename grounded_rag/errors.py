"""
Error taxonomy for grounded-rag.

Lifecycle errors (collection not resolved) are raised by the orchestrator.
Collaborator errors (transport, status, malformed body) are raised by the
HTTP-backed providers and propagate through the orchestrator unchanged.
"""

from __future__ import annotations


class RAGError(Exception):
    """Base class for all grounded-rag errors."""


class CollectionResolutionError(RAGError):
    """The vector store responded but did not supply a usable collection id."""


class UninitializedCollectionError(RAGError):
    """A data operation was invoked before the collection was resolved."""


class ProviderError(RAGError):
    """A collaborator (embedding, generation, vector store) call failed."""

    def __init__(self, message: str, status_code: int | None = None, body: str | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class ProviderRequestError(ProviderError):
    """Transport failure or non-success HTTP status from a model provider."""


class ProviderResponseError(ProviderError):
    """Provider answered with a body that is not JSON or lacks a required field."""


class VectorStoreError(ProviderError):
    """Vector store transport, status or payload failure."""
