"""
Typed result structures shared by the orchestrator and its collaborators.

Wire payloads are validated in ``rag.wire``; these dataclasses are what the
orchestrator sees.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from grounded_rag.errors import CollectionResolutionError

LOG = logging.getLogger("rag.types")


@dataclass
class CollectionRecord:
    """A server-side collection: store-assigned id plus caller-supplied name."""

    id: str
    name: str = ""
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "metadata": dict(self.metadata)}

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "CollectionRecord":
        collection_id = d.get("id") if isinstance(d, dict) else None
        if not collection_id:
            raise CollectionResolutionError(f"Failed to get or create collection ID. Response: {d!r}")
        return cls(
            id=str(collection_id),
            name=d.get("name") or "",
            metadata=dict(d.get("metadata") or {}),
        )


@dataclass
class QueryResult:
    """
    Nearest-neighbour results, one inner list per query vector.

    ``documents``, ``metadatas`` and ``distances`` are parallel to ``ids``.
    Ranking (most relevant first) is whatever the store returned.
    """

    ids: list[list[str]] = field(default_factory=list)
    documents: list[list[str]] = field(default_factory=list)
    metadatas: list[list[dict[str, Any]]] = field(default_factory=list)
    distances: list[list[float]] = field(default_factory=list)

    def first_documents(self) -> list[str]:
        """Non-blank texts of the first result list, or [] when the store sent none."""
        if not self.documents:
            return []
        return [doc for doc in self.documents[0] if doc.strip()]

    @property
    def n_queries(self) -> int:
        return len(self.ids)

    @classmethod
    def empty(cls, n_queries: int = 1) -> "QueryResult":
        return cls(
            ids=[[] for _ in range(n_queries)],
            documents=[[] for _ in range(n_queries)],
            metadatas=[[] for _ in range(n_queries)],
            distances=[[] for _ in range(n_queries)],
        )

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "QueryResult":
        """
        Build from a Chroma-shaped mapping.

        ``documents``/``metadatas``/``distances`` may be missing or null at
        either level. Null entries keep their slot so every list stays parallel
        to ``ids``: a null document becomes ``""``, a null distance ``nan``.
        """
        return cls(
            ids=[list(row or []) for row in (d.get("ids") or [])],
            documents=[[doc if doc is not None else "" for doc in (row or [])] for row in (d.get("documents") or [])],
            metadatas=[[meta or {} for meta in (row or [])] for row in (d.get("metadatas") or [])],
            distances=[[float(x) if x is not None else float("nan") for x in (row or [])] for row in (d.get("distances") or [])],
        )
