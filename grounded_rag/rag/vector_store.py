"""
Abstract vector store interface with two Chroma backends.

- ChromaRestVectorStore: talks to a Chroma server over its v2 REST API (httpx)
- ChromaVectorStore: uses the chromadb client library (HTTP, persistent or
  in-memory)

Collections are addressed by name for create/delete and by the store-assigned
id for add/query.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional, Sequence
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from grounded_rag.errors import CollectionResolutionError, VectorStoreError
from grounded_rag.rag.types import CollectionRecord, QueryResult
from grounded_rag.rag.wire import ChromaCollectionResponse, ChromaQueryResponse

LOG = logging.getLogger("rag.vector_store")

QUERY_INCLUDE = ["documents", "metadatas", "distances"]


class VectorStore(ABC):
    """
    Abstract interface for collection management and similarity search.

    Implementations must support:
      - Get-or-create of a collection by name
      - Deletion of a collection by name (missing collection is not an error)
      - Bulk insert of index-aligned ids/embeddings/documents/metadatas
      - Nearest-neighbour query by one or more embeddings
    """

    @abstractmethod
    def get_or_create_collection(self, name: str) -> CollectionRecord:
        """Return the collection called ``name``, creating it if needed."""

    @abstractmethod
    def delete_collection(self, name: str) -> None:
        """Delete the collection called ``name``. Not-found counts as success."""

    @abstractmethod
    def add(
        self,
        collection_id: str,
        ids: Sequence[str],
        embeddings: Sequence[Sequence[float]],
        documents: Sequence[str],
        metadatas: Sequence[Dict[str, Any]],
    ) -> None:
        """Insert records. All four sequences are parallel."""

    @abstractmethod
    def query(
        self,
        collection_id: str,
        query_embeddings: Sequence[Sequence[float]],
        n_results: int,
    ) -> QueryResult:
        """Return up to ``n_results`` neighbours per query embedding."""

    def close(self) -> None:
        """Release resources. Override if needed."""
        pass


def check_aligned(
    ids: Sequence[str],
    embeddings: Sequence[Sequence[float]],
    documents: Sequence[str],
    metadatas: Sequence[Dict[str, Any]],
) -> None:
    """Raise ValueError unless the four insert sequences have equal length."""
    lengths = {
        "ids": len(ids),
        "embeddings": len(embeddings),
        "documents": len(documents),
        "metadatas": len(metadatas),
    }
    if len(set(lengths.values())) != 1:
        raise ValueError(f"Insert sequences must have equal length, got {lengths}")


class ChromaRestVectorStore(VectorStore):
    """
    Chroma v2 REST API client.

    >>> store = ChromaRestVectorStore(url="http://localhost:8000")
    >>> store.heartbeat()
    True

    Args:
        url: Base URL of the Chroma server.
        tenant: Chroma tenant.
        database: Chroma database within the tenant.
        timeout: Per-request timeout in seconds.
        http_client: Pre-built httpx client (tests pass one with a mock transport).
    """

    def __init__(
        self,
        url: str = "http://localhost:8000",
        tenant: str = "default_tenant",
        database: str = "default_database",
        timeout: float = 30.0,
        http_client: Optional[httpx.Client] = None,
    ) -> None:
        self._url = url
        self._tenant = tenant
        self._database = database
        self._collections_path = f"/api/v2/tenants/{tenant}/databases/{database}/collections"
        self._client = http_client or httpx.Client(base_url=url, timeout=timeout)

    def heartbeat(self) -> bool:
        """True if the server answers its heartbeat endpoint."""
        try:
            resp = self._client.get("/api/v2/heartbeat")
            if not resp.is_success:
                return False
            return "nanosecond heartbeat" in resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            LOG.debug("Chroma heartbeat failed at %s: %s", self._url, exc)
            return False

    def get_or_create_collection(self, name: str) -> CollectionRecord:
        payload = {
            "name": name,
            "metadata": {"hnsw:space": "cosine"},
            "get_or_create": True,
        }
        resp = self._request("POST", self._collections_path, "getting/creating collection", json=payload)
        self._raise_for_status(resp, "get or create collection")
        data = self._json(resp, "get/create collection")
        try:
            parsed = ChromaCollectionResponse.model_validate(data)
        except ValidationError as exc:
            raise CollectionResolutionError(f"Failed to get or create collection ID. Response: {data!r}") from exc
        LOG.info("Chroma: collection %s resolved to %s", name, parsed.id)
        return CollectionRecord(id=parsed.id, name=parsed.name or name, metadata=parsed.metadata or {})

    def delete_collection(self, name: str) -> None:
        resp = self._request("DELETE", f"{self._collections_path}/{quote(name, safe='')}", "trying to delete collection")
        if resp.status_code == 404:
            LOG.info("Chroma: collection %s did not exist", name)
            return
        self._raise_for_status(resp, "delete collection")

    def add(
        self,
        collection_id: str,
        ids: Sequence[str],
        embeddings: Sequence[Sequence[float]],
        documents: Sequence[str],
        metadatas: Sequence[Dict[str, Any]],
    ) -> None:
        check_aligned(ids, embeddings, documents, metadatas)
        payload = {
            "ids": list(ids),
            "embeddings": [[float(x) for x in e] for e in embeddings],
            "documents": list(documents),
            "metadatas": [dict(m) for m in metadatas],
        }
        resp = self._request("POST", f"{self._collections_path}/{collection_id}/add", "adding documents", json=payload)
        self._raise_for_status(resp, "add documents")

    def query(
        self,
        collection_id: str,
        query_embeddings: Sequence[Sequence[float]],
        n_results: int,
    ) -> QueryResult:
        payload = {
            "query_embeddings": [[float(x) for x in q] for q in query_embeddings],
            "n_results": n_results,
            "include": QUERY_INCLUDE,
        }
        resp = self._request("POST", f"{self._collections_path}/{collection_id}/query", "querying collection", json=payload)
        self._raise_for_status(resp, "query collection")
        data = self._json(resp, "query")
        try:
            parsed = ChromaQueryResponse.model_validate(data)
        except ValidationError as exc:
            raise VectorStoreError(f"Malformed query response: {data!r}", resp.status_code, resp.text) from exc
        return QueryResult.from_dict(parsed.model_dump())

    def close(self) -> None:
        self._client.close()

    def _request(self, method: str, path: str, action: str, **kwargs: Any) -> httpx.Response:
        LOG.debug("%s %s", method, path)
        try:
            return self._client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            raise VectorStoreError(f"Connection failed while {action}: {exc}") from exc

    @staticmethod
    def _raise_for_status(resp: httpx.Response, action: str) -> None:
        if not resp.is_success:
            raise VectorStoreError(
                f"Failed to {action}. Status: {resp.status_code}, Body: {resp.text}",
                status_code=resp.status_code,
                body=resp.text,
            )

    @staticmethod
    def _json(resp: httpx.Response, action: str) -> Any:
        try:
            return resp.json()
        except ValueError as exc:
            raise VectorStoreError(
                f"Failed to parse JSON response from {action}.",
                status_code=resp.status_code,
                body=resp.text,
            ) from exc


class ChromaVectorStore(VectorStore):
    """
    chromadb-library vector store.

    Operates in three modes:
    - Client/server (HttpClient) when ``chroma_host`` is set
    - Embedded (PersistentClient) when ``persist_directory`` is set
    - Ephemeral in-memory client otherwise

    Collections resolved through ``get_or_create_collection`` are cached by id
    so later add/query calls can address them.
    """

    def __init__(
        self,
        chroma_host: Optional[str] = None,
        chroma_port: int = 8000,
        persist_directory: Optional[str] = None,
    ) -> None:
        import chromadb
        from chromadb import errors as chroma_errors

        # NotFoundError only exists from chromadb 0.6; older releases raise ValueError.
        self._not_found = getattr(chroma_errors, "NotFoundError", ())

        if chroma_host:
            self._client = chromadb.HttpClient(host=chroma_host, port=chroma_port)
            LOG.info("Chroma: connected to %s:%d", chroma_host, chroma_port)
        elif persist_directory:
            Path(persist_directory).mkdir(parents=True, exist_ok=True)
            self._client = chromadb.PersistentClient(path=persist_directory)
            LOG.info("Chroma: persistent at %s", persist_directory)
        else:
            self._client = chromadb.Client()
            LOG.info("Chroma: ephemeral (in-memory)")

        self._collections: Dict[str, Any] = {}

    def get_or_create_collection(self, name: str) -> CollectionRecord:
        collection = self._client.get_or_create_collection(
            name=name,
            metadata={"hnsw:space": "cosine"},
        )
        collection_id = str(collection.id) if collection.id else ""
        if not collection_id:
            raise CollectionResolutionError(f"Failed to get or create collection ID for {name!r}")
        self._collections[collection_id] = collection
        return CollectionRecord(id=collection_id, name=collection.name, metadata=dict(collection.metadata or {}))

    def delete_collection(self, name: str) -> None:
        try:
            self._client.delete_collection(name=name)
        except self._not_found:
            LOG.info("Chroma: collection %s did not exist", name)
        except ValueError as exc:
            if "does not exist" not in str(exc).lower():
                raise VectorStoreError(f"Failed to delete collection {name!r}: {exc}") from exc
            LOG.info("Chroma: collection %s did not exist", name)
        except Exception as exc:
            raise VectorStoreError(f"Failed to delete collection {name!r}: {exc}") from exc
        self._collections = {cid: c for cid, c in self._collections.items() if c.name != name}

    def add(
        self,
        collection_id: str,
        ids: Sequence[str],
        embeddings: Sequence[Sequence[float]],
        documents: Sequence[str],
        metadatas: Sequence[Dict[str, Any]],
    ) -> None:
        check_aligned(ids, embeddings, documents, metadatas)
        if not ids:
            return
        self._collection(collection_id).add(
            ids=list(ids),
            embeddings=[[float(x) for x in e] for e in embeddings],
            documents=list(documents),
            metadatas=[self._sanitize_metadata(m) for m in metadatas],
        )

    def query(
        self,
        collection_id: str,
        query_embeddings: Sequence[Sequence[float]],
        n_results: int,
    ) -> QueryResult:
        collection = self._collection(collection_id)
        n = min(n_results, collection.count())
        if n == 0:
            return QueryResult.empty(len(query_embeddings))

        results = collection.query(
            query_embeddings=[[float(x) for x in q] for q in query_embeddings],
            n_results=n,
            include=QUERY_INCLUDE,
        )
        return QueryResult.from_dict(dict(results))

    def count(self, collection_id: str) -> int:
        return self._collection(collection_id).count()

    def _collection(self, collection_id: str) -> Any:
        try:
            return self._collections[collection_id]
        except KeyError:
            raise VectorStoreError(
                f"Unknown collection id {collection_id!r}; call get_or_create_collection first"
            ) from None

    @staticmethod
    def _sanitize_metadata(meta: Dict[str, Any]) -> Dict[str, Any]:
        """Ensure metadata values are Chroma-compatible (str/int/float/bool)."""
        clean = {}
        for k, v in meta.items():
            if isinstance(v, (str, int, float, bool)):
                clean[k] = v
            elif v is None:
                continue
            else:
                clean[k] = str(v)
        return clean


def build_vector_store(
    backend: str = "rest",
    **kwargs: Any,
) -> VectorStore:
    """
    Factory: create a VectorStore of the requested type.

    Args:
        backend: "rest" (Chroma REST API) or "chroma" (chromadb library)
        **kwargs: Backend-specific configuration

    Raises:
        ValueError: Unknown backend
    """
    if backend == "rest":
        return ChromaRestVectorStore(**kwargs)
    elif backend == "chroma":
        return ChromaVectorStore(**kwargs)
    else:
        raise ValueError(
            f"Unknown vector store backend: {backend!r}. "
            f"Supported: 'rest', 'chroma'"
        )
