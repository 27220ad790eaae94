"""
RAG orchestrator: collection lifecycle, seeding and grounded question answering.

Sequences embedding → vector store → generation. Everything is synchronous;
each collaborator call blocks before the next one is issued.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional, Sequence
from uuid import uuid4

from grounded_rag.config.settings import RAGConfig
from grounded_rag.errors import CollectionResolutionError, UninitializedCollectionError
from grounded_rag.rag.embedding_provider import EmbeddingProvider
from grounded_rag.rag.generation_provider import GenerationProvider
from grounded_rag.rag.types import CollectionRecord
from grounded_rag.rag.vector_store import VectorStore

LOG = logging.getLogger("rag.orchestrator")

CONTEXT_SEPARATOR = "\n\n---\n\n"
NO_INFORMATION_ANSWER = "I'm sorry, I couldn't find any relevant information to answer that question."


def _new_document_id() -> str:
    return f"doc_{uuid4()}"


class RAGOrchestrator:
    """
    Owns one named collection and answers questions from its contents.

    Usage::

        orch = RAGOrchestrator(store, embedder, generator, config=RAGConfig())
        orch.delete_collection()
        orch.ensure_collection()
        orch.seed(["first document", "second document"])
        answer = orch.ask("what does the first document say?")
    """

    def __init__(
        self,
        vector_store: VectorStore,
        embedding_provider: EmbeddingProvider,
        generation_provider: GenerationProvider,
        collection_name: Optional[str] = None,
        config: Optional[RAGConfig] = None,
        id_factory: Callable[[], str] = _new_document_id,
    ) -> None:
        self._store = vector_store
        self._embedder = embedding_provider
        self._generator = generation_provider
        self._config = config or RAGConfig()
        self._collection_name = collection_name or self._config.collection_name
        self._collection_id: Optional[str] = None
        self._new_id = id_factory

    @property
    def collection_name(self) -> str:
        return self._collection_name

    @property
    def collection_id(self) -> Optional[str]:
        return self._collection_id

    @property
    def is_ready(self) -> bool:
        return self._collection_id is not None

    def ensure_collection(self) -> CollectionRecord:
        """Get or create the collection and remember its id."""
        LOG.info("Ensuring collection '%s' exists", self._collection_name)
        record = self._store.get_or_create_collection(self._collection_name)
        if record is None or not record.id:
            raise CollectionResolutionError(f"Failed to get or create collection ID. Response: {record!r}")
        self._collection_id = record.id
        LOG.debug("Collection '%s' has id %s", self._collection_name, record.id)
        return record

    def delete_collection(self) -> bool:
        """
        Delete the collection, ignoring any store error.

        Returns True if the store acknowledged the delete, False if an error was
        swallowed. The local id is cleared either way.
        """
        LOG.info("Sending delete request for '%s'", self._collection_name)
        deleted = False
        try:
            self._store.delete_collection(self._collection_name)
            deleted = True
        except Exception as exc:
            LOG.warning(
                "Collection '%s' didn't exist or couldn't be deleted (ignored): %s",
                self._collection_name,
                exc,
            )
        self._collection_id = None
        return deleted

    def seed(self, documents: Sequence[str]) -> list[str]:
        """
        Embed ``documents`` one at a time and insert them in a single batch.

        Returns the generated document ids, index-aligned with ``documents``.
        Any failure aborts the whole call; nothing is inserted in that case.
        """
        collection_id = self._require_collection()
        if not documents:
            LOG.info("Nothing to seed")
            return []

        ids: list[str] = []
        embeddings: list[list[float]] = []
        texts: list[str] = []
        metadatas: list[dict[str, str]] = []

        for i, doc in enumerate(documents):
            LOG.info("Embedding document %d/%d", i + 1, len(documents))
            ids.append(self._new_id())
            embeddings.append(self._embedder.embed(doc))
            texts.append(doc)
            metadatas.append({"source": f"seed_data_{i + 1}"})

        LOG.info("Adding %d documents to collection '%s'", len(ids), self._collection_name)
        self._store.add(collection_id, ids, embeddings, texts, metadatas)
        return ids

    def ask(self, question: str) -> str:
        """
        Answer ``question`` from the top-k documents of the collection.

        1. Embed the question
        2. Query the store for ``result_count`` neighbours
        3. Join the non-blank texts of the first result list into a context block
        4. Empty context → NO_INFORMATION_ANSWER, generator not called
        5. Otherwise return the generator's answer
        """
        collection_id = self._require_collection()

        LOG.info("Embedding question")
        query_embedding = self._embedder.embed(question)

        LOG.info("Querying collection '%s' for relevant documents", self._collection_name)
        result = self._store.query(
            collection_id,
            [query_embedding],
            self._config.result_count,
        )
        context = CONTEXT_SEPARATOR.join(result.first_documents())

        if not context:
            LOG.info("No relevant documents found")
            return NO_INFORMATION_ANSWER

        LOG.info("Generating answer based on context")
        return self._generator.generate(question, context)

    def _require_collection(self) -> str:
        if self._collection_id is None:
            raise UninitializedCollectionError("Collection ID not set. Call ensure_collection() first.")
        return self._collection_id
