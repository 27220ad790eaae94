"""
Interactive driver: reset and seed a collection, then answer questions.

Usage::

    grounded-rag                         # Gemini + Chroma REST, sample documents
    grounded-rag --seed-file notes.txt   # one document per non-empty line
    grounded-rag --generator ollama --embedder local --backend chroma
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Callable, List, Optional
from urllib.parse import urlparse

from dotenv import load_dotenv

from grounded_rag.config.settings import AppConfig
from grounded_rag.rag.embedding_provider import (
    EmbeddingProvider,
    GeminiEmbeddingProvider,
    LocalEmbeddingProvider,
)
from grounded_rag.rag.gemini import GeminiClient
from grounded_rag.rag.generation_provider import (
    GeminiGenerationProvider,
    GenerationProvider,
    OllamaGenerationProvider,
)
from grounded_rag.rag.orchestrator import RAGOrchestrator
from grounded_rag.rag.vector_store import ChromaRestVectorStore, VectorStore, build_vector_store

LOG = logging.getLogger("grounded_rag.cli")

EXIT_WORDS = {"exit", "quit"}

SAMPLE_DOCUMENTS = [
    "Mira Okafor is a Python developer with 8 years of experience.",
    "She specializes in backend systems and API development.",
    "Her recent project involved building a high-availability e-commerce platform.",
    "Jonas Lindqvist is a student at the Technical University of Munich.",
    "Mira is actively looking for a new software engineer role in Berlin.",
]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="grounded-rag",
        description="Seed a Chroma collection and answer questions grounded in it.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--collection", type=str, default=None, help="Collection name (default: CHROMA_COLLECTION).")
    parser.add_argument("--backend", choices=["rest", "chroma"], default=None,
                        help="Vector store backend (default: VECTOR_STORE_BACKEND).")
    parser.add_argument("--embedder", choices=["gemini", "local"], default="gemini", help="Embedding provider.")
    parser.add_argument("--generator", choices=["gemini", "ollama"], default="gemini", help="Generation provider.")
    parser.add_argument("--seed-file", type=Path, default=None,
                        help="Text file with one document per line; defaults to built-in sample documents.")
    parser.add_argument("--keep", action="store_true", help="Do not delete the collection before seeding.")
    parser.add_argument("--log-level", type=str, default=None, help="Logging level (default: GROUNDED_RAG_LOG_LEVEL).")
    return parser


def load_documents(path: Optional[Path]) -> List[str]:
    """One document per non-empty line of ``path``, or the sample documents."""
    if path is None:
        return list(SAMPLE_DOCUMENTS)
    lines = path.read_text(encoding="utf-8").splitlines()
    return [line.strip() for line in lines if line.strip()]


def build_vector_store_from_config(config: AppConfig) -> VectorStore:
    """Translate ChromaConfig into factory arguments. Unknown backends raise ValueError."""
    chroma = config.chroma
    if chroma.backend == "rest":
        kwargs = {
            "url": chroma.url,
            "tenant": chroma.tenant,
            "database": chroma.database,
            "timeout": chroma.timeout,
        }
    elif chroma.persist_dir:
        kwargs = {"persist_directory": chroma.persist_dir}
    else:
        parsed = urlparse(chroma.url)
        kwargs = {"chroma_host": parsed.hostname, "chroma_port": parsed.port or 8000}
    return build_vector_store(chroma.backend, **kwargs)


def build_embedding_provider(kind: str, config: AppConfig, gemini: Optional[GeminiClient]) -> EmbeddingProvider:
    if kind == "gemini":
        return GeminiEmbeddingProvider(gemini, model=config.rag.embedding_model)
    if kind == "local":
        return LocalEmbeddingProvider()
    raise ValueError(f"Unknown embedding provider: {kind!r}")


def build_generation_provider(kind: str, config: AppConfig, gemini: Optional[GeminiClient]) -> GenerationProvider:
    if kind == "gemini":
        return GeminiGenerationProvider(gemini, model=config.rag.generation_model)
    if kind == "ollama":
        return OllamaGenerationProvider(
            base_url=config.ollama.base_url,
            model=config.ollama.model,
            timeout=config.ollama.timeout,
        )
    raise ValueError(f"Unknown generation provider: {kind!r}")


def prepare_collection(orchestrator: RAGOrchestrator, documents: List[str], reset: bool = True) -> List[str]:
    """Optionally delete, then ensure and seed the collection."""
    name = orchestrator.collection_name
    if reset:
        print(f"Attempting to delete collection '{name}' (if it exists)...")
        orchestrator.delete_collection()

    print(f"Ensuring collection '{name}' exists...")
    orchestrator.ensure_collection()

    print(f"Seeding {len(documents)} documents...")
    ids = orchestrator.seed(documents)
    print("\nData seeding complete.")
    return ids


def question_loop(
    orchestrator: RAGOrchestrator,
    read: Optional[Callable[[str], str]] = None,
    write: Optional[Callable[[str], None]] = None,
) -> int:
    """Read questions until an exit word or EOF. Returns the number answered."""
    read = read or input
    write = write or print
    write("\n--- Ready to answer questions ---")
    write("Type your question and press Enter. Type 'exit' to quit.")

    answered = 0
    while True:
        try:
            question = read("\nQuestion: ").strip()
        except (EOFError, KeyboardInterrupt):
            break

        if question.lower() in EXIT_WORDS:
            break
        if not question:
            continue

        write("\nWorking...")
        answer = orchestrator.ask(question)
        write("\n--- Generated Answer ---")
        write(answer)
        write("------------------------")
        answered += 1

    write("Exiting RAG system. Goodbye!")
    return answered


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)
    config = AppConfig.from_env()
    if args.backend:
        config.chroma.backend = args.backend
    if args.collection:
        config.rag.collection_name = args.collection

    logging.basicConfig(
        level=(args.log_level or config.log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    needs_gemini = "gemini" in (args.embedder, args.generator)
    if needs_gemini and not config.gemini.api_key:
        print("Error: GEMINI_API_KEY not found. Please create a .env file with this key.", file=sys.stderr)
        return 1

    resources = []
    try:
        print("RAG system starting...")
        gemini = None
        if needs_gemini:
            gemini = GeminiClient(
                api_key=config.gemini.api_key,
                base_url=config.gemini.base_url,
                timeout=config.gemini.timeout,
            )
            resources.append(gemini)

        store = build_vector_store_from_config(config)
        resources.append(store)
        if isinstance(store, ChromaRestVectorStore) and not store.heartbeat():
            LOG.warning("Chroma server at %s did not answer its heartbeat", config.chroma.url)

        generator = build_generation_provider(args.generator, config, gemini)
        if isinstance(generator, OllamaGenerationProvider):
            resources.append(generator)

        orchestrator = RAGOrchestrator(
            vector_store=store,
            embedding_provider=build_embedding_provider(args.embedder, config, gemini),
            generation_provider=generator,
            config=config.rag,
        )
        prepare_collection(orchestrator, load_documents(args.seed_file), reset=not args.keep)
        question_loop(orchestrator)
    except Exception as exc:
        print(f"\nFAILURE: {exc}", file=sys.stderr)
        LOG.debug("Unhandled error", exc_info=True)
        return 1
    finally:
        for resource in resources:
            resource.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
