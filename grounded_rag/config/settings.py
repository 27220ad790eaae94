"""Configuration management for grounded-rag.

Loads settings from environment variables with sensible defaults.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field

GEMINI_API_URL = "https://generativelanguage.googleapis.com/v1beta/models"


@dataclass
class RAGConfig:
    """Orchestrator configuration."""
    result_count: int = 3
    embedding_model: str = "gemini-embedding-001"
    generation_model: str = "gemini-2.5-flash"
    collection_name: str = "resume_data"

    def __post_init__(self) -> None:
        if self.result_count < 1:
            raise ValueError(f"result_count must be >= 1, got {self.result_count}")

    @classmethod
    def from_env(cls) -> "RAGConfig":
        return cls(
            result_count=int(os.getenv("RAG_RESULT_COUNT", "3")),
            embedding_model=os.getenv("EMBEDDING_MODEL", "gemini-embedding-001"),
            generation_model=os.getenv("GENERATION_MODEL", "gemini-2.5-flash"),
            collection_name=os.getenv("CHROMA_COLLECTION", "resume_data"),
        )


@dataclass
class ChromaConfig:
    """Vector store connection settings."""
    backend: str = "rest"  # "rest", "chroma"
    url: str = "http://localhost:8000"
    tenant: str = "default_tenant"
    database: str = "default_database"
    persist_dir: str = ""  # chroma backend only; empty = use url
    timeout: float = 30.0

    @classmethod
    def from_env(cls) -> "ChromaConfig":
        return cls(
            backend=os.getenv("VECTOR_STORE_BACKEND", "rest"),
            url=os.getenv("CHROMA_URL", "http://localhost:8000"),
            tenant=os.getenv("CHROMA_TENANT", "default_tenant"),
            database=os.getenv("CHROMA_DATABASE", "default_database"),
            persist_dir=os.getenv("CHROMA_PERSIST_DIR", ""),
            timeout=float(os.getenv("CHROMA_TIMEOUT", "30")),
        )


@dataclass
class GeminiConfig:
    """Google Gemini API settings."""
    api_key: str = ""
    base_url: str = GEMINI_API_URL
    timeout: float = 60.0

    @classmethod
    def from_env(cls) -> "GeminiConfig":
        return cls(
            api_key=os.getenv("GEMINI_API_KEY", ""),
            base_url=os.getenv("GEMINI_API_URL", GEMINI_API_URL),
            timeout=float(os.getenv("GEMINI_TIMEOUT", "60")),
        )


@dataclass
class OllamaConfig:
    """Local Ollama settings."""
    base_url: str = "http://localhost:11434"
    model: str = "llama3"
    timeout: float = 120.0

    @classmethod
    def from_env(cls) -> "OllamaConfig":
        return cls(
            base_url=os.getenv("OLLAMA_URL", "http://localhost:11434"),
            model=os.getenv("OLLAMA_MODEL", "llama3"),
            timeout=float(os.getenv("OLLAMA_TIMEOUT", "120")),
        )


@dataclass
class AppConfig:
    """Top-level application configuration."""
    rag: RAGConfig = field(default_factory=RAGConfig)
    chroma: ChromaConfig = field(default_factory=ChromaConfig)
    gemini: GeminiConfig = field(default_factory=GeminiConfig)
    ollama: OllamaConfig = field(default_factory=OllamaConfig)
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "AppConfig":
        return cls(
            rag=RAGConfig.from_env(),
            chroma=ChromaConfig.from_env(),
            gemini=GeminiConfig.from_env(),
            ollama=OllamaConfig.from_env(),
            log_level=os.getenv("GROUNDED_RAG_LOG_LEVEL", "INFO"),
        )
