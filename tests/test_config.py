"""Tests for environment-driven configuration."""

import pytest

from grounded_rag.config.settings import GEMINI_API_URL, AppConfig, ChromaConfig, RAGConfig


class TestRAGConfig:
    def test_defaults(self):
        cfg = RAGConfig()
        assert cfg.result_count == 3
        assert cfg.embedding_model == "gemini-embedding-001"
        assert cfg.collection_name == "resume_data"

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("RAG_RESULT_COUNT", "5")
        monkeypatch.setenv("EMBEDDING_MODEL", "text-embedding-004")
        monkeypatch.setenv("GENERATION_MODEL", "gemini-2.0-flash")
        monkeypatch.setenv("CHROMA_COLLECTION", "notes")
        cfg = RAGConfig.from_env()
        assert cfg.result_count == 5
        assert cfg.embedding_model == "text-embedding-004"
        assert cfg.generation_model == "gemini-2.0-flash"
        assert cfg.collection_name == "notes"

    @pytest.mark.parametrize("count", [0, -1])
    def test_rejects_non_positive_result_count(self, count):
        with pytest.raises(ValueError, match="result_count"):
            RAGConfig(result_count=count)


class TestAppConfig:
    def test_from_env_defaults(self, monkeypatch):
        for var in (
            "VECTOR_STORE_BACKEND", "CHROMA_URL", "CHROMA_TENANT", "CHROMA_DATABASE",
            "CHROMA_PERSIST_DIR", "CHROMA_TIMEOUT", "GEMINI_API_KEY", "GEMINI_API_URL", "GROUNDED_RAG_LOG_LEVEL",
        ):
            monkeypatch.delenv(var, raising=False)
        cfg = AppConfig.from_env()
        assert cfg.chroma == ChromaConfig()
        assert cfg.gemini.api_key == ""
        assert cfg.gemini.base_url == GEMINI_API_URL
        assert cfg.log_level == "INFO"

    def test_from_env_overrides(self, monkeypatch):
        monkeypatch.setenv("VECTOR_STORE_BACKEND", "chroma")
        monkeypatch.setenv("CHROMA_PERSIST_DIR", "/tmp/chroma")
        monkeypatch.setenv("GEMINI_API_KEY", "k")
        monkeypatch.setenv("OLLAMA_MODEL", "mistral")
        monkeypatch.setenv("GROUNDED_RAG_LOG_LEVEL", "DEBUG")
        cfg = AppConfig.from_env()
        assert cfg.chroma.backend == "chroma"
        assert cfg.chroma.persist_dir == "/tmp/chroma"
        assert cfg.gemini.api_key == "k"
        assert cfg.ollama.model == "mistral"
        assert cfg.log_level == "DEBUG"
