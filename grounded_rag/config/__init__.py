from grounded_rag.config.settings import AppConfig, ChromaConfig, GeminiConfig, OllamaConfig, RAGConfig

__all__ = ["AppConfig", "ChromaConfig", "GeminiConfig", "OllamaConfig", "RAGConfig"]
