"""Tests for the grounding prompt, mock providers, Ollama and local embeddings."""

from __future__ import annotations

import json

import httpx
import pytest

from grounded_rag.errors import ProviderRequestError, ProviderResponseError
from grounded_rag.rag.embedding_provider import MockEmbeddingProvider
from grounded_rag.rag.generation_provider import (
    FALLBACK_PHRASE,
    MockGenerationProvider,
    OllamaGenerationProvider,
    build_grounded_prompt,
)


class TestBuildGroundedPrompt:
    def test_contains_question_and_context(self):
        prompt = build_grounded_prompt("Who is Mira?", "Mira is a developer.")
        assert "Who is Mira?" in prompt
        assert "Mira is a developer." in prompt

    def test_instructs_fallback(self):
        prompt = build_grounded_prompt("Q", "ctx")
        assert "*only*" in prompt
        assert f'"{FALLBACK_PHRASE}"' in prompt

    def test_context_between_dividers_before_question(self):
        prompt = build_grounded_prompt("Q", "A\n\n---\n\nB")
        assert "Context:\n---\nA\n\n---\n\nB\n---\n" in prompt
        assert prompt.index("Context:") < prompt.index("Question:\nQ")


class TestMockGenerationProvider:
    def test_default_answer(self):
        gen = MockGenerationProvider()
        assert gen.generate("q", "c") == "mock answer"

    def test_canned_responses_cycle(self):
        gen = MockGenerationProvider(responses=["one", "two"])
        assert [gen.generate("q", "c") for _ in range(3)] == ["one", "two", "one"]

    def test_records_calls(self):
        gen = MockGenerationProvider()
        assert gen.call_count == 0
        gen.generate("q1", "c1")
        assert gen.calls == [("q1", "c1")]
        assert gen.call_count == 1

    def test_close_is_noop(self):
        MockGenerationProvider().close()


class TestMockEmbeddingProvider:
    def test_default_zero_vector(self):
        assert MockEmbeddingProvider(dim=4).embed("x") == [0.0, 0.0, 0.0, 0.0]

    def test_fixed_vector_is_copied(self):
        emb = MockEmbeddingProvider(vector=[0.1, 0.2])
        vec = emb.embed("x")
        vec.append(9.9)
        assert emb.embed("y") == [0.1, 0.2]
        assert emb.calls == ["x", "y"]


class TestOllamaGenerationProvider:
    def _provider(self, mock_http, handler):
        return OllamaGenerationProvider(
            model="llama3",
            http_client=mock_http(handler, base_url="http://ollama.test"),
        )

    def test_request_and_answer(self, mock_http):
        seen = {}

        def handler(request):
            seen["path"] = request.url.path
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"model": "llama3", "response": "Berlin", "done": True})

        provider = self._provider(mock_http, handler)
        assert provider.generate("Where?", "Mira lives in Berlin.") == "Berlin"
        assert seen["path"] == "/api/generate"
        assert seen["body"]["model"] == "llama3"
        assert seen["body"]["stream"] is False
        assert "Mira lives in Berlin." in seen["body"]["prompt"]

    def test_missing_response_field(self, mock_http):
        provider = self._provider(mock_http, lambda r: httpx.Response(200, json={"done": True}))
        with pytest.raises(ProviderResponseError):
            provider.generate("q", "c")

    def test_invalid_json(self, mock_http):
        provider = self._provider(mock_http, lambda r: httpx.Response(200, text="garbage"))
        with pytest.raises(ProviderResponseError):
            provider.generate("q", "c")

    def test_error_status(self, mock_http):
        provider = self._provider(mock_http, lambda r: httpx.Response(404, text="model not found"))
        with pytest.raises(ProviderRequestError) as excinfo:
            provider.generate("q", "c")
        assert excinfo.value.status_code == 404

    def test_unreachable(self, mock_http):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(ProviderRequestError, match="not reachable"):
            self._provider(mock_http, handler).generate("q", "c")


class TestLocalEmbeddingProvider:
    def test_embed_single_text(self):
        pytest.importorskip("sentence_transformers")
        from grounded_rag.rag.embedding_provider import LocalEmbeddingProvider

        try:
            provider = LocalEmbeddingProvider()
        except Exception as exc:
            pytest.skip(f"Embedding model not available: {exc}")
        vec = provider.embed("hello world")
        assert len(vec) == provider.dimension()
        assert all(isinstance(x, float) for x in vec)
