"""
Generation provider abstraction with Gemini, Ollama and mock backends.

Every backend answers from a prompt built by ``build_grounded_prompt`` so the
model is told to stay inside the retrieved context.
"""

from __future__ import annotations

import abc
import logging

import httpx
from pydantic import ValidationError

from grounded_rag.errors import ProviderRequestError, ProviderResponseError
from grounded_rag.rag.gemini import GeminiClient
from grounded_rag.rag.wire import OllamaGenerateResponse

LOG = logging.getLogger("rag.generation_provider")

FALLBACK_PHRASE = "I do not have that information."


class GenerationProvider(abc.ABC):
    """Abstract base class for grounded answer generation."""

    @abc.abstractmethod
    def generate(self, question: str, context: str) -> str:
        """Return an answer to ``question`` using only ``context``."""
        ...

    def close(self) -> None:
        """Clean up resources (e.g., HTTP clients). Override if needed."""
        pass


def build_grounded_prompt(question: str, context: str) -> str:
    """
    Build the grounding prompt.

    The model is instructed to answer only from the context and to reply with
    FALLBACK_PHRASE when the context does not contain the answer.
    """
    return (
        "You are a helpful assistant. Answer the following question based *only*\n"
        "on the provided context. If the answer is not in the context, say\n"
        f'"{FALLBACK_PHRASE}"\n'
        "\n"
        "Context:\n"
        "---\n"
        f"{context}\n"
        "---\n"
        "\n"
        "Question:\n"
        f"{question}\n"
    )


class GeminiGenerationProvider(GenerationProvider):
    """Answers from the Gemini ``generateContent`` endpoint."""

    def __init__(self, client: GeminiClient, model: str = "gemini-2.5-flash") -> None:
        self._client = client
        self._model = model

    def generate(self, question: str, context: str) -> str:
        prompt = build_grounded_prompt(question, context)
        return self._client.generate_content(self._model, prompt)

    def close(self) -> None:
        self._client.close()


class OllamaGenerationProvider(GenerationProvider):
    """
    Local generation using Ollama's HTTP API.

    Requires Ollama to be running locally: https://ollama.ai
    """

    def __init__(
        self,
        base_url: str = "http://localhost:11434",
        model: str = "llama3",
        timeout: float = 120.0,
        http_client: httpx.Client | None = None,
    ) -> None:
        self._base_url = base_url
        self._model = model
        self._client = http_client or httpx.Client(base_url=base_url, timeout=timeout)

    def generate(self, question: str, context: str) -> str:
        prompt = build_grounded_prompt(question, context)
        try:
            resp = self._client.post(
                "/api/generate",
                json={"model": self._model, "prompt": prompt, "stream": False},
            )
        except httpx.HTTPError as exc:
            raise ProviderRequestError(f"Ollama not reachable at {self._base_url}: {exc}") from exc

        if not resp.is_success:
            raise ProviderRequestError(
                f"Ollama generation failed. Status: {resp.status_code}, Body: {resp.text}",
                status_code=resp.status_code,
                body=resp.text,
            )
        try:
            return OllamaGenerateResponse.model_validate(resp.json()).response
        except (ValueError, ValidationError) as exc:
            raise ProviderResponseError(
                f"Failed to parse answer from Ollama response: {resp.text}",
                status_code=resp.status_code,
                body=resp.text,
            ) from exc

    def close(self) -> None:
        self._client.close()


class MockGenerationProvider(GenerationProvider):
    """
    Mock generation provider for testing.

    Returns canned responses in order (cycling) and records every call.
    """

    def __init__(self, responses: list[str] | None = None) -> None:
        self._responses = responses or ["mock answer"]
        self.calls: list[tuple[str, str]] = []

    def generate(self, question: str, context: str) -> str:
        response = self._responses[len(self.calls) % len(self._responses)]
        self.calls.append((question, context))
        return response

    @property
    def call_count(self) -> int:
        return len(self.calls)
