"""
Google Gemini REST client: embeddings and text generation.

Uses a synchronous httpx client. API key from the GEMINI_API_KEY environment
variable or passed directly; it is sent in the ``x-goog-api-key`` header.
"""

from __future__ import annotations

import logging
import os

import httpx
from pydantic import ValidationError

from grounded_rag.config.settings import GEMINI_API_URL
from grounded_rag.errors import ProviderRequestError, ProviderResponseError
from grounded_rag.rag.wire import GeminiEmbedResponse, GeminiGenerateResponse

LOG = logging.getLogger("rag.gemini")


def _model_path(model: str) -> str:
    return model[len("models/"):] if model.startswith("models/") else model


class GeminiClient:
    """
    Thin client for the two Gemini endpoints the RAG workflow needs.

    Usage::

        client = GeminiClient(api_key="...")
        vec = client.embed_content("gemini-embedding-001", "some text")
        text = client.generate_content("gemini-2.5-flash", prompt)
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str = GEMINI_API_URL,
        timeout: float = 60.0,
        http_client: httpx.Client | None = None,
    ) -> None:
        self._api_key = api_key or os.environ.get("GEMINI_API_KEY", "")
        if not self._api_key:
            raise ValueError("API key required. Set GEMINI_API_KEY or pass api_key=.")

        self._base_url = base_url
        self._client = http_client or httpx.Client(base_url=base_url, timeout=timeout)

    def embed_content(self, model: str, text: str) -> list[float]:
        name = _model_path(model)
        payload = {
            "model": f"models/{name}",
            "content": {"parts": [{"text": text}]},
        }
        data = self._post(f"/{name}:embedContent", payload, "embedding")
        try:
            return GeminiEmbedResponse.model_validate(data).embedding.values
        except ValidationError as exc:
            raise ProviderResponseError(f"Failed to parse embedding from Gemini response: {data!r}") from exc

    def generate_content(self, model: str, prompt: str) -> str:
        name = _model_path(model)
        payload = {"contents": [{"parts": [{"text": prompt}]}]}
        data = self._post(f"/{name}:generateContent", payload, "generation")
        try:
            return GeminiGenerateResponse.model_validate(data).answer_text()
        except ValidationError as exc:
            raise ProviderResponseError(f"Failed to parse answer from Gemini response: {data!r}") from exc

    def _post(self, path: str, payload: dict, what: str) -> object:
        LOG.debug("POST %s", path)
        try:
            resp = self._client.post(
                path,
                json=payload,
                headers={"x-goog-api-key": self._api_key},
            )
        except httpx.HTTPError as exc:
            raise ProviderRequestError(f"Gemini {what} request failed: {exc}") from exc

        if not resp.is_success:
            raise ProviderRequestError(
                f"Gemini {what} request failed. Status: {resp.status_code}, Body: {resp.text}",
                status_code=resp.status_code,
                body=resp.text,
            )
        try:
            return resp.json()
        except ValueError as exc:
            raise ProviderResponseError(
                f"Gemini {what} response is not valid JSON.",
                status_code=resp.status_code,
                body=resp.text,
            ) from exc

    def close(self) -> None:
        self._client.close()
