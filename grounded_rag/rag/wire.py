"""
Pydantic models for the JSON bodies exchanged with Gemini, Ollama and Chroma.

Only the fields the clients read are declared; everything else is ignored.
A body that fails validation here is a malformed provider response.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

# -- Gemini --


class GeminiEmbedding(BaseModel):
    values: List[float] = Field(min_length=1)


class GeminiEmbedResponse(BaseModel):
    embedding: GeminiEmbedding


class GeminiPart(BaseModel):
    text: str


class GeminiContent(BaseModel):
    parts: List[GeminiPart] = Field(min_length=1)


class GeminiCandidate(BaseModel):
    content: GeminiContent


class GeminiGenerateResponse(BaseModel):
    candidates: List[GeminiCandidate] = Field(min_length=1)

    def answer_text(self) -> str:
        return self.candidates[0].content.parts[0].text


# -- Ollama --


class OllamaGenerateResponse(BaseModel):
    model: Optional[str] = None
    response: str


# -- Chroma --


class ChromaCollectionResponse(BaseModel):
    id: str = Field(min_length=1)
    name: str = ""
    metadata: Optional[Dict[str, Any]] = None


class ChromaQueryResponse(BaseModel):
    ids: List[List[str]] = Field(default_factory=list)
    documents: Optional[List[Optional[List[Optional[str]]]]] = None
    metadatas: Optional[List[Optional[List[Optional[Dict[str, Any]]]]]] = None
    distances: Optional[List[Optional[List[Optional[float]]]]] = None
