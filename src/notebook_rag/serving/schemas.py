"""Request / response schemas for the HTTP API."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from notebook_rag.config import settings
from notebook_rag.generation.models import SourceCitation


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ── Requests ──────────────────────────────────────────────────────────
class IndexUrlRequest(BaseModel):
    """A web page to index."""

    url: str = ""
    collection: str = Field(default_factory=lambda: settings.default_url_collection)


class ChatRequest(BaseModel):
    """Incoming question from the user."""

    message: str = ""
    collection: str = Field(default_factory=lambda: settings.default_chat_collection)


# ── Responses ─────────────────────────────────────────────────────────
class IndexResponse(_CamelModel):
    """Result of an indexing request."""

    success: bool = True
    message: str
    collection: str
    documents_count: int
    created: bool = False
    url: str | None = None
    rows_processed: int | None = None


class ChatResponse(_CamelModel):
    """Answer plus one citation per retrieved chunk."""

    success: bool = True
    response: str
    sources: list[SourceCitation] = Field(default_factory=list)
    collection: str


class CollectionsResponse(BaseModel):
    success: bool = True
    collections: list[str]


class HealthResponse(BaseModel):
    status: str = "OK"
    message: str = "RAG API Server is running"


class ErrorResponse(BaseModel):
    """Body of every failed request."""

    error: str
    details: str | None = None
