"""Dependency providers for the FastAPI routes.

Each provider builds its object once per process; tests replace them
through ``app.dependency_overrides``.
"""

from __future__ import annotations

from functools import lru_cache

from notebook_rag.generation.chat import ChatService
from notebook_rag.generation.composer import AnswerComposer
from notebook_rag.ingestion.embedder import Embedder
from notebook_rag.ingestion.pipeline import IngestionPipeline
from notebook_rag.retrieval.base import VectorStoreBase
from notebook_rag.retrieval.retriever import Retriever


@lru_cache(maxsize=1)
def get_embedder() -> Embedder:
    return Embedder()


@lru_cache(maxsize=1)
def get_store() -> VectorStoreBase:
    from notebook_rag.retrieval.chroma_store import ChromaVectorStore

    return ChromaVectorStore()


@lru_cache(maxsize=1)
def get_pipeline() -> IngestionPipeline:
    return IngestionPipeline(get_embedder(), get_store())


@lru_cache(maxsize=1)
def get_chat_service() -> ChatService:
    return ChatService(Retriever(get_store(), get_embedder()), AnswerComposer())
