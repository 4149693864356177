"""
Retrieval — vector storage and MMR search.

This module wraps the vector store behind a clean interface so that
the ingestion and chat layers never need to know which DB is backing
retrieval.

Public surface
--------------
- :class:`Retriever` — main entry point for query-time retrieval.
- :class:`VectorStoreBase` — abstract backend (subclass for Qdrant, etc.).
- :class:`ChromaVectorStore` — default Chroma backend.
- :class:`RetrievedChunk`, :class:`UpsertResult`, :class:`CollectionInfo` — data models.
"""

from notebook_rag.retrieval.base import VectorStoreBase
from notebook_rag.retrieval.models import CollectionInfo, RetrievedChunk, UpsertResult
from notebook_rag.retrieval.retriever import Retriever

__all__ = [
    "ChromaVectorStore",
    "CollectionInfo",
    "RetrievedChunk",
    "Retriever",
    "UpsertResult",
    "VectorStoreBase",
]


def __getattr__(name: str):  # noqa: ANN001
    """Lazy-import ChromaVectorStore to avoid pulling in chromadb at import time."""
    if name == "ChromaVectorStore":
        from notebook_rag.retrieval.chroma_store import ChromaVectorStore

        return ChromaVectorStore
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
