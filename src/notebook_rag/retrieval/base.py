"""Abstract base class for vector-store backends.

Adding a new backend (Qdrant, Pinecone, Weaviate …) only requires
subclassing :class:`VectorStoreBase` and implementing the abstract
methods.  Collections are passed on every call, never held as state.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from langchain_core.documents import Document

from notebook_rag.retrieval.models import UpsertResult


class VectorStoreBase(ABC):
    """Backend-agnostic vector-store interface."""

    # -- required overrides ---------------------------------------------------

    @abstractmethod
    def upsert(
        self,
        collection: str,
        chunks: list[Document],
        embeddings: list[list[float]],
        *,
        embedding_model: str,
    ) -> UpsertResult:
        """Persist every chunk with its vector, or none of them.

        The collection is created on first write and pinned to
        *embedding_model* and the vectors' dimensionality.
        """
        ...

    @abstractmethod
    def search(
        self,
        collection: str,
        query_embedding: list[float],
        *,
        k: int = 5,
        fetch_k: int = 20,
        lambda_mult: float = 0.5,
        embedding_model: str | None = None,
    ) -> list[dict[str, Any]]:
        """Return up to *k* hits chosen by maximal marginal relevance.

        Each hit dict **must** contain:

        * ``"id"`` – chunk identifier
        * ``"content"`` – the textual content
        * ``"score"`` – similarity to the query (higher = more similar)
        * ``"metadata"`` – associated metadata dict

        A missing or empty collection yields ``[]``.
        """
        ...

    @abstractmethod
    def list_collections(self) -> list[str]:
        """Names of the collections that currently exist."""
        ...

    @abstractmethod
    def health_check(self) -> bool:
        """Return ``True`` when the backend is reachable and ready."""
        ...

    # -- optional overrides ---------------------------------------------------

    def count(self, collection: str) -> int:
        """Number of chunks stored in *collection*.  Optional — raises by default."""
        raise NotImplementedError(f"{type(self).__name__} does not support count")
