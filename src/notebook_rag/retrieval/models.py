"""Domain models for vector-store writes and retrieval results."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

# Keys stored in a collection's metadata to pin its embedding space.
EMBEDDING_MODEL_KEY = "embedding_model"
EMBEDDING_DIM_KEY = "embedding_dim"


class CollectionInfo(BaseModel):
    """Embedding space recorded with a collection.

    Attributes
    ----------
    name:
        Collection name.
    embedding_model:
        Model used for every vector in the collection (``None`` for
        collections created outside this service).
    embedding_dim:
        Vector dimensionality.
    """

    name: str
    embedding_model: str | None = None
    embedding_dim: int | None = None

    @classmethod
    def from_metadata(cls, name: str, metadata: dict[str, Any] | None) -> CollectionInfo:
        metadata = metadata or {}
        dim = metadata.get(EMBEDDING_DIM_KEY)
        return cls(
            name=name,
            embedding_model=metadata.get(EMBEDDING_MODEL_KEY),
            embedding_dim=int(dim) if dim is not None else None,
        )

    def mismatch(self, embedding_model: str | None, embedding_dim: int | None) -> str | None:
        """Describe why a vector space differs from this one, or ``None``."""
        if embedding_model and self.embedding_model and embedding_model != self.embedding_model:
            return (
                f"collection was built with {self.embedding_model!r}, "
                f"got vectors from {embedding_model!r}"
            )
        if embedding_dim and self.embedding_dim and embedding_dim != self.embedding_dim:
            return f"collection holds {self.embedding_dim}-d vectors, got {embedding_dim}-d"
        return None


class UpsertResult(BaseModel):
    """Outcome of writing a batch of chunks."""

    collection: str
    count: int
    created: bool = False


class RetrievedChunk(BaseModel):
    """A single retrieved passage in rank order.

    Attributes
    ----------
    content:
        Chunk text.
    metadata:
        Metadata stored alongside the chunk.
    rank:
        1-based position in the retrieval result.
    document_id:
        Vector-store id of the chunk.
    score:
        Similarity to the query (higher = more similar), when known.
    """

    content: str
    metadata: dict[str, Any] = Field(default_factory=dict)
    rank: int
    document_id: str | None = None
    score: float | None = None

    def __str__(self) -> str:  # noqa: D105
        return f"#{self.rank} {self.content[:120]}…"
