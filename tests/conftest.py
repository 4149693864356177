"""Shared pytest configuration and fixtures."""

from __future__ import annotations

from typing import Any

import numpy as np
import pytest
from langchain_core.documents import Document
from langchain_core.embeddings import DeterministicFakeEmbedding

from notebook_rag.exceptions import ValidationError
from notebook_rag.ingestion.embedder import Embedder
from notebook_rag.retrieval.base import VectorStoreBase
from notebook_rag.retrieval.models import UpsertResult


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: marks tests requiring external services")


class InMemoryVectorStore(VectorStoreBase):
    """Dict-backed store; ranks by cosine similarity instead of MMR."""

    def __init__(self) -> None:
        self.collections: dict[str, dict[str, Any]] = {}
        self.upsert_calls = 0

    def upsert(
        self,
        collection: str,
        chunks: list[Document],
        embeddings: list[list[float]],
        *,
        embedding_model: str,
    ) -> UpsertResult:
        self.upsert_calls += 1
        if not chunks:
            raise ValidationError("No documents to index", field="collection")
        created = collection not in self.collections
        entry = self.collections.setdefault(
            collection, {"model": embedding_model, "dim": len(embeddings[0]), "items": []}
        )
        for chunk, vector in zip(chunks, embeddings):
            entry["items"].append((chunk.page_content, dict(chunk.metadata), vector))
        return UpsertResult(collection=collection, count=len(chunks), created=created)

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
        self.last_search = {"collection": collection, "k": k, "embedding_model": embedding_model}
        entry = self.collections.get(collection)
        if not entry:
            return []
        q = np.asarray(query_embedding)
        scored = []
        for i, (text, meta, vec) in enumerate(entry["items"]):
            v = np.asarray(vec)
            score = float(q @ v / (np.linalg.norm(q) * np.linalg.norm(v) or 1.0))
            scored.append({"id": str(i), "content": text, "score": score, "metadata": meta})
        scored.sort(key=lambda h: h["score"], reverse=True)
        return scored[:k]

    def list_collections(self) -> list[str]:
        return list(self.collections)

    def health_check(self) -> bool:
        return True

    def count(self, collection: str) -> int:
        entry = self.collections.get(collection)
        return len(entry["items"]) if entry else 0


@pytest.fixture()
def memory_store() -> InMemoryVectorStore:
    return InMemoryVectorStore()


@pytest.fixture()
def fake_embedder() -> Embedder:
    return Embedder(DeterministicFakeEmbedding(size=16), model_name="fake-embedding")
