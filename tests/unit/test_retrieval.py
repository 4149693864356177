"""Unit tests for the retrieval layer — models and Retriever."""

from __future__ import annotations

from typing import Any

import pytest
from langchain_core.documents import Document

from notebook_rag.exceptions import ValidationError
from notebook_rag.ingestion.embedder import Embedder
from notebook_rag.retrieval.base import VectorStoreBase
from notebook_rag.retrieval.models import CollectionInfo, RetrievedChunk, UpsertResult
from notebook_rag.retrieval.retriever import Retriever


# ── Fake vector store for deterministic testing ─────────────────────────


class FakeVectorStore(VectorStoreBase):
    """In-memory fake that returns canned results."""

    def __init__(self, hits: list[dict[str, Any]] | None = None) -> None:
        self._hits: list[dict[str, Any]] = hits or []
        self.last_call: dict[str, Any] | None = None

    def upsert(self, collection, chunks, embeddings, *, embedding_model) -> UpsertResult:
        raise NotImplementedError

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
        self.last_call = {
            "collection": collection,
            "vector": query_embedding,
            "k": k,
            "fetch_k": fetch_k,
            "lambda_mult": lambda_mult,
            "embedding_model": embedding_model,
        }
        return self._hits[:k]

    def list_collections(self) -> list[str]:
        return []

    def health_check(self) -> bool:
        return True


SAMPLE_HITS: list[dict[str, Any]] = [
    {
        "id": "c-1",
        "content": "Closures capture variables from the enclosing scope.",
        "score": 0.92,
        "metadata": {"source": "https://developer.mozilla.org/closures"},
    },
    {
        "id": "c-2",
        "content": "Revenue grew 12% in Q3.",
        "score": 0.87,
        "metadata": {"filename": "report.pdf", "pageNumber": 4},
    },
    {
        "id": "c-3",
        "content": "name: ada\nscore: 10",
        "score": 0.45,
        "metadata": {"row": 1, "file": "scores.csv"},
    },
]


@pytest.fixture()
def fake_store() -> FakeVectorStore:
    return FakeVectorStore(hits=SAMPLE_HITS)


@pytest.fixture()
def retriever(fake_store: FakeVectorStore, fake_embedder: Embedder) -> Retriever:
    return Retriever(fake_store, fake_embedder, default_k=5, fetch_k=20, lambda_mult=0.5)


class TestRetriever:
    def test_results_in_rank_order(self, retriever: Retriever) -> None:
        results = retriever.retrieve("docs", "What is a closure?")
        assert [r.rank for r in results] == [1, 2, 3]
        assert [r.document_id for r in results] == ["c-1", "c-2", "c-3"]
        assert all(isinstance(r, RetrievedChunk) for r in results)

    def test_query_embedded_with_collection_model(
        self, retriever: Retriever, fake_store: FakeVectorStore, fake_embedder: Embedder
    ) -> None:
        retriever.retrieve("docs", "closure")
        assert fake_store.last_call is not None
        assert fake_store.last_call["collection"] == "docs"
        assert fake_store.last_call["embedding_model"] == "fake-embedding"
        assert fake_store.last_call["vector"] == fake_embedder.embed_query("closure")

    def test_explicit_k_overrides_default(self, retriever: Retriever, fake_store: FakeVectorStore) -> None:
        assert len(retriever.retrieve("docs", "anything", k=1)) == 1
        assert fake_store.last_call["k"] == 1

    def test_fetch_k_never_below_k(self, fake_store: FakeVectorStore, fake_embedder: Embedder) -> None:
        retriever = Retriever(fake_store, fake_embedder, default_k=30, fetch_k=20)
        retriever.retrieve("docs", "anything")
        assert fake_store.last_call["fetch_k"] == 30

    def test_empty_store_returns_empty(self, fake_embedder: Embedder) -> None:
        retriever = Retriever(FakeVectorStore(hits=[]), fake_embedder)
        assert retriever.retrieve("missing-collection", "anything") == []

    def test_missing_collection_never_raises(self, memory_store, fake_embedder: Embedder) -> None:
        assert Retriever(memory_store, fake_embedder).retrieve("nope", "q") == []

    @pytest.mark.parametrize("query", ["", "   "])
    def test_blank_query_rejected(self, retriever: Retriever, query: str) -> None:
        with pytest.raises(ValidationError):
            retriever.retrieve("docs", query)

    def test_missing_metadata_handled(self, fake_embedder: Embedder) -> None:
        store = FakeVectorStore(hits=[{"id": "x", "content": "text", "score": None, "metadata": None}])
        result = Retriever(store, fake_embedder).retrieve("docs", "q")[0]
        assert result.metadata == {}
        assert result.score is None


class TestCollectionInfo:
    def test_from_metadata(self) -> None:
        info = CollectionInfo.from_metadata("c", {"embedding_model": "m", "embedding_dim": 3, "hnsw:space": "cosine"})
        assert info.embedding_model == "m"
        assert info.embedding_dim == 3

    def test_unrecorded_space_accepts_anything(self) -> None:
        assert CollectionInfo.from_metadata("c", None).mismatch("m", 3) is None

    def test_mismatch_messages(self) -> None:
        info = CollectionInfo(name="c", embedding_model="m", embedding_dim=3)
        assert info.mismatch("m", 3) is None
        assert "built with" in info.mismatch("other", 3)
        assert "3-d" in info.mismatch("m", 4)


def test_retrieved_chunk_str() -> None:
    chunk = RetrievedChunk(content="Some long content about closures.", rank=2)
    assert str(chunk).startswith("#2 Some long content")


def test_round_trip_through_memory_store(memory_store, fake_embedder: Embedder) -> None:
    chunk = Document(page_content="Alpha Beta Gamma", metadata={"filename": "greek.pdf"})
    memory_store.upsert(
        "greek", [chunk], fake_embedder.embed([chunk.page_content]), embedding_model=fake_embedder.model_name
    )
    results = Retriever(memory_store, fake_embedder).retrieve("greek", "Beta")
    assert [r.content for r in results] == ["Alpha Beta Gamma"]
