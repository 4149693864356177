"""Retriever — embeds a query and runs an MMR search over one collection.

Usage::

    from notebook_rag.retrieval.retriever import Retriever

    retriever = Retriever()
    for chunk in retriever.retrieve("mdn-docs-collection", "What is a closure?"):
        print(chunk.rank, chunk.content[:80])
"""

from __future__ import annotations

import logging
from typing import Any

from notebook_rag.config import settings
from notebook_rag.exceptions import ValidationError
from notebook_rag.ingestion.embedder import Embedder
from notebook_rag.retrieval.base import VectorStoreBase
from notebook_rag.retrieval.models import RetrievedChunk

logger = logging.getLogger(__name__)


class Retriever:
    """High-level retriever over any :class:`VectorStoreBase`.

    Parameters
    ----------
    store:
        A concrete vector-store backend.  When *None*, a default
        :class:`~notebook_rag.retrieval.chroma_store.ChromaVectorStore`
        is created from the global settings.
    embedder:
        Must be configured like the one used at ingestion time; its
        model name is checked against the collection's record.
    default_k:
        Default number of results returned by :meth:`retrieve`.
    fetch_k:
        Candidates fetched before the MMR re-selection.
    lambda_mult:
        MMR trade-off: 1 favours relevance, 0 favours diversity.
    """

    def __init__(
        self,
        store: VectorStoreBase | None = None,
        embedder: Embedder | None = None,
        *,
        default_k: int = settings.retrieval_k,
        fetch_k: int = settings.mmr_fetch_k,
        lambda_mult: float = settings.mmr_lambda,
    ) -> None:
        if store is None:
            from notebook_rag.retrieval.chroma_store import ChromaVectorStore

            store = ChromaVectorStore()
        self._store = store
        self._embedder = embedder if embedder is not None else Embedder()
        self.default_k = default_k
        self.fetch_k = fetch_k
        self.lambda_mult = lambda_mult

    def retrieve(self, collection: str, query: str, *, k: int | None = None) -> list[RetrievedChunk]:
        """Return up to *k* chunks from *collection* in rank order.

        A missing or empty collection is a normal outcome and yields an
        empty list.
        """
        if not query or not query.strip():
            raise ValidationError("Query is required", field="message")
        k = k or self.default_k

        vector = self._embedder.embed_query(query)
        raw_hits = self._store.search(
            collection,
            vector,
            k=k,
            fetch_k=max(self.fetch_k, k),
            lambda_mult=self.lambda_mult,
            embedding_model=self._embedder.model_name,
        )
        results = self._to_results(raw_hits)
        logger.info("Retrieved %d chunk(s) from %r", len(results), collection)
        return results

    @staticmethod
    def _to_results(raw_hits: list[dict[str, Any]]) -> list[RetrievedChunk]:
        return [
            RetrievedChunk(
                content=hit.get("content", ""),
                metadata=hit.get("metadata") or {},
                rank=rank,
                document_id=hit.get("id"),
                score=hit.get("score"),
            )
            for rank, hit in enumerate(raw_hits, 1)
        ]
