"""Ingestion pipeline — load → chunk → embed → store.

The store is written only after every chunk has been embedded, so a
failure in any earlier step leaves the target collection untouched.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from langchain_core.documents import Document
from pydantic import BaseModel

from notebook_rag.config import settings
from notebook_rag.exceptions import Failure, RAGError, Result, Success, ValidationError
from notebook_rag.ingestion.chunker import split_documents
from notebook_rag.ingestion.embedder import Embedder
from notebook_rag.ingestion.loader import load_csv, load_pdf, load_url
from notebook_rag.retrieval.base import VectorStoreBase

logger = logging.getLogger(__name__)


class IngestionReport(BaseModel):
    """Summary of one indexing request."""

    collection: str
    documents_count: int
    rows_processed: int | None = None
    created: bool = False
    source: str


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _require_collection(collection: str) -> None:
    if not collection or not collection.strip():
        raise ValidationError("Collection name is required", field="collection")


class IngestionPipeline:
    """Indexes PDFs, CSVs and web pages into named collections.

    Parameters
    ----------
    embedder:
        Embedding provider wrapper; its model name is recorded with
        every collection written.
    store:
        Vector-store backend.
    chunk_size / chunk_overlap:
        Splitter parameters.
    """

    def __init__(
        self,
        embedder: Embedder,
        store: VectorStoreBase,
        *,
        chunk_size: int = settings.chunk_size,
        chunk_overlap: int = settings.chunk_overlap,
    ) -> None:
        self.embedder = embedder
        self.store = store
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap

    # -- public API -----------------------------------------------------------

    def index_pdf(self, path: str | Path, collection: str, filename: str | None = None) -> IngestionReport:
        _require_collection(collection)
        name = filename or Path(path).name
        docs = load_pdf(path, filename=name)
        return self._index(docs, collection, {"uploadDate": _now()}, source=name)

    def index_csv(self, path: str | Path, collection: str, filename: str | None = None) -> IngestionReport:
        _require_collection(collection)
        name = filename or Path(path).name
        docs = load_csv(path, filename=name)
        report = self._index(docs, collection, {"uploadDate": _now()}, source=name)
        report.rows_processed = len(docs)
        return report

    def index_url(self, url: str, collection: str) -> IngestionReport:
        if not url or not url.strip():
            raise ValidationError("URL is required", field="url")
        _require_collection(collection)
        url = url.strip()
        docs = load_url(url)
        return self._index(docs, collection, {"source": url, "indexDate": _now()}, source=url)

    def run(self, step: Callable[..., IngestionReport], *args: Any, **kwargs: Any) -> Result[IngestionReport]:
        """Run one of the ``index_*`` methods, reporting errors as a :class:`Failure`."""
        try:
            return Success(step(*args, **kwargs))
        except RAGError as exc:
            logger.warning("Ingestion failed (%s): %s", exc.kind.value, exc)
            return Failure.from_error(exc)

    # -- internals ------------------------------------------------------------

    def _index(
        self,
        documents: list[Document],
        collection: str,
        extra_metadata: dict[str, Any],
        *,
        source: str,
    ) -> IngestionReport:
        chunks = split_documents(
            documents,
            extra_metadata,
            chunk_size=self.chunk_size,
            chunk_overlap=self.chunk_overlap,
        )
        if not chunks:
            raise ValidationError(f"No documents to index for {collection}", field="collection")

        vectors = self.embedder.embed([c.page_content for c in chunks])
        result = self.store.upsert(
            collection, chunks, vectors, embedding_model=self.embedder.model_name
        )
        logger.info(
            "Indexed %s: %d document(s) -> %d chunk(s) in %r%s",
            source,
            len(documents),
            result.count,
            collection,
            " (new collection)" if result.created else "",
        )
        return IngestionReport(
            collection=collection,
            documents_count=result.count,
            created=result.created,
            source=source,
        )
