"""Chroma implementation of the vector-store abstraction."""

from __future__ import annotations

import hashlib
import json
import logging
import uuid
from collections.abc import Mapping
from typing import Any

import chromadb
import numpy as np
from langchain_community.vectorstores.utils import maximal_marginal_relevance
from langchain_core.documents import Document

from notebook_rag.config import settings
from notebook_rag.exceptions import ValidationError, VectorStoreError
from notebook_rag.retrieval.base import VectorStoreBase
from notebook_rag.retrieval.models import (
    EMBEDDING_DIM_KEY,
    EMBEDDING_MODEL_KEY,
    CollectionInfo,
    UpsertResult,
)

logger = logging.getLogger(__name__)

# Timestamps differ on every upload, so they are left out of content ids.
_VOLATILE_KEYS = frozenset({"uploadDate", "indexDate"})


def _is_missing_collection(exc: Exception) -> bool:
    """Whether *exc* is Chroma's "collection does not exist" error.

    The exception type changed across chromadb releases (``ValueError``,
    ``InvalidCollectionException``, ``NotFoundError``), so match on both
    the class name and the message.
    """
    if type(exc).__name__ in {"NotFoundError", "InvalidCollectionException"}:
        return True
    message = str(exc).lower()
    return "does not exist" in message or "not found" in message


def _flatten_metadata(metadata: Mapping[str, Any], prefix: str = "") -> dict[str, Any]:
    """Chroma metadata values must be flat str/int/float/bool."""
    flat: dict[str, Any] = {}
    for key, value in metadata.items():
        name = f"{prefix}{key}"
        if value is None:
            continue
        if isinstance(value, Mapping):
            flat.update(_flatten_metadata(value, f"{name}."))
        elif isinstance(value, (str, int, float, bool)):
            flat[name] = value
        else:
            flat[name] = str(value)
    return flat


def _content_id(collection: str, text: str, metadata: Mapping[str, Any]) -> str:
    stable = {k: v for k, v in metadata.items() if k not in _VOLATILE_KEYS}
    payload = json.dumps([collection, text, stable], sort_keys=True, default=str)
    return hashlib.sha256(payload.encode()).hexdigest()[:32]


class ChromaVectorStore(VectorStoreBase):
    """Chroma-backed vector store.

    Parameters
    ----------
    client:
        A ready ``chromadb`` client.  When *None*, an ``HttpClient`` is
        built from *host*, *port*, *ssl* and *api_key* on first use, and a
        failed connection is raised as :class:`VectorStoreError`.
    host:
        Chroma server hostname.
    port:
        Chroma server port.
    ssl:
        Use HTTPS.
    api_key:
        Optional bearer token sent with every request.
    deterministic_ids:
        Derive chunk ids from content so re-indexing the same source
        overwrites the earlier chunks instead of duplicating them.
    distance_metric:
        HNSW space for newly created collections (``cosine`` | ``l2`` | ``ip``).
    """

    def __init__(
        self,
        client: Any | None = None,
        *,
        host: str = settings.chroma_host,
        port: int = settings.chroma_port,
        ssl: bool = settings.chroma_ssl,
        api_key: str = settings.chroma_api_key,
        deterministic_ids: bool = settings.deterministic_chunk_ids,
        distance_metric: str = "cosine",
    ) -> None:
        self._client = client
        self.host = host
        self.port = port
        self.ssl = ssl
        self._api_key = api_key
        self.deterministic_ids = deterministic_ids
        self.distance_metric = distance_metric

    @property
    def client(self) -> Any:
        """The ``chromadb`` client, connecting on first access."""
        if self._client is None:
            headers = {"Authorization": f"Bearer {self._api_key}"} if self._api_key else None
            try:
                self._client = chromadb.HttpClient(
                    host=self.host, port=self.port, ssl=self.ssl, headers=headers
                )
            except Exception as exc:
                raise VectorStoreError(
                    "*", f"cannot reach Chroma at {self.host}:{self.port}: {exc}"
                ) from exc
        return self._client

    # -- writes ---------------------------------------------------------------

    def upsert(
        self,
        collection: str,
        chunks: list[Document],
        embeddings: list[list[float]],
        *,
        embedding_model: str,
    ) -> UpsertResult:
        if not chunks:
            raise ValidationError(f"No documents to index for {collection}", field="collection")
        if len(chunks) != len(embeddings):
            raise VectorStoreError(
                collection, f"{len(chunks)} chunks but {len(embeddings)} embeddings"
            )

        dim = len(embeddings[0])
        payload = self._build_payload(collection, chunks, embeddings)

        handle = self._open(collection)
        if handle is not None:
            self._check_space(handle, collection, embedding_model, dim)
            try:
                self._write(handle, payload)
                logger.info("Added %d chunk(s) to %r", len(chunks), collection)
                return UpsertResult(collection=collection, count=len(chunks))
            except Exception as exc:
                if not _is_missing_collection(exc):
                    raise VectorStoreError(collection, str(exc)) from exc
                logger.warning("Collection %r vanished before write; recreating", collection)

        # Collection missing: create it pinned to this embedding space and retry once.
        try:
            handle = self.client.get_or_create_collection(
                name=collection,
                metadata={
                    EMBEDDING_MODEL_KEY: embedding_model,
                    EMBEDDING_DIM_KEY: dim,
                    "hnsw:space": self.distance_metric,
                },
            )
            self._check_space(handle, collection, embedding_model, dim)
            self._write(handle, payload)
        except VectorStoreError:
            raise
        except Exception as exc:
            raise VectorStoreError(collection, str(exc)) from exc

        logger.info("Created collection %r with %d chunk(s)", collection, len(chunks))
        return UpsertResult(collection=collection, count=len(chunks), created=True)

    def _build_payload(
        self,
        collection: str,
        chunks: list[Document],
        embeddings: list[list[float]],
    ) -> dict[str, Any]:
        ids: list[str] = []
        seen: dict[str, int] = {}
        metadatas: list[dict[str, Any]] = []
        for chunk in chunks:
            flat = _flatten_metadata(chunk.metadata)
            metadatas.append(flat)
            if self.deterministic_ids:
                cid = _content_id(collection, chunk.page_content, flat)
                # Identical chunks within one batch still need distinct ids.
                n = seen.get(cid, 0)
                seen[cid] = n + 1
                ids.append(cid if n == 0 else f"{cid}-{n}")
            else:
                ids.append(uuid.uuid4().hex)

        return {
            "ids": ids,
            "embeddings": [list(map(float, v)) for v in embeddings],
            "documents": [c.page_content for c in chunks],
            "metadatas": metadatas if any(metadatas) else None,
        }

    def _write(self, handle: Any, payload: dict[str, Any]) -> None:
        # A single call so the batch is persisted entirely or not at all.
        if self.deterministic_ids:
            handle.upsert(**payload)
        else:
            handle.add(**payload)

    # -- reads ----------------------------------------------------------------

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
        handle = self._open(collection)
        if handle is None:
            logger.info("Collection %r does not exist; nothing to retrieve", collection)
            return []
        self._check_space(handle, collection, embedding_model, len(query_embedding))

        try:
            total = handle.count()
            if total == 0:
                return []
            results = handle.query(
                query_embeddings=[query_embedding],
                n_results=min(max(fetch_k, k), total),
                include=["documents", "metadatas", "distances", "embeddings"],
            )
        except Exception as exc:
            raise VectorStoreError(collection, str(exc)) from exc

        ids = _first(results.get("ids"))
        docs = _first(results.get("documents"))
        metas = _first(results.get("metadatas"))
        distances = _first(results.get("distances"))
        vectors = _first(results.get("embeddings"))
        if not ids:
            return []

        selected = maximal_marginal_relevance(
            np.array(query_embedding, dtype=np.float32),
            [np.asarray(v, dtype=np.float32) for v in vectors],
            lambda_mult=lambda_mult,
            k=min(k, len(ids)),
        )

        hits: list[dict[str, Any]] = []
        for i in selected:
            dist = distances[i] if len(distances) > i else None
            hits.append(
                {
                    "id": ids[i],
                    "content": (docs[i] if len(docs) > i else None) or "",
                    # Chroma returns distances; convert to a 0-1 similarity score.
                    "score": 1.0 / (1.0 + float(dist)) if dist is not None else None,
                    "metadata": (metas[i] if len(metas) > i else None) or {},
                }
            )
        return hits

    def list_collections(self) -> list[str]:
        client = self.client
        try:
            collections = client.list_collections()
        except Exception as exc:
            raise VectorStoreError("*", str(exc)) from exc
        # chromadb < 0.6 returns Collection objects, later releases return names.
        return [getattr(c, "name", c) for c in collections]

    def count(self, collection: str) -> int:
        handle = self._open(collection)
        if handle is None:
            return 0
        try:
            return handle.count()
        except Exception as exc:
            raise VectorStoreError(collection, str(exc)) from exc

    def health_check(self) -> bool:
        try:
            self.client.heartbeat()
            return True
        except Exception:
            logger.warning("Chroma health-check failed", exc_info=True)
            return False

    # -- internals ------------------------------------------------------------

    def _open(self, collection: str) -> Any | None:
        """Return the collection handle, or ``None`` when it does not exist."""
        client = self.client
        try:
            return client.get_collection(name=collection)
        except Exception as exc:
            if _is_missing_collection(exc):
                return None
            raise VectorStoreError(collection, str(exc)) from exc

    @staticmethod
    def _check_space(
        handle: Any,
        collection: str,
        embedding_model: str | None,
        dim: int | None,
    ) -> None:
        info = CollectionInfo.from_metadata(collection, handle.metadata)
        problem = info.mismatch(embedding_model, dim)
        if problem:
            raise VectorStoreError(collection, f"embedding space mismatch: {problem}")


def _first(batch: Any) -> list[Any]:
    """First row of a Chroma query result column (``[]`` when absent)."""
    if batch is None or len(batch) == 0:
        return []
    row = batch[0]
    return [] if row is None else list(row)
