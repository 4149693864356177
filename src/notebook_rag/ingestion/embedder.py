"""Embedding provider wrapper.

Both ingestion and retrieval go through :class:`Embedder` so that one
collection is always written and queried with the same model.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from notebook_rag.config import settings
from notebook_rag.exceptions import EmbeddingError

if TYPE_CHECKING:
    from langchain_core.embeddings import Embeddings

logger = logging.getLogger(__name__)


def get_embedding_function(
    provider: str | None = None,
    model: str | None = None,
) -> Embeddings:
    """Return the configured LangChain embedding function.

    ``openai`` (default) calls the hosted embeddings API; ``huggingface``
    runs a sentence-transformer locally and needs the ``huggingface``
    extra installed.
    """
    provider = (provider or settings.embedding_provider).lower()
    model = model or settings.embedding_model

    if provider == "openai":
        from langchain_openai import OpenAIEmbeddings

        kwargs: dict = {
            "model": model,
            "max_retries": settings.provider_max_retries,
            "request_timeout": settings.request_timeout,
        }
        if settings.openai_api_key:
            kwargs["api_key"] = settings.openai_api_key
        if settings.embedding_base_url:
            kwargs["base_url"] = settings.embedding_base_url
        return OpenAIEmbeddings(**kwargs)

    if provider == "huggingface":
        from langchain_huggingface import HuggingFaceEmbeddings

        return HuggingFaceEmbeddings(model_name=model)

    raise ValueError(f"Unsupported embedding provider: {provider!r}")


class Embedder:
    """Maps texts to vectors, all-or-nothing per batch.

    Parameters
    ----------
    embeddings:
        A LangChain ``Embeddings`` implementation.  When *None*, one is
        built from the global settings.
    model_name:
        Identifier recorded with every collection this embedder writes to.
    """

    def __init__(self, embeddings: Embeddings | None = None, *, model_name: str | None = None) -> None:
        self._embeddings = embeddings if embeddings is not None else get_embedding_function()
        self.model_name = model_name or settings.embedding_model

    def embed(self, texts: list[str]) -> list[list[float]]:
        """Embed *texts*, returning one vector per text in the same order."""
        if not texts:
            return []
        try:
            vectors = self._embeddings.embed_documents(list(texts))
        except Exception as exc:
            raise EmbeddingError(
                f"Embedding provider failed: {exc}", {"model": self.model_name, "texts": len(texts)}
            ) from exc

        if len(vectors) != len(texts):
            raise EmbeddingError(
                f"Provider returned {len(vectors)} vectors for {len(texts)} texts",
                {"model": self.model_name},
            )
        dims = {len(v) for v in vectors}
        if len(dims) != 1 or 0 in dims:
            raise EmbeddingError(
                f"Provider returned vectors of inconsistent dimension {sorted(dims)}",
                {"model": self.model_name},
            )
        logger.debug("Embedded %d text(s) with %s", len(texts), self.model_name)
        return [list(v) for v in vectors]

    def embed_query(self, text: str) -> list[float]:
        """Embed a single query string."""
        try:
            vector = self._embeddings.embed_query(text)
        except Exception as exc:
            raise EmbeddingError(
                f"Embedding provider failed: {exc}", {"model": self.model_name}
            ) from exc
        if not vector:
            raise EmbeddingError("Provider returned an empty query vector", {"model": self.model_name})
        return list(vector)
