"""Text chunking strategies."""

from __future__ import annotations

import copy
from collections.abc import Mapping
from typing import Any

from langchain_core.documents import Document
from langchain_text_splitters import RecursiveCharacterTextSplitter

from notebook_rag.config import settings
from notebook_rag.exceptions import SplitError

SEPARATORS = ["\n\n", "\n", ". ", " ", ""]


def deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Recursively merge *override* into a copy of *base*; *override* wins."""
    merged = copy.deepcopy(dict(base))
    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), Mapping):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def split_documents(
    documents: list[Document],
    extra_metadata: Mapping[str, Any] | None = None,
    chunk_size: int | None = None,
    chunk_overlap: int | None = None,
) -> list[Document]:
    """Split *documents* into overlapping chunks for embedding.

    Parameters
    ----------
    documents:
        Source documents produced by a loader, in order.
    extra_metadata:
        Merged into every chunk's metadata; its keys win on collision.
    chunk_size:
        Maximum number of characters per chunk.
    chunk_overlap:
        Number of overlapping characters between consecutive chunks.

    Returns
    -------
    list[Document]
        Non-empty chunks in document order.
    """
    chunk_size = chunk_size or settings.chunk_size
    chunk_overlap = settings.chunk_overlap if chunk_overlap is None else chunk_overlap
    if not 0 <= chunk_overlap < chunk_size:
        raise SplitError(
            f"chunk_overlap ({chunk_overlap}) must be >= 0 and smaller than chunk_size ({chunk_size})"
        )
    try:
        splitter = RecursiveCharacterTextSplitter(
            chunk_size=chunk_size,
            chunk_overlap=chunk_overlap,
            length_function=len,
            separators=SEPARATORS,
        )
    except ValueError as exc:
        raise SplitError(str(exc), {"chunk_size": chunk_size, "chunk_overlap": chunk_overlap}) from exc

    extra = dict(extra_metadata or {})
    chunks: list[Document] = []
    for doc in documents:
        if not doc.page_content.strip():
            continue
        try:
            pieces = splitter.split_text(doc.page_content)
        except Exception as exc:
            raise SplitError(f"Splitter failed: {exc}") from exc
        metadata = deep_merge(doc.metadata, extra)
        chunks.extend(
            Document(page_content=piece, metadata=copy.deepcopy(metadata))
            for piece in pieces
            if piece.strip()
        )
    return chunks
