"""Exception hierarchy and the result type returned by pipeline boundaries.

Pipeline stages raise a :class:`RAGError` subclass.  The orchestrators
(:mod:`notebook_rag.ingestion.pipeline`, :mod:`notebook_rag.generation.chat`)
convert them into an explicit :class:`Failure` so the HTTP layer only
has to map an :class:`ErrorKind` to a status code.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, TypeVar, Union

T = TypeVar("T")


class ErrorKind(str, Enum):
    """Category of a pipeline failure."""

    VALIDATION = "validation"
    UPLOAD_TOO_LARGE = "upload_too_large"
    LOAD = "load"
    SPLIT = "split"
    EMBEDDING = "embedding"
    VECTOR_STORE = "vector_store"
    GENERATION = "generation"


class RAGError(Exception):
    """Base class for every error raised by the pipeline.

    Parameters
    ----------
    message:
        Human-readable description, surfaced to clients as ``details``.
    details:
        Extra key/value context for logs.
    """

    kind: ErrorKind = ErrorKind.VALIDATION

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ValidationError(RAGError):
    """A required field (file, URL, message, …) is missing or invalid."""

    kind = ErrorKind.VALIDATION

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message, {"field": field} if field else None)
        self.field = field


class UploadTooLargeError(ValidationError):
    """An uploaded file exceeds the configured size limit."""

    kind = ErrorKind.UPLOAD_TOO_LARGE

    def __init__(self, limit: int, field: str | None = None) -> None:
        super().__init__(f"File exceeds the {limit} byte upload limit", field=field)
        self.limit = limit


class LoadError(RAGError):
    """A source could not be read, fetched or parsed."""

    kind = ErrorKind.LOAD

    def __init__(self, source: str, message: str) -> None:
        super().__init__(f"Could not load {source}: {message}", {"source": source})
        self.source = source


class SplitError(RAGError):
    """The text splitter failed; indicates a programming error."""

    kind = ErrorKind.SPLIT


class EmbeddingError(RAGError):
    """The embedding provider failed or returned an unusable result."""

    kind = ErrorKind.EMBEDDING


class VectorStoreError(RAGError):
    """The vector store could not be reached or the collection is unusable."""

    kind = ErrorKind.VECTOR_STORE

    def __init__(self, collection: str, message: str) -> None:
        super().__init__(
            f"Vector store error on collection {collection!r}: {message}",
            {"collection": collection},
        )
        self.collection = collection


class GenerationError(RAGError):
    """The chat-completion provider failed."""

    kind = ErrorKind.GENERATION


# ---------------------------------------------------------------------------
# Result type
# ---------------------------------------------------------------------------


@dataclass
class Success(Generic[T]):
    """A pipeline run that completed."""

    value: T
    ok: bool = field(default=True, init=False)


@dataclass
class Failure:
    """A pipeline run that stopped on a :class:`RAGError`."""

    kind: ErrorKind
    message: str
    details: dict[str, Any] = field(default_factory=dict)
    ok: bool = field(default=False, init=False)

    @classmethod
    def from_error(cls, exc: RAGError) -> Failure:
        return cls(kind=exc.kind, message=exc.message, details=dict(exc.details))


Result = Union[Success[T], Failure]
