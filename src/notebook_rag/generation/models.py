"""Response models for answers and their citations.

Field names serialise in camelCase (``pageNumber``, ``contentPreview``)
because that is what the browser client reads.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

PREVIEW_CHARS = 200


def content_preview(text: str, limit: int = PREVIEW_CHARS) -> str:
    """First *limit* characters of *text*, with ``...`` when truncated."""
    if len(text) > limit:
        return text[:limit] + "..."
    return text


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SourceCitation(_CamelModel):
    """Where one retrieved chunk came from.

    Attributes
    ----------
    chunk:
        1-based position of the chunk in the retrieval result.
    page_number:
        PDF page (1-based).
    source:
        URL of an indexed web page.
    row:
        1-based CSV row.
    filename:
        Uploaded PDF or CSV name.
    content_preview:
        Truncated chunk text.
    """

    chunk: int
    page_number: int | None = None
    source: str | None = None
    row: int | None = None
    filename: str | None = None
    content_preview: str = ""

    @classmethod
    def from_chunk(cls, index: int, text: str, metadata: dict[str, Any]) -> SourceCitation:
        return cls(
            chunk=index,
            page_number=metadata.get("pageNumber"),
            source=metadata.get("source"),
            row=metadata.get("row"),
            filename=metadata.get("filename") or metadata.get("file"),
            content_preview=content_preview(text),
        )


class Answer(BaseModel):
    """Generated reply plus one citation per retrieved chunk."""

    text: str
    sources: list[SourceCitation] = Field(default_factory=list)


class ChatMessage(_CamelModel):
    """One turn of a conversation as the browser client stores it.

    The server never returns or persists these; callers keep the history
    and mark failed turns with ``is_error``.
    """

    role: Literal["user", "assistant"]
    content: str
    sources: list[SourceCitation] = Field(default_factory=list)
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    is_error: bool = False
