"""Prompt templates for grounded, cited answers."""

from __future__ import annotations

from typing import TYPE_CHECKING

from langchain_core.messages import HumanMessage, SystemMessage

if TYPE_CHECKING:
    from langchain_core.messages import BaseMessage

    from notebook_rag.retrieval.models import RetrievedChunk

I_DONT_KNOW = "I don't know, based on the provided documents."

SYSTEM_TEMPLATE = """\
You are an AI assistant who answers queries based ONLY on the given context.
Always cite the source:
- For PDFs -> include the page number and filename if available.
- For web docs -> include the source URL.
- For CSVs -> include row number and filename.

If the answer is not in the context, reply:
"{i_dont_know}"

Context:
{context}
"""


def chunk_header(index: int, metadata: dict) -> str:
    """``Chunk 2 (Page 4) (File: guide.pdf):`` with only the fields present."""
    parts = [f"Chunk {index}"]
    if metadata.get("pageNumber"):
        parts.append(f"(Page {metadata['pageNumber']})")
    if metadata.get("source"):
        parts.append(f"(Source: {metadata['source']})")
    if metadata.get("row"):
        parts.append(f"(Row: {metadata['row']}, File: {metadata.get('file', 'unknown')})")
    if metadata.get("filename"):
        parts.append(f"(File: {metadata['filename']})")
    return " ".join(parts) + ":"


def format_context(chunks: list[RetrievedChunk]) -> str:
    """Header plus text for every chunk, separated by a blank line."""
    return "\n\n".join(
        f"{chunk_header(i, chunk.metadata)}\n{chunk.content}" for i, chunk in enumerate(chunks, 1)
    )


def build_answer_prompt(query: str, chunks: list[RetrievedChunk]) -> list[BaseMessage]:
    """Assemble the system + user messages for one grounded answer.

    Parameters
    ----------
    query:
        The user question, sent verbatim as the human message.
    chunks:
        Retrieved context in rank order.

    Returns
    -------
    list[BaseMessage]
        A list of LangChain message objects ready for ``.invoke()``.
    """
    system = SYSTEM_TEMPLATE.format(i_dont_know=I_DONT_KNOW, context=format_context(chunks))
    return [
        SystemMessage(content=system),
        HumanMessage(content=query),
    ]
