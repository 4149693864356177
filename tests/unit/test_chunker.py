"""Unit tests for the chunker module."""

import pytest
from langchain_core.documents import Document

from notebook_rag.exceptions import SplitError
from notebook_rag.ingestion.chunker import deep_merge, split_documents


def _numbered_text(n: int = 600) -> str:
    # Unique tokens so every chunk can be located in the source text.
    return " ".join(f"token{i:04d}" for i in range(n))


def test_split_documents_splits_long_text() -> None:
    """A document longer than chunk_size should be split."""
    docs = [Document(page_content=_numbered_text(), metadata={"filename": "a.pdf"})]
    chunks = split_documents(docs, chunk_size=1000, chunk_overlap=200)
    assert len(chunks) > 1
    assert all(0 < len(c.page_content) <= 1000 for c in chunks)


def test_chunks_reconstruct_source_text() -> None:
    """Consecutive chunks overlap or touch, covering the text in order."""
    text = _numbered_text()
    chunks = split_documents([Document(page_content=text)], chunk_size=1000, chunk_overlap=200)

    position = -1
    previous_end = 0
    for chunk in chunks:
        start = text.find(chunk.page_content, position + 1)
        assert start != -1
        # At most the separating space sits between two chunks.
        assert start <= previous_end + 1
        position, previous_end = start, start + len(chunk.page_content)

    assert text.startswith(chunks[0].page_content)
    assert text.endswith(chunks[-1].page_content)


def test_consecutive_chunks_share_overlap() -> None:
    text = _numbered_text()
    chunks = split_documents([Document(page_content=text)], chunk_size=1000, chunk_overlap=200)
    first, second = chunks[0].page_content, chunks[1].page_content
    assert text.find(second) < len(first)


def test_split_is_deterministic() -> None:
    docs = [Document(page_content=_numbered_text(300))]
    first = [c.page_content for c in split_documents(docs, chunk_size=500, chunk_overlap=50)]
    second = [c.page_content for c in split_documents(docs, chunk_size=500, chunk_overlap=50)]
    assert first == second


def test_split_documents_preserves_metadata() -> None:
    """Metadata from the source document should be preserved in chunks."""
    docs = [Document(page_content="Short text.", metadata={"source": "https://x.test"})]
    chunks = split_documents(docs)
    assert [c.metadata["source"] for c in chunks] == ["https://x.test"]


def test_extra_metadata_wins_on_collision() -> None:
    docs = [Document(page_content="Short text.", metadata={"source": "old", "row": 3})]
    chunks = split_documents(docs, {"source": "new", "uploadDate": "2024-01-01"})
    assert chunks[0].metadata == {"source": "new", "row": 3, "uploadDate": "2024-01-01"}


def test_chunk_metadata_is_not_shared() -> None:
    docs = [Document(page_content=_numbered_text(300), metadata={"tags": {"a": 1}})]
    chunks = split_documents(docs, chunk_size=500, chunk_overlap=50)
    chunks[0].metadata["tags"]["a"] = 99
    assert chunks[1].metadata["tags"]["a"] == 1
    assert docs[0].metadata["tags"]["a"] == 1


def test_document_order_is_kept() -> None:
    docs = [
        Document(page_content="first page", metadata={"pageNumber": 1}),
        Document(page_content="second page", metadata={"pageNumber": 2}),
    ]
    chunks = split_documents(docs)
    assert [c.metadata["pageNumber"] for c in chunks] == [1, 2]


def test_split_documents_empty_input() -> None:
    """An empty list should return an empty list."""
    assert split_documents([]) == []


@pytest.mark.parametrize("text", ["", "   \n\n  "])
def test_blank_text_yields_no_chunks(text: str) -> None:
    assert split_documents([Document(page_content=text)]) == []


def test_overlap_not_smaller_than_size_raises() -> None:
    with pytest.raises(SplitError):
        split_documents([Document(page_content="x")], chunk_size=100, chunk_overlap=100)


def test_deep_merge_merges_nested_mappings() -> None:
    merged = deep_merge({"a": {"x": 1, "y": 2}, "b": 1}, {"a": {"y": 3}, "c": 4})
    assert merged == {"a": {"x": 1, "y": 3}, "b": 1, "c": 4}
