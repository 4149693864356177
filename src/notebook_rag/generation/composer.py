"""Answer composer — one chat-completion call per question."""

from __future__ import annotations

import logging
from typing import Any

from notebook_rag.exceptions import GenerationError
from notebook_rag.generation.models import Answer, SourceCitation
from notebook_rag.generation.prompts import build_answer_prompt
from notebook_rag.retrieval.models import RetrievedChunk

logger = logging.getLogger(__name__)

NO_RELEVANT_INFORMATION = (
    "I don't have any relevant information in the selected collection to answer your question."
)


class AnswerComposer:
    """Builds a grounded prompt from retrieved chunks and calls the LLM.

    Parameters
    ----------
    llm:
        Any LangChain chat model.  Created lazily from the settings on
        first use, so an empty retrieval never touches the provider.
    """

    def __init__(self, llm: Any | None = None) -> None:
        self._llm = llm

    @property
    def llm(self) -> Any:
        if self._llm is None:
            from notebook_rag.generation.llm import get_llm

            self._llm = get_llm()
        return self._llm

    def answer(self, query: str, chunks: list[RetrievedChunk]) -> Answer:
        """Answer *query* from *chunks*, citing one source per chunk."""
        if not chunks:
            return Answer(text=NO_RELEVANT_INFORMATION, sources=[])

        messages = build_answer_prompt(query, chunks)
        try:
            response = self.llm.invoke(messages)
        except Exception as exc:
            raise GenerationError(f"Chat completion failed: {exc}") from exc

        text = response.content if isinstance(response.content, str) else str(response.content)
        sources = [
            SourceCitation.from_chunk(i, chunk.content, chunk.metadata)
            for i, chunk in enumerate(chunks, 1)
        ]
        logger.info("Answered with %d source(s)", len(sources))
        return Answer(text=text, sources=sources)
