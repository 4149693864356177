"""Chat service — retrieve from one collection, then answer."""

from __future__ import annotations

import logging

from notebook_rag.exceptions import Failure, RAGError, Result, Success, ValidationError
from notebook_rag.generation.composer import AnswerComposer
from notebook_rag.generation.models import Answer
from notebook_rag.retrieval.retriever import Retriever

logger = logging.getLogger(__name__)


class ChatService:
    """Stateless question answering over a named collection."""

    def __init__(self, retriever: Retriever, composer: AnswerComposer | None = None) -> None:
        self.retriever = retriever
        self.composer = composer or AnswerComposer()

    def chat(self, message: str, collection: str) -> Answer:
        """Answer *message* using chunks from *collection*; raises on failure."""
        if not message or not message.strip():
            raise ValidationError("Message is required", field="message")
        chunks = self.retriever.retrieve(collection, message)
        return self.composer.answer(message, chunks)

    def run(self, message: str, collection: str) -> Result[Answer]:
        """Like :meth:`chat` but reports pipeline errors as a :class:`Failure`."""
        try:
            return Success(self.chat(message, collection))
        except RAGError as exc:
            logger.warning("Chat on %r failed (%s): %s", collection, exc.kind.value, exc)
            return Failure.from_error(exc)
