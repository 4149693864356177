"""
Generation — prompt assembly and chat-completion calls.

Public API
----------
- :class:`AnswerComposer` — turn retrieved chunks plus a question into a cited answer.
- :class:`ChatService` — retrieve-then-answer for one collection.
- :class:`Answer`, :class:`ChatMessage`, :class:`SourceCitation` — response models.
"""

from notebook_rag.generation.chat import ChatService
from notebook_rag.generation.composer import NO_RELEVANT_INFORMATION, AnswerComposer
from notebook_rag.generation.models import Answer, ChatMessage, SourceCitation

__all__ = [
    "NO_RELEVANT_INFORMATION",
    "Answer",
    "AnswerComposer",
    "ChatMessage",
    "ChatService",
    "SourceCitation",
]
