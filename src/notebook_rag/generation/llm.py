"""LLM initialisation — single place to swap providers.

Supports two modes:

1. **OpenAI cloud** (default) — set ``OPENAI_API_KEY``.
2. **OpenAI-compatible endpoint** — set ``LLM_BASE_URL`` (vLLM, Azure
   proxy, local gateway …).  ``ChatOpenAI`` works unchanged against any
   ``/v1/chat/completions`` implementation.
"""

from __future__ import annotations

import logging

from langchain_openai import ChatOpenAI

from notebook_rag.config import settings

logger = logging.getLogger(__name__)


def get_llm(temperature: float | None = None) -> ChatOpenAI:
    """Return the configured chat model.

    Requests are bounded by ``settings.request_timeout`` and retried at
    most ``settings.provider_max_retries`` times on transient errors.
    """
    kwargs: dict = {
        "model": settings.llm_model_name,
        "temperature": settings.llm_temperature if temperature is None else temperature,
        "timeout": settings.request_timeout,
        "max_retries": settings.provider_max_retries,
    }

    if settings.llm_base_url:
        logger.info("Using OpenAI-compatible endpoint: %s", settings.llm_base_url)
        kwargs["base_url"] = settings.llm_base_url
        # Self-hosted gateways often need no key; LangChain requires a non-empty value.
        kwargs["api_key"] = settings.openai_api_key or "EMPTY"
    elif settings.openai_api_key:
        kwargs["api_key"] = settings.openai_api_key

    return ChatOpenAI(**kwargs)
