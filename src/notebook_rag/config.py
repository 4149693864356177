"""Shared configuration loaded from environment / .env file."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application-wide settings, populated from env vars or .env file."""

    # LLM
    openai_api_key: str = Field(default="", description="OpenAI API key")
    llm_model_name: str = Field(default="gpt-4o-mini", description="Chat model identifier")
    llm_base_url: str = Field(
        default="",
        description=(
            "Base URL for an OpenAI-compatible chat API. Leave empty to use "
            "the OpenAI cloud."
        ),
    )
    llm_temperature: float = 0.0

    # Embedding
    embedding_provider: str = Field(default="openai", description="'openai' or 'huggingface'")
    embedding_model: str = "text-embedding-3-large"
    embedding_base_url: str = ""

    # Vector store
    chroma_host: str = "localhost"
    chroma_port: int = 8000
    chroma_ssl: bool = False
    chroma_api_key: str = ""
    deterministic_chunk_ids: bool = Field(
        default=False,
        description="Derive chunk ids from content so re-indexing overwrites instead of duplicating.",
    )

    # Chunking / retrieval
    chunk_size: int = 1000
    chunk_overlap: int = 200
    retrieval_k: int = 5
    mmr_fetch_k: int = 20
    mmr_lambda: float = 0.5

    # External calls
    request_timeout: float = 30.0
    provider_max_retries: int = 1

    # Uploads
    max_upload_bytes: int = 10 * 1024 * 1024
    upload_dir: str = "./uploads"

    # Collections
    default_pdf_collection: str = "pdf-collection"
    default_url_collection: str = "url-collection"
    default_csv_collection: str = "csv-collection"
    default_chat_collection: str = "chaicode-collection"
    known_collections: list[str] = Field(
        default_factory=lambda: [
            "chaicode-collection",
            "mdn-docs-collection",
            "csv-collection",
            "pdf-collection",
            "url-collection",
        ]
    )

    # Serving
    cors_origins: list[str] = Field(
        default_factory=lambda: [
            "http://localhost:3000",
            "https://rag-application-notebook-lm.vercel.app",
        ]
    )
    cors_origin_regex: str = r"https://.*\.vercel\.app"
    host: str = "0.0.0.0"
    port: int = 3001
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


# Singleton — import `settings` wherever needed.
settings = Settings()
