"""FastAPI application exposing indexing and chat as a REST API."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, File, Form, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from notebook_rag.config import settings
from notebook_rag.exceptions import ErrorKind, Failure, UploadTooLargeError, ValidationError
from notebook_rag.generation.chat import ChatService
from notebook_rag.ingestion.pipeline import IngestionPipeline, IngestionReport
from notebook_rag.logging_config import setup_logging
from notebook_rag.retrieval.base import VectorStoreBase
from notebook_rag.serving.deps import get_chat_service, get_pipeline, get_store
from notebook_rag.serving.schemas import (
    ChatRequest,
    ChatResponse,
    CollectionsResponse,
    ErrorResponse,
    HealthResponse,
    IndexResponse,
    IndexUrlRequest,
)
from notebook_rag.serving.uploads import temporary_upload

logger = logging.getLogger(__name__)

STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.UPLOAD_TOO_LARGE: 413,
    ErrorKind.LOAD: 422,
    ErrorKind.SPLIT: 500,
    ErrorKind.EMBEDDING: 502,
    ErrorKind.VECTOR_STORE: 502,
    ErrorKind.GENERATION: 502,
}

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Missing or invalid input"},
    500: {"model": ErrorResponse, "description": "Internal server error"},
    502: {"model": ErrorResponse, "description": "Upstream provider failed"},
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(settings.log_level)
    logger.info("RAG API starting; vector store at %s:%s", settings.chroma_host, settings.chroma_port)
    yield
    logger.info("RAG API shutting down")


app = FastAPI(
    title="Notebook RAG API",
    version="0.1.0",
    description="Index PDFs, CSVs and web pages, then chat with them.",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_origin_regex=settings.cors_origin_regex or None,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def failure_response(failure: Failure, label: str) -> JSONResponse:
    """Map a pipeline :class:`Failure` to an ``{error, details}`` response."""
    status = STATUS_BY_KIND.get(failure.kind, 500)
    if failure.kind in (ErrorKind.VALIDATION, ErrorKind.UPLOAD_TOO_LARGE):
        body = ErrorResponse(error=failure.message, details=failure.message)
    else:
        body = ErrorResponse(error=label, details=failure.message)
    return JSONResponse(status_code=status, content=body.model_dump())


def _index_response(report: IngestionReport, kind: str, **extra) -> IndexResponse:
    return IndexResponse(
        message=(
            f"{kind} indexed successfully! {report.documents_count} chunks added "
            f"to {report.collection}"
        ),
        collection=report.collection,
        documents_count=report.documents_count,
        created=report.created,
        **extra,
    )


async def _index_upload(
    upload: UploadFile | None,
    field: str,
    collection: str,
    step,
    pipeline: IngestionPipeline,
):
    if upload is None or not upload.filename:
        return Failure.from_error(ValidationError(f"No {field.upper()} file uploaded", field=field))
    try:
        async with temporary_upload(
            upload,
            upload_dir=settings.upload_dir,
            max_bytes=settings.max_upload_bytes,
            field=field,
        ) as path:
            return await run_in_threadpool(pipeline.run, step, path, collection, upload.filename)
    except UploadTooLargeError as exc:
        logger.warning("Rejected upload %s: %s", upload.filename, exc)
        return Failure.from_error(exc)


# ── Routes ────────────────────────────────────────────────────────────
@app.post(
    "/api/index/pdf",
    response_model=IndexResponse,
    response_model_exclude_none=True,
    responses={**_ERROR_RESPONSES, 413: {"model": ErrorResponse}},
)
async def index_pdf(
    pdf: UploadFile | None = File(None),
    collection: str = Form(settings.default_pdf_collection),
    pipeline: IngestionPipeline = Depends(get_pipeline),
):
    """Index an uploaded PDF, one chunk set per page."""
    outcome = await _index_upload(pdf, "pdf", collection, pipeline.index_pdf, pipeline)
    if isinstance(outcome, Failure):
        return failure_response(outcome, "Failed to index PDF")
    return _index_response(outcome.value, "PDF")


@app.post(
    "/api/index/csv",
    response_model=IndexResponse,
    response_model_exclude_none=True,
    responses={**_ERROR_RESPONSES, 413: {"model": ErrorResponse}},
)
async def index_csv(
    csv: UploadFile | None = File(None),
    collection: str = Form(settings.default_csv_collection),
    pipeline: IngestionPipeline = Depends(get_pipeline),
):
    """Index an uploaded CSV, one document per row."""
    outcome = await _index_upload(csv, "csv", collection, pipeline.index_csv, pipeline)
    if isinstance(outcome, Failure):
        return failure_response(outcome, "Failed to index CSV")
    report = outcome.value
    return _index_response(report, "CSV", rows_processed=report.rows_processed)


@app.post(
    "/api/index/url",
    response_model=IndexResponse,
    response_model_exclude_none=True,
    responses=_ERROR_RESPONSES,
)
async def index_url(
    request: IndexUrlRequest,
    pipeline: IngestionPipeline = Depends(get_pipeline),
):
    """Fetch a web page and index its main content."""
    outcome = await run_in_threadpool(pipeline.run, pipeline.index_url, request.url, request.collection)
    if isinstance(outcome, Failure):
        return failure_response(outcome, "Failed to index URL")
    return _index_response(outcome.value, "URL", url=outcome.value.source)


@app.post("/api/chat", response_model=ChatResponse, responses=_ERROR_RESPONSES)
async def chat(
    request: ChatRequest,
    service: ChatService = Depends(get_chat_service),
):
    """Answer a question from the chunks stored in one collection."""
    outcome = await run_in_threadpool(service.run, request.message, request.collection)
    if isinstance(outcome, Failure):
        return failure_response(outcome, "Failed to process chat request")
    answer = outcome.value
    return ChatResponse(response=answer.text, sources=answer.sources, collection=request.collection)


@app.get("/api/collections", response_model=CollectionsResponse)
async def collections(store: VectorStoreBase = Depends(get_store)) -> CollectionsResponse:
    """Configured default collections plus those present in the vector store."""
    names = list(settings.known_collections)
    try:
        live = await run_in_threadpool(store.list_collections)
    except Exception:
        logger.warning("Could not list collections from the vector store", exc_info=True)
        live = []
    names.extend(name for name in sorted(live) if name not in names)
    return CollectionsResponse(collections=names)


@app.get("/api/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Liveness probe."""
    return HealthResponse()


@app.exception_handler(RequestValidationError)
async def invalid_request(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = "; ".join(
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in exc.errors()
    )
    logger.info("Rejected request body on %s %s: %s", request.method, request.url.path, details)
    return JSONResponse(
        status_code=STATUS_BY_KIND[ErrorKind.VALIDATION],
        content=ErrorResponse(error="Invalid request body", details=details).model_dump(),
    )


@app.exception_handler(Exception)
async def unhandled_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(error="Internal server error", details=str(exc)).model_dump(),
    )
