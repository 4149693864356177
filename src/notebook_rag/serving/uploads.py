"""Temporary storage for uploaded files."""

from __future__ import annotations

import logging
import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import UploadFile

from notebook_rag.exceptions import UploadTooLargeError

logger = logging.getLogger(__name__)

_READ_CHUNK = 1024 * 1024


@asynccontextmanager
async def temporary_upload(
    upload: UploadFile,
    *,
    upload_dir: str | Path,
    max_bytes: int,
    field: str,
) -> AsyncIterator[Path]:
    """Stream *upload* to a unique file under *upload_dir* and yield its path.

    The size limit is enforced while streaming, so an oversized file is
    rejected before anything reads it.  The file is removed on exit
    whether the caller succeeded or not.
    """
    directory = Path(upload_dir)
    directory.mkdir(parents=True, exist_ok=True)
    suffix = Path(upload.filename or "").suffix
    path = directory / f"{field}-{uuid.uuid4().hex}{suffix}"

    try:
        if upload.size is not None and upload.size > max_bytes:
            raise UploadTooLargeError(max_bytes, field=field)

        written = 0
        with path.open("wb") as fh:
            while block := await upload.read(_READ_CHUNK):
                written += len(block)
                if written > max_bytes:
                    raise UploadTooLargeError(max_bytes, field=field)
                fh.write(block)
        logger.debug("Stored upload %s (%d bytes) at %s", upload.filename, written, path)
        yield path
    finally:
        path.unlink(missing_ok=True)
        await upload.close()
