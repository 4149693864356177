"""Run the API with uvicorn."""

import uvicorn

from notebook_rag.config import settings

if __name__ == "__main__":
    uvicorn.run(
        "notebook_rag.serving.app:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
