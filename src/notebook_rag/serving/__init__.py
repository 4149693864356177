"""
Serving — FastAPI application for indexing and chat.

Run locally with ``python -m notebook_rag.serving`` or any ASGI server
pointed at ``notebook_rag.serving.app:app``.
"""
