"""Document loaders — thin wrappers around LangChain loaders and requests.

Each loader returns a fully materialised ``list[Document]`` whose
metadata identifies where the text came from:

* PDF  → ``{"filename", "pageNumber"}``  (one document per page)
* CSV  → ``{"file", "row"}``             (one document per data row)
* URL  → ``{"source", "title"}``         (one document per page)

Any failure is re-raised as :class:`~notebook_rag.exceptions.LoadError`
carrying the offending source.
"""

from __future__ import annotations

import logging
import re
import unicodedata
from pathlib import Path

import requests
from bs4 import BeautifulSoup
from langchain_community.document_loaders import CSVLoader, PyPDFLoader
from langchain_core.documents import Document

from notebook_rag.config import settings
from notebook_rag.exceptions import LoadError

logger = logging.getLogger(__name__)

# Tried in order; the first selector that matches an element wins.
DEFAULT_SELECTORS: tuple[str, ...] = (
    "main#content article",
    "article#wikiArticle",
    "main#content",
    "body",
)

_BOILERPLATE_TAGS = ["script", "style", "noscript", "iframe", "template"]


def _normalise(text: str) -> str:
    """Unicode NFC, collapse whitespace, strip control chars."""
    text = unicodedata.normalize("NFC", text)
    text = re.sub(r"[^\S\n]+", " ", text)
    text = re.sub(r"\n{3,}", "\n\n", text)
    text = re.sub(r"[\x00-\x08\x0b\x0c\x0e-\x1f]", "", text)
    return text.strip()


def load_pdf(path: str | Path, filename: str | None = None) -> list[Document]:
    """Load a PDF, one document per page.

    Parameters
    ----------
    path:
        Location of the PDF on disk (usually a temporary upload).
    filename:
        Name to record in metadata; defaults to the file's own name.
    """
    path = Path(path)
    name = filename or path.name
    try:
        pages = PyPDFLoader(str(path)).load()
    except Exception as exc:
        raise LoadError(name, str(exc)) from exc

    documents = [
        Document(
            page_content=page.page_content,
            metadata={"filename": name, "pageNumber": int(page.metadata.get("page", i)) + 1},
        )
        for i, page in enumerate(pages)
    ]
    logger.info("Loaded %d page(s) from PDF %s", len(documents), name)
    return documents


def load_csv(path: str | Path, filename: str | None = None) -> list[Document]:
    """Load a CSV, one document per data row with a 1-based ``row``."""
    path = Path(path)
    name = filename or path.name
    try:
        rows = CSVLoader(file_path=str(path), encoding="utf-8").load()
    except Exception as exc:
        raise LoadError(name, str(exc)) from exc

    documents = [
        Document(page_content=row.page_content, metadata={"row": i, "file": name})
        for i, row in enumerate(rows, 1)
    ]
    logger.info("Loaded %d row(s) from CSV %s", len(documents), name)
    return documents


def load_url(
    url: str,
    *,
    selectors: tuple[str, ...] = DEFAULT_SELECTORS,
    timeout: float | None = None,
) -> list[Document]:
    """Fetch *url* and extract its main textual content.

    The first selector in *selectors* that matches an element decides
    which part of the page is kept.
    """
    try:
        resp = requests.get(url, timeout=timeout or settings.request_timeout)
        resp.raise_for_status()
    except requests.RequestException as exc:
        raise LoadError(url, str(exc)) from exc

    soup = BeautifulSoup(resp.text, "html.parser")
    for tag in soup(_BOILERPLATE_TAGS):
        tag.decompose()

    node = None
    for selector in selectors:
        node = soup.select_one(selector)
        if node is not None:
            logger.debug("Selector %r matched for %s", selector, url)
            break
    if node is None:
        raise LoadError(url, f"no element matched selectors {list(selectors)}")

    text = _normalise(node.get_text(separator="\n", strip=True))
    if not text:
        raise LoadError(url, "page contains no extractable text")

    metadata = {"source": url}
    if soup.title and soup.title.string:
        metadata["title"] = soup.title.string.strip()
    logger.info("Loaded %d chars from %s", len(text), url)
    return [Document(page_content=text, metadata=metadata)]
