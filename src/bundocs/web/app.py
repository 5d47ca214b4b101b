"""FastAPI application exposing the documentation tools over HTTP."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager, contextmanager
from typing import Any, AsyncIterator, Iterator, List

from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from bundocs import __version__
from bundocs.config import DEFAULT_LIST_LIMIT, DEFAULT_SEARCH_LIMIT, AppConfig
from bundocs.errors import (
    BundocsError,
    DocumentNotFoundError,
    InvalidPatternError,
    InvalidSlugError,
    NotADocumentError,
)
from bundocs.models import DocumentEntry, SearchResult
from bundocs.service import DocsService

LOGGER = logging.getLogger(__name__)

_service: DocsService | None = None


def configure(service: DocsService | None) -> None:
    """Install the service used by the request handlers."""
    global _service
    _service = service


def get_service() -> DocsService:
    global _service
    if _service is None:
        _service = DocsService.from_config(AppConfig())
    return _service


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    yield
    if _service is not None:
        _service.close()
        configure(None)


app = FastAPI(title="bundocs", version=__version__, lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


class SearchPayload(BaseModel):
    query: str
    path: str | None = None
    limit: int = Field(DEFAULT_SEARCH_LIMIT, ge=1)


class GrepPayload(BaseModel):
    pattern: str
    path: str | None = None
    limit: int = Field(DEFAULT_SEARCH_LIMIT, ge=1)
    flags: str | None = None


def _status_for(exc: BundocsError) -> int:
    if isinstance(exc, (DocumentNotFoundError, NotADocumentError)):
        return 404
    if isinstance(exc, (InvalidPatternError, InvalidSlugError)):
        return 400
    return 500


@contextmanager
def _http_errors() -> Iterator[None]:
    try:
        yield
    except BundocsError as exc:
        raise HTTPException(status_code=_status_for(exc), detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except OSError as exc:
        LOGGER.error("I/O failure while serving request: %s", exc)
        raise HTTPException(status_code=500, detail=str(exc)) from exc


@app.post("/search")
async def search_documents(
    payload: SearchPayload, service: DocsService = Depends(get_service)
) -> dict[str, List[SearchResult]]:
    with _http_errors():
        results = service.search_results(payload.query, payload.path, payload.limit)
    return {"results": results}


@app.post("/grep")
async def grep_documents(
    payload: GrepPayload, service: DocsService = Depends(get_service)
) -> dict[str, List[SearchResult]]:
    with _http_errors():
        results = service.grep_results(payload.pattern, payload.path, payload.limit, payload.flags)
    return {"results": results}


@app.get("/documents")
async def list_documents(
    category: str | None = None,
    limit: int = Query(DEFAULT_LIST_LIMIT, ge=1),
    service: DocsService = Depends(get_service),
) -> dict[str, List[DocumentEntry]]:
    return {"documents": service.list_documents(category, limit)}


@app.get("/documents/{slug:path}")
async def read_document(
    slug: str,
    offset: int = Query(0, ge=0),
    max_lines: int | None = Query(None, ge=1),
    service: DocsService = Depends(get_service),
) -> dict[str, Any]:
    with _http_errors():
        content = service.read_document(slug, offset, max_lines)
    return {"slug": slug, "content": content}
