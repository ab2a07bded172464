"""FastAPI application serving search and listing queries."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, List, Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse
from pydantic import BaseModel

from postfinder.articles import find_article, recommend, select_articles
from postfinder.config import AppConfig
from postfinder.errors import IndexNotReady
from postfinder.index.search import SearchIndex, SearchOptions, SearchService
from postfinder.pagination import PageToken, has_multiple_pages, page_window

LOGGER = logging.getLogger(__name__)


class SearchPayload(BaseModel):
    query: str
    limit: int = 10


class SearchHit(BaseModel):
    id: str
    title: str
    surrounding_text: str
    score: float


class PaginationResponse(BaseModel):
    pages: List[PageToken]
    has_multiple_pages: bool


def _build_service(config: AppConfig, base_dir: Path) -> SearchService:
    options = SearchOptions(threshold=config.threshold, snippet_chars=config.snippet_chars)
    return SearchService(
        config.resolve_output_path(base_dir),
        marker_path=config.resolve_marker_path(base_dir),
        options=options,
    )


def _search_service(request: Request) -> SearchService:
    service: SearchService = request.app.state.search
    service.refresh_if_stale()
    return service


def _ready_index(service: SearchService) -> SearchIndex:
    try:
        return service.current()
    except IndexNotReady as exc:
        LOGGER.warning("Query received before any search index was loaded")
        raise HTTPException(status_code=503, detail=str(exc)) from exc


def _current_index(service: SearchService = Depends(_search_service)) -> SearchIndex:
    return _ready_index(service)


def create_app(config: AppConfig | None = None, base_dir: Path | None = None) -> FastAPI:
    """Build the API around its own :class:`SearchService`."""
    config = config or AppConfig()
    base_dir = base_dir or Path.cwd()

    app = FastAPI(title="PostFinder", version="0.1.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.config = config
    app.state.search = _build_service(config, base_dir)

    @app.on_event("startup")
    async def startup_event() -> None:
        logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")

    @app.get("/search-index.json")
    async def search_index_file(service: SearchService = Depends(_search_service)) -> FileResponse:
        path = service.index_path
        if not path.exists():
            raise HTTPException(status_code=404, detail=f"Search index not found at {path}")
        return FileResponse(path, media_type="application/json")

    @app.post("/search")
    async def search_documents(
        payload: SearchPayload, service: SearchService = Depends(_search_service)
    ) -> dict[str, List[SearchHit]]:
        if not payload.query.strip():
            return {"results": []}

        index = _ready_index(service)
        limit = max(1, min(payload.limit, config.result_limit))
        results = index.query(payload.query, limit=limit)
        return {"results": [SearchHit(**result.to_dict()) for result in results]}

    @app.get("/articles")
    async def list_articles(
        folder: Optional[str] = None,
        tag: Optional[str] = None,
        page: Optional[str] = None,
        index: SearchIndex = Depends(_current_index),
    ) -> dict[str, Any]:
        selection = select_articles(
            index.records,
            folder=folder,
            tag=tag,
            page=page,
            per_page=config.items_per_page,
            visible_range=config.visible_range,
        )
        return selection.to_dict()

    @app.get("/articles/{slug:path}")
    async def get_article(slug: str, index: SearchIndex = Depends(_current_index)) -> dict[str, Any]:
        record = find_article(index.records, slug)
        if record is None:
            raise HTTPException(status_code=404, detail=f"Article not found: {slug}")
        return record.to_dict()

    @app.get("/recommendations")
    async def recommendations(
        count: Optional[int] = None,
        index: SearchIndex = Depends(_current_index),
    ) -> dict[str, Any]:
        wanted = config.recommended_count if count is None else count
        picked = recommend(index.records, config.pinned_slugs, wanted)
        return {"articles": [record.to_dict() for record in picked]}

    @app.get("/pagination")
    async def pagination(
        total_items: int,
        items_per_page: int = config.items_per_page,
        current_page: int = 1,
        visible_range: int = config.visible_range,
    ) -> PaginationResponse:
        try:
            window = page_window(total_items, items_per_page, current_page, visible_range)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        return PaginationResponse(pages=window, has_multiple_pages=has_multiple_pages(window))

    return app


app = create_app()
