"""FastAPI service exposing regional news and streamed briefings."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, StreamingResponse

from .config import Settings, configure_logging, get_settings
from .filters import detect_countries, filter_by_country, search_articles
from .models import NewsResponse
from .pipeline import BriefingContext, build_briefing, get_region_articles
from .sources import get_sources, is_known_region, list_regions, normalize_region, region_label
from .streaming import SSE_DONE, END_OF_STREAM, format_sse

logger = logging.getLogger(__name__)

INVALID_REGION = "Invalid continent"


def _add_cors(app: FastAPI, settings: Settings) -> None:
    """Allow browser front-ends to call the API during local development."""
    origins = [o.strip() for o in settings.cors_allow_origins.split(",") if o.strip()]
    if settings.cors_allow_all or not origins:
        origins = ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        # Starlette/FastAPI disallow wildcard origins when credentials are enabled.
        allow_credentials=origins != ["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )


def create_app(context: Optional[BriefingContext] = None) -> FastAPI:
    settings = (context.settings if context else None) or get_settings()
    configure_logging(settings.log_level)
    app = FastAPI(title="World Briefing")
    app.state.context = context or BriefingContext.from_settings(settings)
    _add_cors(app, settings)
    _register_routes(app)
    return app


def _context(request: Request) -> BriefingContext:
    return request.app.state.context


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _register_routes(app: FastAPI) -> None:
    @app.get("/health")
    def health() -> Dict[str, str]:
        return {"status": "ok"}

    @app.get("/api/continents")
    def continents() -> List[Dict[str, Any]]:
        return [info.model_dump(by_alias=True) for info in list_regions()]

    @app.get("/api/news/{region}")
    def news(
        region: str,
        request: Request,
        country: Optional[str] = None,
        q: Optional[str] = None,
    ):
        if not is_known_region(region):
            return _error(status.HTTP_400_BAD_REQUEST, INVALID_REGION)
        key = normalize_region(region)
        try:
            articles = get_region_articles(key, _context(request))
        except Exception:
            logger.exception("API error for %s", key)
            return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to fetch news")

        articles = search_articles(filter_by_country(articles, country), q)
        body = NewsResponse(
            region=key,
            last_updated=datetime.now(timezone.utc),
            articles=articles,
            sources=[s.name for s in get_sources(key)],
        )
        return JSONResponse(content=body.model_dump(mode="json", by_alias=True))

    @app.get("/api/countries/{region}")
    def countries(region: str, request: Request):
        if not is_known_region(region):
            return _error(status.HTTP_400_BAD_REQUEST, INVALID_REGION)
        key = normalize_region(region)
        try:
            articles = get_region_articles(key, _context(request))
        except Exception:
            logger.exception("Country detection failed for %s", key)
            return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to fetch news")
        return [
            {"name": name, "count": count} for name, count in detect_countries(articles, key)
        ]

    @app.get("/api/summarize/{region}")
    def summarize(region: str, request: Request, country: Optional[str] = None):
        if not is_known_region(region):
            return _error(status.HTTP_400_BAD_REQUEST, INVALID_REGION)
        key = normalize_region(region)
        context = _context(request)
        try:
            articles = filter_by_country(get_region_articles(key, context), country)
            summary = build_briefing(articles, country or region_label(key))
        except Exception:
            logger.exception("Summary error for %s", key)
            return _error(
                status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to generate summary"
            )

        async def events():
            async for batch in context.streamer.astream(summary):
                if batch == END_OF_STREAM:
                    yield SSE_DONE
                else:
                    yield format_sse(batch)

        return StreamingResponse(
            events(),
            media_type="text/event-stream",
            headers={"Cache-Control": "no-cache", "Connection": "keep-alive"},
        )


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run("world_briefing.server:app", host=settings.host, port=settings.port)
