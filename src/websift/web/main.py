"""
FastAPI application exposing scraping and search-and-scrape over HTTP.
"""

from __future__ import annotations

import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, AsyncGenerator, Awaitable, Callable, Dict, Optional
from uuid import uuid4

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from websift.config import find_config_file
from websift.container import DependencyContainer
from websift.exceptions import ScrapeError
from websift.extractor.models import DEFAULT_SELECTOR, DEFAULT_TIMEOUT_MS, ExtractionRequest, ScrapeOptions
from websift.security.validation import URLValidationError, describe_url, validate_url

logger = structlog.get_logger(__name__)

AVAILABLE_ENDPOINTS = [
    "GET /api/health",
    "POST /api/scrape",
    "POST /api/search-scrape",
    "POST /api/validate-url",
]


class OptionsBody(BaseModel):
    """Scrape options as sent by API clients."""

    model_config = ConfigDict(populate_by_name=True)

    wait_for_selector: Optional[str] = Field(default=None, alias="waitForSelector")
    timeout_ms: int = Field(
        default=DEFAULT_TIMEOUT_MS,
        ge=0,
        validation_alias=AliasChoices("timeoutMs", "timeout"),
    )
    javascript: bool = False
    headers: Dict[str, str] = Field(default_factory=dict)

    def to_scrape_options(self) -> ScrapeOptions:
        return ScrapeOptions(
            render_javascript=self.javascript,
            wait_for_selector=self.wait_for_selector or None,
            timeout_ms=self.timeout_ms,
            extra_headers=self.headers,
        )


class ScrapeBody(BaseModel):
    url: Optional[str] = None
    selector: Optional[str] = None
    options: OptionsBody = Field(default_factory=OptionsBody)


class SearchScrapeBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    query: Optional[str] = None
    max_results: int = Field(default=5, ge=0, alias="maxResults")
    selector: Optional[str] = None
    options: OptionsBody = Field(default_factory=OptionsBody)


class ValidateUrlBody(BaseModel):
    url: Optional[str] = None


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _selector(selector: Optional[str]) -> str:
    return (selector or "").strip() or DEFAULT_SELECTOR


def _error(status_code: int, error: str, **extra: Any) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": error, **extra})


def create_app(container: Optional[DependencyContainer] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        container: Container to serve from; one is created from the discovered
                   config file (or defaults) when omitted.
    """
    container = container or DependencyContainer(config_path=find_config_file())

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Manage application lifecycle."""
        async with container.lifecycle():
            logger.info("WebSift API started")
            yield
        logger.info("WebSift API stopped")

    app = FastAPI(title="WebSift API", version="1.0.0", lifespan=lifespan)
    app.state.container = container

    @app.middleware("http")
    async def bind_request_id(request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid4())
        structlog.contextvars.bind_contextvars(request_id=request_id)
        start = time.monotonic()
        try:
            response = await call_next(request)
        finally:
            structlog.contextvars.unbind_contextvars("request_id")
        response.headers["X-Request-ID"] = request_id
        logger.debug(
            "Request handled",
            method=request.method,
            path=request.url.path,
            status=response.status_code,
            duration_ms=int((time.monotonic() - start) * 1000),
        )
        return response

    @app.get("/api/health")
    async def health_check() -> Dict[str, Any]:
        """Liveness probe."""
        version = container.config.web.api_version if container.config else "1.0.0"
        return {
            "status": "healthy",
            "timestamp": _timestamp(),
            "uptime": container.uptime_seconds,
            "version": version,
        }

    @app.post("/api/scrape")
    async def scrape(body: ScrapeBody) -> Any:
        if not body.url:
            return _error(400, "URL is required")

        try:
            url = validate_url(body.url)
            request = ExtractionRequest(
                url=url,
                selector=_selector(body.selector),
                options=body.options.to_scrape_options(),
            )
        except ValueError:
            return _error(400, "Invalid URL format")

        logger.info("Scraping", url=url)
        try:
            result = await container.get_extraction().scrape_website(request)
        except ScrapeError as e:
            return _error(500, "Scraping failed", message=str(e))

        return {"success": True, "data": result.to_dict(), "scrapedAt": _timestamp()}

    @app.post("/api/search-scrape")
    async def search_scrape(body: SearchScrapeBody) -> Any:
        if not body.query:
            return _error(400, "Search query is required")

        query = body.query
        logger.info("Search-scrape", query=query)
        try:
            results = await container.get_search().search_websites(query, body.max_results)
            if not results:
                return {
                    "success": True,
                    "data": {
                        "query": query,
                        "searchResults": [],
                        "scrapedData": [],
                        "message": "No search results found",
                    },
                }

            report = await container.get_batch().scrape_all(
                results,
                _selector(body.selector),
                body.options.to_scrape_options(),
            )
        except Exception as e:
            logger.error("Search-scrape failed", query=query, error=str(e), error_type=type(e).__name__)
            return _error(500, "Search and scrape failed", message=str(e))

        return {
            "success": True,
            "data": {
                "query": query,
                "searchResults": [result.to_dict() for result in results],
                "scrapedData": [item.to_dict() for item in report.items],
                "summary": report.summary,
            },
            "scrapedAt": _timestamp(),
        }

    @app.post("/api/validate-url")
    async def validate(body: ValidateUrlBody) -> Dict[str, Any]:
        try:
            parts = describe_url(body.url or "")
        except URLValidationError:
            return {"valid": False}
        return {"valid": True, **parts}

    @app.get("/metrics")
    async def metrics() -> Response:
        """Endpoint for Prometheus to scrape."""
        return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)

    @app.api_route("/api/{path:path}", methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "HEAD"])
    async def api_not_found(request: Request, path: str) -> JSONResponse:
        return _error(
            404,
            "API endpoint not found",
            path=request.url.path,
            method=request.method,
            availableEndpoints=AVAILABLE_ENDPOINTS,
        )

    return app


app = create_app()
