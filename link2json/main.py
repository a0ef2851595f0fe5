"""FastAPI application entry point."""

import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from link2json.api import api_router
from link2json.config import Settings, get_settings
from link2json.errors import Link2JSONError
from link2json.services.cache import ResponseCache
from link2json.services.metadata import MetadataFetcher
from link2json.services.rate_limit import TokenBucket

logger = logging.getLogger(__name__)


def _lifespan(settings: Settings):
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Build the shared cache, limiter and HTTP client; tear them down on shutdown."""
        if settings.user_agent_is_default:
            logger.warning("User agent not set, using default")
        else:
            logger.info("User agent set to: %s", settings.user_agent)

        cache = ResponseCache(
            ttl=settings.cache_ttl_seconds,
            sweep_interval=settings.cache_sweep_interval_seconds,
        )
        client = httpx.AsyncClient(timeout=httpx.Timeout(settings.fetch_timeout_seconds))
        app.state.cache = cache
        app.state.rate_limiter = TokenBucket(
            rate=settings.rate_limit_per_second,
            burst=settings.rate_limit_burst,
        )
        app.state.fetcher = MetadataFetcher(client, cache, settings.effective_user_agent)
        janitor = asyncio.create_task(cache.run_janitor())
        try:
            yield
        finally:
            janitor.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await janitor
            await client.aclose()

    return lifespan


async def _handle_domain_error(request: Request, exc: Link2JSONError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def _handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled error serving %s", request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    logging.basicConfig(level=settings.log_level.upper())

    app = FastAPI(title=settings.app_name, lifespan=_lifespan(settings))
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(Link2JSONError, _handle_domain_error)
    app.add_exception_handler(Exception, _handle_unexpected_error)
    app.include_router(api_router)

    @app.get("/health", tags=["system"])
    async def healthcheck() -> dict[str, str]:
        return {"status": "ok", "app": settings.app_name}

    return app


app = create_app()
