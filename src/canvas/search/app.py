from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from elasticsearch import ApiError, TransportError
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from shared.logging import get_logger, setup_logging

from .client import create_client
from .config import get_settings
from .routes import admin, documents, indexes, search
from .services import DocumentIndexGateway

logger = get_logger("search.app")


def create_app(gateway: DocumentIndexGateway | None = None) -> FastAPI:
    settings = get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        setup_logging(settings.log_level)
        active = gateway or DocumentIndexGateway(create_client(settings), settings=settings)
        app.state.gateway = active
        app.state.bootstrap_report = await active.bootstrap()
        if not app.state.bootstrap_report.healthy:
            logger.warning(
                "search_service_degraded",
                failed=[result.index for result in app.state.bootstrap_report.failed()],
            )
        logger.info("search_service_ready", elasticsearch_url=settings.elasticsearch_url)
        try:
            yield
        finally:
            await active.close()

    app = FastAPI(title="Canvas Search Service", version="0.1.0", lifespan=lifespan)

    @app.get("/v1/healthz", tags=["system"])
    async def healthz() -> dict[str, str]:
        return {"status": "ok", "service": settings.service_name}

    @app.exception_handler(ApiError)
    @app.exception_handler(TransportError)
    async def engine_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error("search_engine_error", path=request.url.path, error=repr(exc))
        return JSONResponse(status_code=status.HTTP_502_BAD_GATEWAY, content={"detail": "search engine request failed"})

    app.include_router(documents.router)
    app.include_router(search.router)
    app.include_router(indexes.router)
    app.include_router(admin.router)

    return app


__all__ = ["create_app"]
