"""FastAPI application entrypoint."""
from __future__ import annotations

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .api import tasks
from .api.deps import get_dispatcher
from .config import get_settings
from .observability.logging import configure_logging
from .observability.otel import configure_telemetry

logger = structlog.get_logger(__name__)


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(
        title="Publisher",
        version="0.1.0",
        docs_url="/docs",
        redoc_url=None,
    )

    configure_logging()
    configure_telemetry()

    @app.on_event("shutdown")
    async def _shutdown() -> None:  # pragma: no cover - FastAPI lifecycle
        runs = await get_dispatcher().drain()
        logger.info("app.shutdown", drained_runs=len(runs))

    @app.exception_handler(Exception)
    async def _generic_exception_handler(request: Request, exc: Exception):  # pragma: no cover - fallback
        logger.error("app.unhandled_exception", path=request.url.path, error=str(exc))
        return JSONResponse(status_code=500, content={"error": "Internal server error"})

    app.include_router(tasks.router)

    @app.get("/healthz")
    async def healthcheck():
        return {"status": "ok", "environment": settings.environment, "inFlight": get_dispatcher().in_flight}

    return app


app = create_app()


__all__ = ["app", "create_app"]
