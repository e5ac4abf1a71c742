"""FastAPI application creation and configuration."""

import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from backend.core.config import ENABLE_SCHEDULER
from backend.ingest.router import router as ingest_router
from docketwatch.core.rate_limiter import rate_limit_tracker
from docketwatch.ingest.orchestrator import build_orchestrator
from docketwatch.ingest.scheduler import run_scheduler
from docketwatch.store import DocketStore, get_docket_store

logger = logging.getLogger(__name__)


def create_app(store: DocketStore | None = None, enable_scheduler: bool = ENABLE_SCHEDULER) -> FastAPI:
    """Create the API app.

    Args:
        store: Docket store to serve from (built from settings when omitted)
        enable_scheduler: Start the periodic ingestion timer with the app
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.store = store or get_docket_store()
        try:
            await app.state.store.initialize()
        except Exception as e:
            # The healthcheck reports this; runs will fail until the store is back
            logger.error(f"Could not initialise docket store: {e}")

        scheduler_task = None
        orchestrator = None
        if enable_scheduler:
            orchestrator = build_orchestrator(store=app.state.store)
            scheduler_task = asyncio.create_task(run_scheduler(orchestrator=orchestrator))
            logger.info("Ingestion scheduler started with the API")

        yield

        if scheduler_task is not None:
            scheduler_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await scheduler_task
            await orchestrator.aclose()

    app = FastAPI(
        title="docketwatch API",
        description="Ingestion control for FCC docket monitoring",
        version="0.1.0",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    app.include_router(ingest_router)

    @app.get("/healthcheck")
    async def health_check():
        """Health check with docket store and FCC rate limit statistics."""
        try:
            stats = await app.state.store.get_stats()
        except Exception as e:
            return JSONResponse(status_code=503, content={"status": "unhealthy", "error": str(e)})

        return JSONResponse(
            status_code=200,
            content={
                "status": "healthy",
                "database": stats.pop("backend"),
                **stats,
                "rate_limits": rate_limit_tracker.get_stats(),
            },
        )

    return app
