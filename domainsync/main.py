"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from domainsync.config import get_settings
from domainsync.infrastructure.database.session import create_tables
from domainsync.infrastructure.logging.log_config import setup_logging
from domainsync.presentation.api.router import router as api_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan — configure logging and create tables."""
    settings = get_settings()
    setup_logging()

    await create_tables()

    if not settings.registrar_configured:
        logger.warning(
            "SW_RESELLER_ID / SW_API_KEY not configured; registrar endpoints are disabled."
        )

    yield


def create_app() -> FastAPI:
    """Factory function that builds and configures the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_title,
        version=settings.app_version,
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Mount API routes
    app.include_router(api_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "domainsync.main:app",
        host="0.0.0.0",
        port=8020,
        reload=True,
    )
