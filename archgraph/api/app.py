"""FastAPI application factory and lifespan management."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from archgraph import __version__
from archgraph.api.routes import router
from archgraph.config import settings
from archgraph.logging import setup_logging


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan handler; configures logging on startup.

    Args:
        app: The FastAPI application instance.
    """
    setup_logging(settings.log_level, settings.json_logs)
    yield


def create_app() -> FastAPI:
    """Build and return the configured FastAPI application.

    Returns:
        A fully wired :class:`FastAPI` instance.
    """
    app = FastAPI(
        title=settings.app_name,
        version=__version__,
        description=(
            "Builds dependency graphs of TypeScript/JavaScript projects at "
            "file, component, module, architecture and interface level, and "
            "diffs graph snapshots."
        ),
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(router, tags=["Dependency Graph"])
    return app


app = create_app()
