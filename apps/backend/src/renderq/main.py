"""Main entry point for the renderq application."""

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

import uvicorn
from fastapi import FastAPI

from renderq.api.deps import build_render_queue, init_render_queue
from renderq.api.routes import health, renders
from renderq.config import settings


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Start the render worker on startup, stop it on shutdown."""
    settings.ensure_directories()
    queue = init_render_queue(build_render_queue(settings))
    queue.start()
    yield
    await queue.stop()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="renderq",
        description="Serialized render queue for video compositions",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.include_router(health.router)
    app.include_router(renders.router)

    return app


app = create_app()


def main() -> None:
    """Run the application."""
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    settings.ensure_directories()
    uvicorn.run(
        "renderq.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )


if __name__ == "__main__":
    main()
