"""Health check endpoint."""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from renderq.api.deps import get_render_queue
from renderq.jobs.manager import RenderQueue

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    version: str
    jobs: int


@router.get("/health", response_model=HealthResponse)
async def health_check(queue: RenderQueue = Depends(get_render_queue)) -> HealthResponse:
    """Return the service status and the number of tracked jobs."""
    from renderq import __version__

    return HealthResponse(status="healthy", version=__version__, jobs=len(queue.registry))
