"""Render job endpoints."""

from __future__ import annotations

import asyncio

from fastapi import APIRouter, Depends, HTTPException

from renderq.api.deps import get_render_queue
from renderq.api.schemas import (
    JobCancelResponse,
    JobCreateResponse,
    JobListItem,
    JobStatusResponse,
)
from renderq.errors import JobNotFoundError
from renderq.jobs.manager import RenderQueue
from renderq.jobs.models import JobData

router = APIRouter(prefix="/api/v1/renders", tags=["renders"])


@router.post("", response_model=JobCreateResponse, status_code=202)
async def create_render_job(
    data: JobData,
    queue: RenderQueue = Depends(get_render_queue),
) -> JobCreateResponse:
    try:
        job_id = queue.create_job(data)
    except asyncio.QueueFull:
        raise HTTPException(status_code=503, detail="Render queue is full")
    return JobCreateResponse(job_id=job_id, status=queue.get_job(job_id).status.value)


@router.get("", response_model=list[JobListItem])
async def list_render_jobs(
    queue: RenderQueue = Depends(get_render_queue),
) -> list[JobListItem]:
    return [
        JobListItem(job_id=job_id, status=state.status.value, created_at=state.created_at)
        for job_id, state in queue.list_jobs()
    ]


@router.get("/{job_id}", response_model=JobStatusResponse)
async def get_render_job(
    job_id: str,
    queue: RenderQueue = Depends(get_render_queue),
) -> JobStatusResponse:
    try:
        state = queue.get_job(job_id)
    except JobNotFoundError:
        raise HTTPException(status_code=404, detail="Job not found")
    return JobStatusResponse.from_state(job_id, state)


@router.post("/{job_id}/cancel", response_model=JobCancelResponse)
async def cancel_render_job(
    job_id: str,
    queue: RenderQueue = Depends(get_render_queue),
) -> JobCancelResponse:
    try:
        cancelled = queue.cancel_job(job_id)
    except JobNotFoundError:
        raise HTTPException(status_code=404, detail="Job not found")
    return JobCancelResponse(job_id=job_id, cancelled=cancelled)
