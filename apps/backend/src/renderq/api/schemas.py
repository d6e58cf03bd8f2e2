"""Response schemas for the renderq API."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from renderq.jobs.models import (
    CompletedJob,
    FailedJob,
    InProgressJob,
    JobData,
    JobState,
)


class JobCreateResponse(BaseModel):
    job_id: str
    status: str


class JobCancelResponse(BaseModel):
    job_id: str
    cancelled: bool


class JobListItem(BaseModel):
    job_id: str
    status: str
    created_at: datetime


class JobStatusResponse(BaseModel):
    job_id: str
    status: str
    data: JobData
    progress: float | None = None
    video_url: str | None = None
    error: str | None = None
    error_type: str | None = None
    created_at: datetime
    finished_at: datetime | None = None

    @classmethod
    def from_state(cls, job_id: str, state: JobState) -> JobStatusResponse:
        """Expose only the fields valid for the state's status."""
        resp = cls(
            job_id=job_id,
            status=state.status.value,
            data=state.data,
            created_at=state.created_at,
        )
        if isinstance(state, InProgressJob):
            resp.progress = state.progress
        elif isinstance(state, CompletedJob):
            resp.video_url = state.video_url
            resp.finished_at = state.finished_at
        elif isinstance(state, FailedJob):
            resp.error = state.error
            resp.error_type = state.error_type
            resp.finished_at = state.finished_at
        return resp
