"""Render job management."""

from renderq.jobs.cancellation import CancelSignal, make_cancel_signal
from renderq.jobs.manager import RenderQueue
from renderq.jobs.models import (
    CompletedJob,
    FailedJob,
    InProgressJob,
    JobData,
    JobState,
    JobStatus,
    QueuedJob,
    TrackItem,
    TrackType,
)
from renderq.jobs.registry import JobRegistry

__all__ = [
    "CancelSignal",
    "CompletedJob",
    "FailedJob",
    "InProgressJob",
    "JobData",
    "JobRegistry",
    "JobState",
    "JobStatus",
    "QueuedJob",
    "RenderQueue",
    "TrackItem",
    "TrackType",
    "make_cancel_signal",
]
