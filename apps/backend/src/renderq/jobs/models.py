"""Job domain models.

A job moves through ``queued -> in-progress -> completed | failed``. Each
status has its own frozen state class, so fields that belong to another
status (a ``video_url`` on a queued job, a ``progress`` on a failed one)
cannot be set.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field


class TrackType(str, Enum):
    """Kind of media placed on a track."""

    AUDIO = "audio"
    VIDEO = "video"
    IMAGE = "image"
    TEXT = "text"


class TrackItem(BaseModel):
    """A single item on the composition timeline."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    track_id: int = Field(..., alias="trackId", description="Row index")
    type: TrackType
    name: str
    start_frame: int = Field(..., alias="startFrame", ge=0)
    duration_in_frames: int = Field(..., alias="durationInFrames", gt=0)
    src: str | None = Field(None, description="Source for image/video/audio items")
    color: str | None = None
    properties: dict[str, Any] = Field(default_factory=dict)


class JobData(BaseModel):
    """Render request. Never mutated after submission."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    tracks: list[TrackItem] = Field(default_factory=list)
    duration_in_frames: int = Field(..., alias="durationInFrames", gt=0)
    fps: float = Field(..., gt=0)
    width: int = Field(..., gt=0)
    height: int = Field(..., gt=0)

    def input_props(self) -> dict[str, Any]:
        """Props handed to the composition, in the camelCase the bundle reads."""
        return self.model_dump(mode="json", by_alias=True)


class JobStatus(str, Enum):
    """Status of a job."""

    QUEUED = "queued"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    FAILED = "failed"


CancelHandle = Callable[[], None]


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class QueuedJob:
    """Waiting for the worker. ``cancel`` evicts the entry."""

    data: JobData
    cancel: CancelHandle = field(repr=False, compare=False)
    created_at: datetime = field(default_factory=_now)

    status: JobStatus = field(default=JobStatus.QUEUED, init=False)


@dataclass(frozen=True)
class InProgressJob:
    """Rendering or uploading. ``cancel`` signals the render to stop."""

    data: JobData
    cancel: CancelHandle = field(repr=False, compare=False)
    progress: float = 0.0
    created_at: datetime = field(default_factory=_now)

    status: JobStatus = field(default=JobStatus.IN_PROGRESS, init=False)


@dataclass(frozen=True)
class CompletedJob:
    """Terminal: artifact stored at ``video_url``."""

    data: JobData
    video_url: str
    created_at: datetime = field(default_factory=_now)
    finished_at: datetime = field(default_factory=_now)

    status: JobStatus = field(default=JobStatus.COMPLETED, init=False)


@dataclass(frozen=True)
class FailedJob:
    """Terminal: the render or the upload chain failed."""

    data: JobData
    error: str
    error_type: str = "Exception"
    created_at: datetime = field(default_factory=_now)
    finished_at: datetime = field(default_factory=_now)

    status: JobStatus = field(default=JobStatus.FAILED, init=False)

    @classmethod
    def from_exception(
        cls, data: JobData, exc: BaseException, created_at: datetime
    ) -> FailedJob:
        """Capture an exception as the failure cause."""
        return cls(
            data=data,
            error=str(exc) or type(exc).__name__,
            error_type=type(exc).__name__,
            created_at=created_at,
        )


JobState = Union[QueuedJob, InProgressJob, CompletedJob, FailedJob]

TERMINAL_STATUSES = frozenset({JobStatus.COMPLETED, JobStatus.FAILED})


def is_terminal(state: JobState) -> bool:
    """Return True once no further transitions can happen."""
    return state.status in TERMINAL_STATUSES
