"""Tests for job state models."""

import dataclasses
from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from renderq.jobs.models import (
    CompletedJob,
    FailedJob,
    InProgressJob,
    JobData,
    JobStatus,
    QueuedJob,
    TrackType,
    is_terminal,
)


def _make_data(track_count: int = 2) -> JobData:
    return JobData.model_validate(
        {
            "tracks": [
                {
                    "id": f"t{i}",
                    "trackId": i,
                    "type": "text",
                    "name": f"Title {i}",
                    "startFrame": i * 10,
                    "durationInFrames": 30,
                    "properties": {"text": "hello", "animation": "fade"},
                }
                for i in range(track_count)
            ],
            "durationInFrames": 300,
            "fps": 30,
            "width": 1920,
            "height": 1080,
        }
    )


class TestJobData:
    def test_parses_camel_case(self) -> None:
        data = _make_data()
        assert data.duration_in_frames == 300
        assert data.tracks[1].start_frame == 10
        assert data.tracks[0].type is TrackType.TEXT

    def test_input_props_round_trip_to_camel_case(self) -> None:
        props = _make_data().input_props()
        assert props["durationInFrames"] == 300
        assert props["tracks"][0]["trackId"] == 0
        assert props["tracks"][0]["properties"]["animation"] == "fade"

    def test_frozen(self) -> None:
        data = _make_data()
        with pytest.raises(ValidationError):
            data.fps = 60

    def test_rejects_non_positive_fps(self) -> None:
        with pytest.raises(ValidationError):
            JobData(durationInFrames=300, fps=0, width=1920, height=1080)


class TestJobStates:
    def test_status_tags(self) -> None:
        data = _make_data()
        assert QueuedJob(data=data, cancel=lambda: None).status is JobStatus.QUEUED
        assert InProgressJob(data=data, cancel=lambda: None).status is JobStatus.IN_PROGRESS
        assert CompletedJob(data=data, video_url="https://x").status is JobStatus.COMPLETED
        assert FailedJob(data=data, error="boom").status is JobStatus.FAILED

    def test_fields_are_exclusive_to_their_state(self) -> None:
        data = _make_data()
        completed = CompletedJob(data=data, video_url="https://x")
        assert not hasattr(completed, "progress")
        assert not hasattr(completed, "cancel")
        queued = QueuedJob(data=data, cancel=lambda: None)
        assert not hasattr(queued, "video_url")

    def test_states_are_immutable(self) -> None:
        state = InProgressJob(data=_make_data(), cancel=lambda: None, progress=0.5)
        with pytest.raises(dataclasses.FrozenInstanceError):
            state.progress = 0.9

    def test_terminal(self) -> None:
        data = _make_data()
        assert not is_terminal(QueuedJob(data=data, cancel=lambda: None))
        assert not is_terminal(InProgressJob(data=data, cancel=lambda: None))
        assert is_terminal(CompletedJob(data=data, video_url="https://x"))
        assert is_terminal(FailedJob(data=data, error="boom"))

    def test_failed_from_exception(self) -> None:
        data = _make_data()
        queued = QueuedJob(data=data, cancel=lambda: None)
        failed = FailedJob.from_exception(data, ValueError("bad input"), queued.created_at)
        assert failed.error == "bad input"
        assert failed.error_type == "ValueError"
        assert failed.created_at == queued.created_at

    def test_failed_from_exception_without_message(self) -> None:
        failed = FailedJob.from_exception(_make_data(), TimeoutError(), datetime.now(timezone.utc))
        assert failed.error == "TimeoutError"
