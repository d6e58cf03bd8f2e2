"""Tests for the job registry."""

import threading

import pytest

from renderq.errors import JobNotFoundError
from renderq.jobs.models import CompletedJob, InProgressJob, JobData, JobStatus, QueuedJob
from renderq.jobs.registry import JobRegistry


@pytest.fixture
def data() -> JobData:
    return JobData(durationInFrames=60, fps=30, width=640, height=360)


class TestJobRegistry:
    def test_put_and_get(self, data: JobData) -> None:
        registry = JobRegistry()
        state = QueuedJob(data=data, cancel=lambda: None)
        registry.put("a", state)
        assert registry.get("a") is state
        assert "a" in registry
        assert len(registry) == 1

    def test_get_unknown_raises(self) -> None:
        registry = JobRegistry()
        with pytest.raises(JobNotFoundError) as exc_info:
            registry.get("missing")
        assert exc_info.value.job_id == "missing"
        assert registry.find("missing") is None

    def test_put_replaces(self, data: JobData) -> None:
        registry = JobRegistry()
        registry.put("a", QueuedJob(data=data, cancel=lambda: None))
        registry.put("a", CompletedJob(data=data, video_url="https://x"))
        assert registry.get("a").status is JobStatus.COMPLETED
        assert len(registry) == 1

    def test_delete(self, data: JobData) -> None:
        registry = JobRegistry()
        registry.put("a", QueuedJob(data=data, cancel=lambda: None))
        assert registry.delete("a") is True
        assert registry.delete("a") is False
        assert "a" not in registry

    def test_remove_if(self, data: JobData) -> None:
        registry = JobRegistry()
        registry.put("a", InProgressJob(data=data, cancel=lambda: None))
        is_queued = lambda s: s.status is JobStatus.QUEUED  # noqa: E731
        assert registry.remove_if("a", is_queued) is False
        assert "a" in registry

        registry.put("b", QueuedJob(data=data, cancel=lambda: None))
        assert registry.remove_if("b", is_queued) is True
        assert "b" not in registry
        assert registry.remove_if("missing", is_queued) is False

    def test_replace_if(self, data: JobData) -> None:
        registry = JobRegistry()
        queued = QueuedJob(data=data, cancel=lambda: None)
        running = InProgressJob(data=data, cancel=lambda: None)
        registry.put("a", queued)

        assert registry.replace_if("a", lambda s: s is queued, running) is True
        assert registry.get("a") is running
        assert registry.replace_if("a", lambda s: s is queued, queued) is False
        assert registry.get("a") is running

        assert registry.replace_if("missing", lambda s: True, running) is False
        assert "missing" not in registry

    def test_replace_if_after_concurrent_removal(self, data: JobData) -> None:
        registry = JobRegistry()
        queued = QueuedJob(data=data, cancel=lambda: None)
        registry.put("a", queued)
        remover = threading.Thread(
            target=registry.remove_if, args=("a", lambda s: s.status is JobStatus.QUEUED)
        )
        remover.start()
        remover.join()

        running = InProgressJob(data=data, cancel=lambda: None)
        assert registry.replace_if("a", lambda s: s is queued, running) is False
        assert "a" not in registry

    def test_items_is_a_snapshot(self, data: JobData) -> None:
        registry = JobRegistry()
        registry.put("a", QueuedJob(data=data, cancel=lambda: None))
        items = registry.items()
        registry.put("b", QueuedJob(data=data, cancel=lambda: None))
        assert [job_id for job_id, _ in items] == ["a"]

    def test_concurrent_writers_and_readers(self, data: JobData) -> None:
        registry = JobRegistry()
        errors: list[Exception] = []

        def writer(n: int) -> None:
            for i in range(200):
                registry.put(
                    f"job-{n}",
                    InProgressJob(data=data, cancel=lambda: None, progress=i / 199),
                )

        def reader() -> None:
            for _ in range(500):
                for _, state in registry.items():
                    if not 0.0 <= state.progress <= 1.0:
                        errors.append(AssertionError(state))

        threads = [threading.Thread(target=writer, args=(n,)) for n in range(4)]
        threads += [threading.Thread(target=reader) for _ in range(2)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert not errors
        assert len(registry) == 4
        assert all(state.progress == 1.0 for _, state in registry.items())
