"""Render queue: in-memory registry with serialized background execution."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from uuid import uuid4

from renderq.jobs.cancellation import make_cancel_signal
from renderq.jobs.models import (
    CompletedJob,
    FailedJob,
    InProgressJob,
    JobData,
    JobState,
    JobStatus,
    QueuedJob,
    is_terminal,
)
from renderq.jobs.registry import JobRegistry
from renderq.services.interfaces import IRenderInvoker
from renderq.services.upload import UploadCoordinator

logger = logging.getLogger(__name__)


class RenderQueue:
    """Runs render jobs one at a time, in submission order.

    ``create_job`` registers a queued entry and puts the id on an
    ``asyncio.Queue``; a single worker task drains it, so no two renders
    ever overlap. Callers poll :meth:`get_job` for state changes.
    """

    def __init__(
        self,
        renderer: IRenderInvoker,
        uploader: UploadCoordinator,
        renders_dir: Path,
        composition_id: str = "RenderComposition",
        registry: JobRegistry | None = None,
        max_queue_size: int = 0,
    ) -> None:
        self._renderer = renderer
        self._uploader = uploader
        self._renders_dir = Path(renders_dir)
        self._composition_id = composition_id
        self._registry = registry or JobRegistry()
        self._queue: asyncio.Queue[str] = asyncio.Queue(maxsize=max_queue_size)
        self._worker: asyncio.Task[None] | None = None

    @property
    def registry(self) -> JobRegistry:
        return self._registry

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Spawn the worker task (must be called from a running loop)."""
        if self._worker is None or self._worker.done():
            self._worker = asyncio.create_task(self._run_worker(), name="render-queue-worker")

    async def stop(self) -> None:
        """Cancel the worker. Queued jobs stay queued; a running one is marked failed."""
        if self._worker is None:
            return
        self._worker.cancel()
        try:
            await self._worker
        except asyncio.CancelledError:
            pass
        self._worker = None

    async def join(self) -> None:
        """Wait until every job submitted so far has settled."""
        await self._queue.join()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def create_job(self, data: JobData) -> str:
        """Register a job and schedule it behind the ones already queued.

        Returns immediately with the new job id.

        Raises:
            asyncio.QueueFull: If the queue is bounded and full.
        """
        job_id = str(uuid4())

        def cancel() -> None:
            # Only a job that is still waiting gets evicted
            if self._registry.remove_if(job_id, lambda s: s.status is JobStatus.QUEUED):
                logger.info("Job %s cancelled while queued", job_id)

        self._registry.put(job_id, QueuedJob(data=data, cancel=cancel))
        try:
            self._queue.put_nowait(job_id)
        except asyncio.QueueFull:
            self._registry.delete(job_id)
            raise

        logger.info("Job %s queued (%d waiting)", job_id, self._queue.qsize())
        return job_id

    def get_job(self, job_id: str) -> JobState:
        """Return the current state.

        Raises:
            JobNotFoundError: If the id is unknown or the job was evicted.
        """
        return self._registry.get(job_id)

    def list_jobs(self) -> list[tuple[str, JobState]]:
        """List all jobs, most recent first."""
        return sorted(self._registry.items(), key=lambda item: item[1].created_at, reverse=True)

    def cancel_job(self, job_id: str) -> bool:
        """Invoke the job's cancel handle.

        Returns:
            False if the job is already terminal, True otherwise.

        Raises:
            JobNotFoundError: If the id is unknown or the job was evicted.
        """
        state = self._registry.get(job_id)
        if is_terminal(state):
            return False
        state.cancel()
        return True

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    async def _run_worker(self) -> None:
        while True:
            job_id = await self._queue.get()
            try:
                await self._process_render(job_id)
            except Exception:
                logger.exception("Unexpected error while processing job %s", job_id)
            finally:
                self._queue.task_done()

    def output_path(self, job_id: str) -> Path:
        return self._renders_dir / f"{job_id}.mp4"

    async def _process_render(self, job_id: str) -> None:
        job = self._registry.find(job_id)
        if job is None:
            logger.info("Job %s no longer registered, skipping", job_id)
            return

        cancel, cancel_signal = make_cancel_signal()
        data, created_at = job.data, job.created_at
        started = self._registry.replace_if(
            job_id,
            lambda s: s is job,
            InProgressJob(data=data, cancel=cancel, progress=0.0, created_at=created_at),
        )
        if not started:
            logger.info("Job %s cancelled before it started, skipping", job_id)
            return
        logger.info("Job %s started", job_id)

        def on_progress(progress: float) -> None:
            logger.debug("%s render progress: %s", job_id, progress)
            self._registry.put(
                job_id,
                InProgressJob(data=data, cancel=cancel, progress=progress, created_at=created_at),
            )

        output_location = self.output_path(job_id)
        rendered: Path | None = None
        try:
            input_props = data.input_props()
            composition = await self._renderer.select_composition(
                self._composition_id, input_props
            )
            rendered = await self._renderer.render_media(
                composition=composition,
                input_props=input_props,
                output_location=output_location,
                cancel_signal=cancel_signal,
                on_progress=on_progress,
            )
            cancel_signal.raise_if_cancelled()

            video_url = await self._uploader.persist(rendered, job_id)
            self._registry.put(
                job_id,
                CompletedJob(data=data, video_url=video_url, created_at=created_at),
            )
            logger.info("Job %s completed: %s", job_id, video_url)
        except asyncio.CancelledError as e:
            logger.warning("Job %s interrupted by shutdown", job_id)
            self._registry.put(job_id, FailedJob.from_exception(data, e, created_at))
            raise
        except Exception as e:
            logger.exception("Job %s failed", job_id)
            self._registry.put(job_id, FailedJob.from_exception(data, e, created_at))
        finally:
            await self._remove_artifact(rendered or output_location)

    async def _remove_artifact(self, path: Path) -> None:
        try:
            await asyncio.to_thread(path.unlink, missing_ok=True)
        except OSError as e:
            logger.warning("Could not remove render artifact %s: %s", path, e)
