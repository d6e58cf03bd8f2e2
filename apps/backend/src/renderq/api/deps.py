"""FastAPI dependencies."""

from __future__ import annotations

from renderq.config import Settings
from renderq.jobs.manager import RenderQueue
from renderq.services.gofile import GofileUploader
from renderq.services.r2 import R2Storage
from renderq.services.remotion import RemotionRenderer
from renderq.services.upload import UploadCoordinator

_render_queue: RenderQueue | None = None


def build_render_queue(settings: Settings) -> RenderQueue:
    """Wire the render queue with the configured renderer and uploaders."""
    uploader = UploadCoordinator(
        primary=GofileUploader(
            upload_url=settings.gofile_upload_url,
            proxy_url=settings.proxy_url,
            timeout=settings.upload_timeout,
        ),
        secondary=R2Storage.from_settings(settings),
        bucket=settings.r2_bucket,
        content_type=settings.content_type,
        mirror_url_template=settings.mirror_url_template,
    )
    return RenderQueue(
        renderer=RemotionRenderer(
            serve_url=settings.serve_url,
            command=settings.remotion_command,
            codec=settings.codec,
        ),
        uploader=uploader,
        renders_dir=settings.renders_dir,
        composition_id=settings.composition_id,
        max_queue_size=settings.max_queue_size,
    )


def init_render_queue(queue: RenderQueue) -> RenderQueue:
    """Install the global RenderQueue (called at app startup)."""
    global _render_queue
    _render_queue = queue
    return _render_queue


def get_render_queue() -> RenderQueue:
    """Dependency that provides the RenderQueue instance."""
    if _render_queue is None:
        raise RuntimeError("RenderQueue not initialized — call init_render_queue() first")
    return _render_queue
