"""Service interfaces (Protocols) for renderq.

The render queue only talks to the rendering engine and the storage
providers through these contracts, so implementations can be swapped
and faked in tests.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from renderq.jobs.cancellation import CancelSignal

# Render progress callback: fraction in [0, 1]
RenderProgressCallback = Callable[[float], None]


@dataclass(frozen=True)
class CompositionHandle:
    """A composition resolved against the render bundle."""

    id: str
    width: int
    height: int
    fps: float
    duration_in_frames: int


@dataclass(frozen=True)
class UploadResult:
    """Outcome of a primary-provider upload."""

    success: bool
    download_page: str | None = None
    file_id: str | None = None
    file_name: str | None = None
    parent_folder: str | None = None
    guest_token: str | None = None
    error: str | None = None


class IRenderInvoker(Protocol):
    """Interface for the rendering engine."""

    async def select_composition(
        self, composition_id: str, input_props: dict[str, Any]
    ) -> CompositionHandle:
        """Resolve ``composition_id`` with the given input props."""
        ...

    async def render_media(
        self,
        composition: CompositionHandle,
        input_props: dict[str, Any],
        output_location: Path,
        cancel_signal: CancelSignal,
        on_progress: RenderProgressCallback,
    ) -> Path:
        """Render the composition to ``output_location``.

        Implementations must check ``cancel_signal`` while rendering and
        raise ``RenderCancelledError`` once it fires. ``on_progress`` is
        called with fractions in ``[0, 1]``.

        Returns:
            Path to the rendered file
        """
        ...


class IPrimaryUploader(Protocol):
    """Interface for the first-attempt upload provider."""

    async def upload_from_path(self, file_path: Path) -> UploadResult:
        """Upload a local file. May raise or return ``success=False``."""
        ...


class IObjectStorage(Protocol):
    """Interface for the fallback object storage."""

    async def upload_hex(
        self, bucket: str, key: str, hex_data: str, content_type: str
    ) -> str:
        """Store hex-encoded bytes under ``key`` and return the public URL."""
        ...
