"""Render invoker backed by the Remotion CLI."""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
import re
import shlex
import tempfile
from pathlib import Path
from typing import Any

from renderq.errors import RenderCancelledError, RenderError
from renderq.jobs.cancellation import CancelSignal
from renderq.services.interfaces import CompositionHandle, RenderProgressCallback

logger = logging.getLogger(__name__)

# "Rendered 120/300", "Encoded 40/300"
_PROGRESS_RE = re.compile(r"\b(Rendered|Encoded)\s+(\d+)\s*/\s*(\d+)")

# Share of overall progress reached when all frames are rendered; encoding
# fills the rest.
_RENDER_WEIGHT = 0.8


def parse_progress(line: str) -> float | None:
    """Map a CLI progress line to an overall fraction, or None."""
    match = _PROGRESS_RE.search(line)
    if match is None:
        return None
    stage, done, total = match.group(1), int(match.group(2)), int(match.group(3))
    if total <= 0:
        return None
    fraction = min(done / total, 1.0)
    if stage == "Rendered":
        return fraction * _RENDER_WEIGHT
    return _RENDER_WEIGHT + fraction * (1.0 - _RENDER_WEIGHT)


class RemotionRenderer:
    """Drive ``remotion compositions`` / ``remotion render`` subprocesses.

    Cancellation is observed in two places: before the render process is
    spawned, and by a watcher that terminates the process as soon as the
    signal fires. Either way :class:`RenderCancelledError` is raised.
    """

    def __init__(
        self,
        serve_url: str,
        command: str = "npx remotion",
        codec: str = "h264",
        terminate_grace: float = 5.0,
    ) -> None:
        self.serve_url = serve_url
        self.command = shlex.split(command)
        self.codec = codec
        self.terminate_grace = terminate_grace

    async def select_composition(
        self, composition_id: str, input_props: dict[str, Any]
    ) -> CompositionHandle:
        """Check that the bundle exposes ``composition_id``.

        The composition takes its dimensions, frame rate and duration from
        the input props, so the handle is built from them.
        """
        with _props_file(input_props) as props_path:
            cmd = [
                *self.command,
                "compositions",
                self.serve_url,
                f"--props={props_path}",
                "--quiet",
            ]
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
            stdout, stderr = await proc.communicate()

        if proc.returncode != 0:
            raise RenderError(
                f"Could not list compositions: {_tail(stderr)}",
                returncode=proc.returncode,
                stderr=_tail(stderr),
            )

        ids = stdout.decode("utf-8", errors="replace").split()
        if composition_id not in ids:
            raise RenderError(f"Composition '{composition_id}' not found in {self.serve_url}")

        return CompositionHandle(
            id=composition_id,
            width=int(input_props["width"]),
            height=int(input_props["height"]),
            fps=float(input_props["fps"]),
            duration_in_frames=int(input_props["durationInFrames"]),
        )

    async def render_media(
        self,
        composition: CompositionHandle,
        input_props: dict[str, Any],
        output_location: Path,
        cancel_signal: CancelSignal,
        on_progress: RenderProgressCallback,
    ) -> Path:
        """Render ``composition`` to ``output_location``."""
        cancel_signal.raise_if_cancelled()
        output_location = Path(output_location)
        output_location.parent.mkdir(parents=True, exist_ok=True)

        with _props_file(input_props) as props_path:
            cmd = [
                *self.command,
                "render",
                self.serve_url,
                composition.id,
                str(output_location),
                f"--props={props_path}",
                f"--codec={self.codec}",
            ]
            logger.debug("Running %s", shlex.join(cmd))
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
            watcher = asyncio.create_task(self._terminate_on_cancel(proc, cancel_signal))
            try:
                stderr_task = asyncio.create_task(proc.stderr.read())
                async for raw_line in proc.stdout:
                    progress = parse_progress(raw_line.decode("utf-8", errors="replace"))
                    if progress is not None:
                        on_progress(progress)
                stderr = await stderr_task
                await proc.wait()
            finally:
                watcher.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await watcher
                if proc.returncode is None:
                    proc.kill()
                    await proc.wait()

        if cancel_signal.is_cancelled:
            raise RenderCancelledError("Render was cancelled", returncode=proc.returncode)
        if proc.returncode != 0:
            raise RenderError(
                f"Remotion render failed (exit {proc.returncode}): {_tail(stderr)}",
                returncode=proc.returncode,
                stderr=_tail(stderr),
            )
        if not output_location.exists():
            raise RenderError(f"Remotion did not produce {output_location}")

        return output_location

    async def _terminate_on_cancel(
        self, proc: asyncio.subprocess.Process, cancel_signal: CancelSignal
    ) -> None:
        await cancel_signal.wait()
        if proc.returncode is not None:
            return
        logger.info("Cancelling render process %s", proc.pid)
        proc.terminate()
        try:
            await asyncio.wait_for(proc.wait(), timeout=self.terminate_grace)
        except asyncio.TimeoutError:
            proc.kill()


@contextlib.contextmanager
def _props_file(input_props: dict[str, Any]):
    """Write input props to a temporary JSON file for the CLI."""
    with tempfile.NamedTemporaryFile(
        "w", suffix=".json", prefix="props-", delete=False, encoding="utf-8"
    ) as f:
        json.dump(input_props, f)
        path = Path(f.name)
    try:
        yield path
    finally:
        path.unlink(missing_ok=True)


def _tail(stderr: bytes, limit: int = 1000) -> str:
    return stderr.decode("utf-8", errors="replace")[-limit:].strip()
