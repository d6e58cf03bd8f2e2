"""Upload coordinator: primary provider with object-storage fallback."""

from __future__ import annotations

import asyncio
import logging
import re
from pathlib import Path

from renderq.errors import UploadError
from renderq.services.interfaces import IObjectStorage, IPrimaryUploader

logger = logging.getLogger(__name__)

_GOFILE_PAGE_RE = re.compile(r"^https?://(?:www\.)?gofile\.io/d/([a-zA-Z0-9]+)")

DEFAULT_MIRROR_TEMPLATE = "https://gf.1drv.eu.org/{token}"


def convert_url(url: str, template: str = DEFAULT_MIRROR_TEMPLATE) -> str:
    """Rewrite a Gofile download page to the mirror host.

    URLs that don't match are returned unchanged.
    """
    match = _GOFILE_PAGE_RE.match(url)
    if match is None:
        return url
    return template.format(token=match.group(1))


class UploadCoordinator:
    """Persist a rendered file and return its public URL.

    Tries the primary uploader first. Any raised error, unsuccessful
    response, or missing download page falls back to object storage.
    Fails only when both providers fail.
    """

    def __init__(
        self,
        primary: IPrimaryUploader,
        secondary: IObjectStorage,
        bucket: str,
        content_type: str = "video/mp4",
        mirror_url_template: str = DEFAULT_MIRROR_TEMPLATE,
    ) -> None:
        self._primary = primary
        self._secondary = secondary
        self._bucket = bucket
        self._content_type = content_type
        self._mirror_url_template = mirror_url_template

    async def persist(self, local_path: Path, job_id: str) -> str:
        """Upload ``local_path`` and return the public URL.

        Raises:
            UploadError: If the fallback upload fails as well.
        """
        local_path = Path(local_path)
        url, primary_error = await self._try_primary(local_path)
        if url is not None:
            return url

        logger.info("Uploading %s to object storage (%s)", local_path.name, self._bucket)
        try:
            data = await asyncio.to_thread(local_path.read_bytes)
            url = await self._secondary.upload_hex(
                bucket=self._bucket,
                key=f"{job_id}{local_path.suffix or '.mp4'}",
                hex_data=data.hex(),
                content_type=self._content_type,
            )
        except Exception as e:
            raise UploadError(str(e) or type(e).__name__, primary_error=primary_error) from e

        logger.info("Object storage url: %s", url)
        return url

    async def _try_primary(self, local_path: Path) -> tuple[str | None, str | None]:
        """Return ``(mirrored_url, None)`` on success, else ``(None, reason)``."""
        logger.info("Uploading %s to Gofile", local_path.name)
        try:
            result = await self._primary.upload_from_path(local_path)
        except Exception as e:
            logger.warning("Error uploading to Gofile: %s", e)
            return None, f"{type(e).__name__}: {e}"

        if not result.success or not result.download_page:
            reason = result.error or "Upload failed to Gofile"
            logger.warning("Error uploading to Gofile: %s", reason)
            return None, reason

        return convert_url(result.download_page, self._mirror_url_template), None
