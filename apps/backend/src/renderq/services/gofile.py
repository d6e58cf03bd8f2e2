"""Gofile upload client (primary storage provider)."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import httpx

from renderq.errors import GofileUploadError
from renderq.services.interfaces import UploadResult

logger = logging.getLogger(__name__)


# Regional upload endpoints
SERVERS: dict[str, str] = {
    "auto": "https://upload-ap-sgp.gofile.io/uploadfile",
    "eu_paris": "https://upload-eu-par.gofile.io/uploadfile",
    "na_phoenix": "https://upload-na-phx.gofile.io/uploadfile",
    "ap_singapore": "https://upload-ap-sgp.gofile.io/uploadfile",
    "ap_hongkong": "https://upload-ap-hkg.gofile.io/uploadfile",
    "ap_tokyo": "https://upload-ap-tyo.gofile.io/uploadfile",
    "sa_saopaulo": "https://upload-sa-sao.gofile.io/uploadfile",
}


@dataclass
class UploadOptions:
    """Per-request upload options."""

    folder_id: str | None = None
    token: str | None = None
    server: str | None = None


class GofileUploader:
    """Client for the Gofile anonymous upload API.

    Upload methods never raise for request or service errors; they return
    an :class:`UploadResult` with ``success=False`` and the reason.
    """

    def __init__(
        self,
        upload_url: str | None = None,
        proxy_url: str | None = None,
        timeout: float = 600.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the uploader.

        Args:
            upload_url: Default upload endpoint. Defaults to the Singapore region.
            proxy_url: Optional HTTP(S) proxy for all requests.
            timeout: HTTP request timeout in seconds.
            transport: Optional httpx transport (used by tests).
        """
        self.upload_url = upload_url or SERVERS["auto"]
        self.proxy_url = proxy_url
        self.timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        kwargs: dict[str, Any] = {"timeout": self.timeout}
        if self._transport is not None:
            kwargs["transport"] = self._transport
        elif self.proxy_url:
            kwargs["proxy"] = self.proxy_url
        return httpx.AsyncClient(**kwargs)

    async def upload_from_path(
        self,
        file_path: Path,
        options: UploadOptions | None = None,
    ) -> UploadResult:
        """Upload a file from the local filesystem.

        Args:
            file_path: Path to the file
            options: Folder, token and server overrides

        Returns:
            UploadResult with the download page on success
        """
        options = options or UploadOptions()
        file_path = Path(file_path)
        try:
            if not file_path.exists():
                raise GofileUploadError(f"File not found: {file_path}")
            if not file_path.is_file():
                raise GofileUploadError(f"Path is not a file: {file_path}")

            size_mb = file_path.stat().st_size / 1024 / 1024
            logger.info("Uploading %s (%.2f MB) to Gofile", file_path.name, size_mb)

            data = await self._post_file(file_path, options)
        except (GofileUploadError, httpx.HTTPError, OSError, ValueError) as e:
            logger.error("Gofile upload failed: %s", e)
            return UploadResult(success=False, error=str(e))

        logger.info("Gofile download page: %s", data.get("downloadPage"))
        return UploadResult(
            success=True,
            download_page=data.get("downloadPage"),
            file_id=data.get("fileId"),
            file_name=data.get("fileName") or file_path.name,
            parent_folder=data.get("parentFolder"),
            guest_token=data.get("guestToken"),
        )

    async def upload_multiple_from_path(
        self,
        file_paths: list[Path],
        options: UploadOptions | None = None,
    ) -> list[UploadResult]:
        """Upload several files into the same folder.

        When no folder is given, the folder created by the first successful
        upload (and its guest token) is reused for the rest.
        """
        options = options or UploadOptions()
        current = UploadOptions(options.folder_id, options.token, options.server)
        results: list[UploadResult] = []

        for i, path in enumerate(file_paths, 1):
            logger.info("[%d/%d] Uploading: %s", i, len(file_paths), path)
            result = await self.upload_from_path(path, current)
            results.append(result)

            if result.success and not options.folder_id and result.parent_folder:
                current.folder_id = result.parent_folder
                if result.guest_token:
                    current.token = result.guest_token

        return results

    async def upload_folder(
        self,
        folder_path: Path,
        recursive: bool = False,
        options: UploadOptions | None = None,
    ) -> list[UploadResult]:
        """Upload every file in a folder."""
        folder_path = Path(folder_path)
        if not folder_path.is_dir():
            return [UploadResult(success=False, error=f"Folder not found: {folder_path}")]

        pattern = "**/*" if recursive else "*"
        files = sorted(p for p in folder_path.glob(pattern) if p.is_file())
        logger.info("Found %d file(s) to upload", len(files))
        return await self.upload_multiple_from_path(files, options)

    async def _post_file(self, file_path: Path, options: UploadOptions) -> dict[str, Any]:
        """POST the file as multipart form data and return the ``data`` payload."""
        upload_url = options.server or self.upload_url
        headers: dict[str, str] = {}
        if options.token:
            headers["Authorization"] = f"Bearer {options.token}"
        form: dict[str, str] = {}
        if options.folder_id:
            form["folderId"] = options.folder_id

        async with self._client() as client:
            with open(file_path, "rb") as f:
                response = await client.post(
                    upload_url,
                    files={"file": (file_path.name, f)},
                    data=form,
                    headers=headers,
                )

        if response.status_code != 200:
            raise GofileUploadError(
                f"HTTP error: {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
            )

        payload = response.json()
        if payload.get("status") != "ok":
            raise GofileUploadError(f"Upload failed: {payload.get('status')}")

        return payload.get("data") or {}
