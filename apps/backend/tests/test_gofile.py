"""Tests for the Gofile upload client."""

from __future__ import annotations

from pathlib import Path

import httpx
import pytest

from renderq.services.gofile import SERVERS, GofileUploader, UploadOptions


def _ok_payload(file_id: str = "f1", folder: str = "folder-1") -> dict:
    return {
        "status": "ok",
        "data": {
            "downloadPage": f"https://gofile.io/d/{file_id}",
            "fileId": file_id,
            "fileName": "video.mp4",
            "parentFolder": folder,
            "guestToken": "guest-token",
            "md5": "abc",
        },
    }


@pytest.fixture
def video(tmp_path: Path) -> Path:
    path = tmp_path / "video.mp4"
    path.write_bytes(b"fake-mp4")
    return path


class TestUploadFromPath:
    @pytest.mark.asyncio
    async def test_success(self, video: Path) -> None:
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json=_ok_payload())

        uploader = GofileUploader(transport=httpx.MockTransport(handler))
        result = await uploader.upload_from_path(video)

        assert result.success
        assert result.download_page == "https://gofile.io/d/f1"
        assert result.parent_folder == "folder-1"
        assert str(requests[0].url) == SERVERS["auto"]
        assert b"fake-mp4" in requests[0].content
        assert b'filename="video.mp4"' in requests[0].content

    @pytest.mark.asyncio
    async def test_options_sent(self, video: Path) -> None:
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json=_ok_payload())

        uploader = GofileUploader(transport=httpx.MockTransport(handler))
        await uploader.upload_from_path(
            video,
            UploadOptions(folder_id="folder-9", token="tok", server=SERVERS["eu_paris"]),
        )

        request = requests[0]
        assert str(request.url) == SERVERS["eu_paris"]
        assert request.headers["Authorization"] == "Bearer tok"
        assert b"folder-9" in request.content

    @pytest.mark.asyncio
    async def test_http_error_is_unsuccessful(self, video: Path) -> None:
        uploader = GofileUploader(
            transport=httpx.MockTransport(lambda r: httpx.Response(503, text="busy"))
        )
        result = await uploader.upload_from_path(video)
        assert not result.success
        assert result.download_page is None
        assert "503" in result.error

    @pytest.mark.asyncio
    async def test_service_error_status(self, video: Path) -> None:
        uploader = GofileUploader(
            transport=httpx.MockTransport(
                lambda r: httpx.Response(200, json={"status": "error-rateLimit"})
            )
        )
        result = await uploader.upload_from_path(video)
        assert not result.success
        assert "error-rateLimit" in result.error

    @pytest.mark.asyncio
    async def test_connection_error(self, video: Path) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        uploader = GofileUploader(transport=httpx.MockTransport(handler))
        result = await uploader.upload_from_path(video)
        assert not result.success
        assert "refused" in result.error

    @pytest.mark.asyncio
    async def test_missing_file(self, tmp_path: Path) -> None:
        uploader = GofileUploader(
            transport=httpx.MockTransport(lambda r: httpx.Response(200, json=_ok_payload()))
        )
        result = await uploader.upload_from_path(tmp_path / "missing.mp4")
        assert not result.success
        assert "not found" in result.error

    @pytest.mark.asyncio
    async def test_directory_is_rejected(self, tmp_path: Path) -> None:
        uploader = GofileUploader(
            transport=httpx.MockTransport(lambda r: httpx.Response(200, json=_ok_payload()))
        )
        result = await uploader.upload_from_path(tmp_path)
        assert not result.success

    @pytest.mark.asyncio
    async def test_invalid_json(self, video: Path) -> None:
        uploader = GofileUploader(
            transport=httpx.MockTransport(lambda r: httpx.Response(200, text="<html>"))
        )
        result = await uploader.upload_from_path(video)
        assert not result.success


class TestUploadMultiple:
    @pytest.mark.asyncio
    async def test_reuses_first_folder(self, tmp_path: Path) -> None:
        paths = []
        for name in ("a.mp4", "b.mp4", "c.mp4"):
            path = tmp_path / name
            path.write_bytes(name.encode())
            paths.append(path)

        auth_headers: list[str | None] = []

        def handler(request: httpx.Request) -> httpx.Response:
            auth_headers.append(request.headers.get("Authorization"))
            return httpx.Response(200, json=_ok_payload(folder="shared"))

        uploader = GofileUploader(transport=httpx.MockTransport(handler))
        results = await uploader.upload_multiple_from_path(paths)

        assert [r.success for r in results] == [True, True, True]
        assert auth_headers == [None, "Bearer guest-token", "Bearer guest-token"]

    @pytest.mark.asyncio
    async def test_upload_folder(self, tmp_path: Path) -> None:
        (tmp_path / "one.mp4").write_bytes(b"1")
        nested = tmp_path / "nested"
        nested.mkdir()
        (nested / "two.mp4").write_bytes(b"2")

        uploader = GofileUploader(
            transport=httpx.MockTransport(lambda r: httpx.Response(200, json=_ok_payload()))
        )
        assert len(await uploader.upload_folder(tmp_path)) == 1
        assert len(await uploader.upload_folder(tmp_path, recursive=True)) == 2

    @pytest.mark.asyncio
    async def test_upload_folder_missing(self, tmp_path: Path) -> None:
        uploader = GofileUploader()
        results = await uploader.upload_folder(tmp_path / "nope")
        assert len(results) == 1
        assert not results[0].success
