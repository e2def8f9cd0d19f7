"""
Tests for the Cloudinary uploader using httpx.MockTransport.
"""

import asyncio
import hashlib

import httpx
import pytest

from app.core.exceptions import UpstreamError, UploadTimeoutError
from app.services.upload_service import CloudinaryUploader, sign_params


def make_uploader(handler, timeout: float = 5.0) -> CloudinaryUploader:
    return CloudinaryUploader(
        cloud_name="demo",
        api_key="key",
        api_secret="secret",
        folder="dev-events",
        timeout=timeout,
        transport=httpx.MockTransport(handler),
    )


def test_sign_params_sorts_keys():
    expected = hashlib.sha1(b"folder=dev-events&timestamp=1700000000secret").hexdigest()
    assert sign_params({"timestamp": 1700000000, "folder": "dev-events"}, "secret") == expected


@pytest.mark.asyncio
async def test_upload_returns_secure_url():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["body"] = request.content
        return httpx.Response(200, json={"secure_url": "https://res.cloudinary.com/demo/cover.png"})

    url = await make_uploader(handler).upload(b"bytes", "cover.png", "image/png")

    assert url == "https://res.cloudinary.com/demo/cover.png"
    assert seen["url"] == "https://api.cloudinary.com/v1_1/demo/image/upload"
    assert b'name="signature"' in seen["body"]
    assert b'name="folder"' in seen["body"]


@pytest.mark.asyncio
async def test_upload_falls_back_to_plain_url():
    def handler(request):
        return httpx.Response(200, json={"url": "http://res.cloudinary.com/demo/cover.png"})

    assert await make_uploader(handler).upload(b"bytes", "cover.png") == "http://res.cloudinary.com/demo/cover.png"


@pytest.mark.asyncio
async def test_upload_error_status():
    def handler(request):
        return httpx.Response(401, json={"error": {"message": "Invalid Signature"}})

    with pytest.raises(UpstreamError) as exc_info:
        await make_uploader(handler).upload(b"bytes", "cover.png")

    assert not isinstance(exc_info.value, UploadTimeoutError)
    assert exc_info.value.status_code == 502


@pytest.mark.asyncio
async def test_upload_transport_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(UpstreamError):
        await make_uploader(handler).upload(b"bytes", "cover.png")


@pytest.mark.asyncio
async def test_upload_missing_url_in_response():
    def handler(request):
        return httpx.Response(200, json={"public_id": "cover"})

    with pytest.raises(UpstreamError):
        await make_uploader(handler).upload(b"bytes", "cover.png")


@pytest.mark.asyncio
async def test_upload_times_out():
    async def handler(request):
        await asyncio.sleep(1)
        return httpx.Response(200, json={"secure_url": "too-late"})

    with pytest.raises(UploadTimeoutError) as exc_info:
        await make_uploader(handler, timeout=0.05).upload(b"bytes", "cover.png")

    assert exc_info.value.status_code == 504


@pytest.mark.asyncio
async def test_unconfigured_uploader_fails_fast():
    uploader = CloudinaryUploader(cloud_name="", api_key="", api_secret="")

    with pytest.raises(UpstreamError):
        await uploader.upload(b"bytes", "cover.png")
