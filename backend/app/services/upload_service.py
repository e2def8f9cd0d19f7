"""
Image upload to Cloudinary over its REST API.

Every upload runs under a hard timeout (UPLOAD_TIMEOUT_SECONDS). When it
expires the request is cancelled and UploadTimeoutError (504) is raised;
any other failure raises UpstreamError (502). Uploads are never retried
within a request.
"""

import asyncio
import hashlib
import time
from typing import Optional

import httpx

from app.core.config import Settings
from app.core.exceptions import UpstreamError, UploadTimeoutError
from app.core.logging import get_logger
from app.core.metrics import upload_latency

logger = get_logger(__name__)

CLOUDINARY_UPLOAD_URL = "https://api.cloudinary.com/v1_1/{cloud_name}/image/upload"


def sign_params(params: dict, api_secret: str) -> str:
    """Cloudinary signature: sha1 of sorted `key=value` pairs joined by '&', plus the secret."""
    to_sign = "&".join(f"{key}={params[key]}" for key in sorted(params))
    return hashlib.sha1(f"{to_sign}{api_secret}".encode("utf-8")).hexdigest()


class CloudinaryUploader:
    def __init__(
        self,
        cloud_name: str,
        api_key: str,
        api_secret: str,
        folder: str = "dev-events",
        timeout: float = 120.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.cloud_name = cloud_name
        self.api_key = api_key
        self.api_secret = api_secret
        self.folder = folder
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> "CloudinaryUploader":
        return cls(
            cloud_name=settings.CLOUDINARY_CLOUD_NAME,
            api_key=settings.CLOUDINARY_API_KEY,
            api_secret=settings.CLOUDINARY_API_SECRET,
            folder=settings.UPLOAD_FOLDER,
            timeout=settings.UPLOAD_TIMEOUT_SECONDS,
        )

    @property
    def configured(self) -> bool:
        return bool(self.cloud_name and self.api_key and self.api_secret)

    async def upload(self, data: bytes, filename: str, content_type: str = "image/png") -> str:
        """Upload `data` and return its secure URL."""
        if not self.configured:
            logger.error("image_upload_not_configured")
            raise UpstreamError("Image upload failed: upload service is not configured")

        start = time.perf_counter()
        try:
            url = await asyncio.wait_for(
                self._post(data, filename, content_type), timeout=self.timeout
            )
        except asyncio.TimeoutError as e:
            logger.error("image_upload_timeout", timeout_s=self.timeout, filename=filename)
            raise UploadTimeoutError() from e
        finally:
            upload_latency.observe(time.perf_counter() - start)

        logger.info("image_uploaded", filename=filename, url=url)
        return url

    async def _post(self, data: bytes, filename: str, content_type: str) -> str:
        params = {"folder": self.folder, "timestamp": int(time.time())}
        form = {
            **{key: str(value) for key, value in params.items()},
            "api_key": self.api_key,
            "signature": sign_params(params, self.api_secret),
        }
        endpoint = CLOUDINARY_UPLOAD_URL.format(cloud_name=self.cloud_name)

        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=None) as client:
                response = await client.post(
                    endpoint,
                    data=form,
                    files={"file": (filename, data, content_type)},
                )
                response.raise_for_status()
                payload = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(
                "image_upload_failed",
                status_code=e.response.status_code,
                body=e.response.text[:200],
            )
            raise UpstreamError(f"Image upload failed with status {e.response.status_code}") from e
        except (httpx.HTTPError, ValueError) as e:
            logger.error("image_upload_failed", error=str(e))
            raise UpstreamError(f"Image upload failed: {e}") from e

        url = payload.get("secure_url") or payload.get("url")
        if not url:
            logger.error("image_upload_failed", error="no url in response")
            raise UpstreamError("Image upload failed: no URL returned")
        return url
