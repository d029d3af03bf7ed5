"""
Async client for the Cloudinary image upload API.

Requests are signed with the Cloudinary SDK and posted with httpx; the caller
awaits a single round trip and gets back the durable ``secure_url`` or an ``UploadError``.
"""
import logging
from dataclasses import dataclass
from typing import Optional

import httpx
from cloudinary import utils as cloudinary_utils

from ..config.settings import Settings
from ..exceptions import UploadError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UploadResult:
    url: str
    public_id: Optional[str] = None


def _is_absolute_url(value) -> bool:
    if not isinstance(value, str):
        return False
    try:
        url = httpx.URL(value)
    except httpx.InvalidURL:
        return False
    return url.scheme in ("http", "https") and bool(url.host)


class CloudinaryUploadClient:
    def __init__(self, settings: Settings, client: Optional[httpx.AsyncClient] = None):
        self.settings = settings
        self.folder = settings.UPLOAD_FOLDER
        self._client = client or httpx.AsyncClient(
            base_url=settings.CLOUDINARY_BASE_URL,
            timeout=settings.UPLOAD_TIMEOUT,
            limits=httpx.Limits(
                max_connections=settings.UPLOAD_MAX_CONNECTIONS,
                max_keepalive_connections=settings.UPLOAD_MAX_CONNECTIONS,
            ),
        )

    @property
    def upload_path(self) -> str:
        return f"/v1_1/{self.settings.CLOUDINARY_CLOUD_NAME}/image/upload"

    async def upload(self, data: bytes, filename: Optional[str] = None) -> UploadResult:
        if not self.settings.upload_configured:
            raise UploadError("Cloudinary credentials are not configured")

        params = {"folder": self.folder, "timestamp": cloudinary_utils.now()}
        form = {
            **params,
            "api_key": self.settings.CLOUDINARY_API_KEY,
            "signature": cloudinary_utils.api_sign_request(
                params, self.settings.CLOUDINARY_API_SECRET
            ),
        }
        files = {"file": (filename or "upload", data, "application/octet-stream")}

        try:
            resp = await self._client.post(self.upload_path, data=form, files=files)
        except httpx.TimeoutException as e:
            raise UploadError(f"Image upload timed out: {e}") from e
        except httpx.HTTPError as e:
            raise UploadError(f"Image upload failed: {e}") from e

        try:
            body = resp.json()
        except ValueError as e:
            raise UploadError(
                f"Image upload returned non-JSON response (status {resp.status_code})"
            ) from e

        if resp.is_error:
            remote_error = body.get("error", {}) if isinstance(body, dict) else {}
            message = remote_error.get("message") if isinstance(remote_error, dict) else None
            raise UploadError(
                f"Image upload rejected (status {resp.status_code}): {message or 'unknown error'}"
            )

        url = body.get("secure_url") if isinstance(body, dict) else None
        if not _is_absolute_url(url):
            raise UploadError("Image upload response did not include a secure_url")

        logger.info(f"Uploaded image to {url}")
        return UploadResult(url=url, public_id=body.get("public_id"))

    async def aclose(self):
        await self._client.aclose()
