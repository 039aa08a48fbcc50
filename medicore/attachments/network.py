"""Network uploader posting multipart files to an attachment service."""

import logging

import httpx

from medicore.attachments.port import AttachmentPort, UploadFile
from medicore.core.exceptions import AttachmentUploadError

logger = logging.getLogger(__name__)


class HttpAttachmentUploader(AttachmentPort):
    """Posts files to ``upload_url`` and expects ``{"url": ...}`` back."""

    def __init__(
        self,
        upload_url: str,
        timeout: int = 30,
        client: httpx.AsyncClient | None = None,
    ):
        """Initialize the uploader.

        Args:
            upload_url: Endpoint accepting a multipart ``file`` field
            timeout: Request timeout in seconds
            client: Pre-built client, mainly for tests
        """
        self.upload_url = upload_url
        self.timeout = timeout
        self._client = client or httpx.AsyncClient(timeout=httpx.Timeout(timeout, connect=10.0))

    @property
    def name(self) -> str:
        return "http"

    async def upload(self, file: UploadFile) -> str:
        files = {"file": (file.filename, file.data, file.content_type)}
        try:
            response = await self._client.post(self.upload_url, files=files)
            response.raise_for_status()
        except httpx.TimeoutException as e:
            logger.error(f"Attachment upload timed out: {e}")
            raise AttachmentUploadError(f"Upload timed out after {self.timeout}s") from e
        except httpx.HTTPStatusError as e:
            logger.error(f"Attachment service returned {e.response.status_code}")
            raise AttachmentUploadError(f"Upload failed with status {e.response.status_code}") from e
        except httpx.HTTPError as e:
            logger.error(f"Attachment upload error: {e}")
            raise AttachmentUploadError(f"Could not reach attachment service at {self.upload_url}") from e

        try:
            body = response.json()
        except ValueError as e:
            raise AttachmentUploadError("Attachment service returned invalid JSON") from e

        if not isinstance(body, dict):
            raise AttachmentUploadError("Attachment service response is not a JSON object")
        url = body.get("url")

        if not url:
            raise AttachmentUploadError("Attachment service response has no url")

        logger.info(f"Uploaded {file.filename} ({file.size} bytes)")
        return url

    async def aclose(self) -> None:
        await self._client.aclose()
