"""Offline fallback: embeds the file itself as a data URI."""

import base64
import logging

from medicore.attachments.port import AttachmentPort, UploadFile

logger = logging.getLogger(__name__)


class DataUriAttachmentUploader(AttachmentPort):
    """Degraded mode. Files end up inside the record, which grows accordingly."""

    degraded = True

    @property
    def name(self) -> str:
        return "data-uri"

    async def upload(self, file: UploadFile) -> str:
        logger.warning(f"Degraded attachment mode: embedding {file.filename} ({file.size} bytes) as data URI")
        encoded = base64.b64encode(file.data).decode("ascii")
        return f"data:{file.content_type};base64,{encoded}"
