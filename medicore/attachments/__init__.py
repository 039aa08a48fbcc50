"""Attachment uploads for rich-text fields and investigation results."""

import logging
from typing import Optional

from medicore.attachments.data_uri import DataUriAttachmentUploader
from medicore.attachments.network import HttpAttachmentUploader
from medicore.attachments.port import (
    MAX_ATTACHMENT_BYTES,
    MAX_IMAGE_BYTES,
    AttachmentPort,
    UploadFile,
    validate_attachment,
    validate_image,
)
from medicore.config import Settings, get_settings

logger = logging.getLogger(__name__)


def create_attachment_port(settings: Optional[Settings] = None) -> Optional[AttachmentPort]:
    """Pick the uploader for this deployment.

    Network uploader when an upload URL is configured. Outside production the
    data-URI fallback is used instead. In production without a URL there is
    no uploader and attachment requests are refused.
    """
    settings = settings or get_settings()

    if settings.has_attachment_uploader:
        return HttpAttachmentUploader(settings.attachment_upload_url, timeout=settings.attachment_timeout)

    if not settings.is_production:
        logger.warning("No attachment upload URL configured, using data-URI fallback")
        return DataUriAttachmentUploader()

    logger.warning("No attachment upload URL configured, attachments disabled")
    return None


__all__ = [
    "MAX_ATTACHMENT_BYTES",
    "MAX_IMAGE_BYTES",
    "AttachmentPort",
    "DataUriAttachmentUploader",
    "HttpAttachmentUploader",
    "UploadFile",
    "create_attachment_port",
    "validate_attachment",
    "validate_image",
]
