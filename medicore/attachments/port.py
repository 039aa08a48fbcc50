"""Attachment upload contract and the caller-side file checks."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

from medicore.core.exceptions import AttachmentRejected

logger = logging.getLogger(__name__)

MAX_IMAGE_BYTES = 5 * 1024 * 1024
MAX_ATTACHMENT_BYTES = 20 * 1024 * 1024


@dataclass(frozen=True)
class UploadFile:
    """A file picked by the operator, fully read into memory."""

    filename: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def is_image(self) -> bool:
        return self.content_type.lower().startswith("image/")


def validate_image(file: UploadFile, max_bytes: int = MAX_IMAGE_BYTES) -> None:
    """Reject non-image files and images over ``max_bytes``.

    Raises:
        AttachmentRejected: with a message suitable for the operator.
    """
    if not file.is_image:
        raise AttachmentRejected(f"{file.filename}: only image files can be embedded")
    if file.size > max_bytes:
        limit_mb = max_bytes / (1024 * 1024)
        raise AttachmentRejected(f"{file.filename}: image exceeds {limit_mb:g} MB")


def validate_attachment(file: UploadFile, max_bytes: int = MAX_ATTACHMENT_BYTES) -> None:
    """Reject empty result files and files over ``max_bytes``. Any type is accepted."""
    if file.size == 0:
        raise AttachmentRejected(f"{file.filename}: file is empty")
    if file.size > max_bytes:
        limit_mb = max_bytes / (1024 * 1024)
        raise AttachmentRejected(f"{file.filename}: file exceeds {limit_mb:g} MB")


class AttachmentPort(ABC):
    """Uploads a file and returns a URL that can be embedded in a record."""

    # True for fallbacks that keep files inside the record instead of storage
    degraded: bool = False

    @property
    @abstractmethod
    def name(self) -> str:
        """Short backend name for logs and status output."""
        ...

    @abstractmethod
    async def upload(self, file: UploadFile) -> str:
        """Upload ``file`` and return its URL.

        Raises:
            AttachmentUploadError: the backend failed or returned no URL.
        """
        ...

    async def aclose(self) -> None:
        """Release any held connections."""
        return None
