"""Shared plumbing for section editors.

An editor never holds its slice. It reads the current slice through
``read_slice`` whenever it needs it and reports every edit as a single
``on_change(field, value)`` event carrying the full new field value.
Collections are rebuilt as new lists keyed by entity id.
"""

from __future__ import annotations

import html
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Generic, Iterable, Optional, TypeVar

from pydantic import BaseModel, ValidationError

from medicore.attachments.port import MAX_IMAGE_BYTES, AttachmentPort, UploadFile, validate_image
from medicore.core.exceptions import ChangeRejected

logger = logging.getLogger(__name__)

SliceT = TypeVar("SliceT", bound=BaseModel)
ItemT = TypeVar("ItemT", bound=BaseModel)

ChangeCallback = Callable[[str, Any], Any]


def new_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


def image_tag(url: str, alt: str = "") -> str:
    return f'<p><img src="{html.escape(url, quote=True)}" alt="{html.escape(alt, quote=True)}"></p>'


def without_id(items: Iterable[ItemT], item_id: str) -> list[ItemT]:
    return [item for item in items if getattr(item, "id") != item_id]


def find_by_id(items: Iterable[ItemT], item_id: str) -> ItemT:
    for item in items:
        if getattr(item, "id") == item_id:
            return item
    raise KeyError(item_id)


class SectionEditor(Generic[SliceT]):
    """Base for the per-slice editors."""

    #: Slice name used in rejection errors
    slice_name: str = ""
    #: Rich-text fields that accept embedded images
    rich_text_fields: tuple[str, ...] = ()

    def __init__(
        self,
        read_slice: Callable[[], SliceT],
        on_change: ChangeCallback,
        author: Optional[str] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.read_slice = read_slice
        self.on_change = on_change
        self.author = author
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    @property
    def current(self) -> SliceT:
        return self.read_slice()

    def set_field(self, field: str, value: Any) -> None:
        """Emit a raw change; the session validates it against the slice."""
        self.on_change(field, value)

    def build(self, model_cls: type[ItemT], field: str, data: dict[str, Any]) -> ItemT:
        """Validate ``data`` as ``model_cls`` or reject the change for ``field``."""
        try:
            return model_cls.model_validate(data)
        except ValidationError as e:
            raise ChangeRejected.from_validation(self.slice_name, field, e) from e

    def replace_item(self, items: Iterable[ItemT], field: str, item_id: str, update: dict[str, Any]) -> list[ItemT]:
        """New list where the item with ``item_id`` is rebuilt with ``update`` applied.

        Raises:
            KeyError: no item has ``item_id``.
        """
        result = []
        found = False
        for item in items:
            if getattr(item, "id") == item_id:
                data = item.model_dump()
                data.update(update)
                result.append(self.build(type(item), field, data))
                found = True
            else:
                result.append(item)
        if not found:
            raise KeyError(item_id)
        return result

    async def embed_image(
        self,
        field: str,
        file: UploadFile,
        port: AttachmentPort,
        max_bytes: int = MAX_IMAGE_BYTES,
    ) -> str:
        """Upload an image and append it to a rich-text field.

        The field is read again after the upload finishes so text typed in
        the meantime is kept. Nothing is written if validation or the upload
        fails.

        Returns:
            The URL of the uploaded image.

        Raises:
            AttachmentRejected: not an image, or too large.
            AttachmentUploadError: the upload backend failed.
            SessionStateError: the encounter was closed or switched during the upload.
        """
        if field not in self.rich_text_fields:
            raise ValueError(f"{field} does not accept images")
        validate_image(file, max_bytes)

        url = await port.upload(file)

        latest = getattr(self.read_slice(), field)
        self.on_change(field, latest + image_tag(url, file.filename))
        logger.debug(f"Embedded {file.filename} into {field} via {port.name}")
        return url
