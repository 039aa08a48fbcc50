"""Investigations editor: ordered tests, their status and their results."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from medicore.attachments.port import MAX_ATTACHMENT_BYTES, AttachmentPort, UploadFile, validate_attachment
from medicore.core.exceptions import InvalidTransitionError
from medicore.editors.base import SectionEditor, find_by_id, new_id, without_id
from medicore.models.consultation import (
    Investigation,
    InvestigationResult,
    InvestigationsSlice,
    InvestigationStatus,
    InvestigationType,
    Priority,
    ResultAttachment,
)

logger = logging.getLogger(__name__)

S = InvestigationStatus

# Allowed next statuses; cancelled and reported are terminal
TRANSITIONS: dict[InvestigationStatus, frozenset[InvestigationStatus]] = {
    S.ORDERED: frozenset({S.SCHEDULED, S.CANCELLED}),
    S.SCHEDULED: frozenset({S.IN_PROGRESS, S.CANCELLED}),
    S.IN_PROGRESS: frozenset({S.COMPLETED, S.CANCELLED}),
    S.COMPLETED: frozenset({S.REPORTED}),
    S.REPORTED: frozenset(),
    S.CANCELLED: frozenset(),
}

# Timestamp set when an investigation enters a status
STATUS_TIMESTAMPS = {
    S.SCHEDULED: "scheduled_at",
    S.COMPLETED: "completed_at",
    S.REPORTED: "reported_at",
}

RESULT_STATUSES = (S.COMPLETED, S.REPORTED)


def can_transition(current: InvestigationStatus, target: InvestigationStatus) -> bool:
    return target in TRANSITIONS[current]


@dataclass
class PanelItem:
    name: str
    type: InvestigationType = InvestigationType.LAB
    code: Optional[str] = None
    department: str = ""


@dataclass
class InvestigationPanel:
    """A named group of tests ordered together, e.g. a routine blood panel."""

    name: str
    category: str = ""
    items: list[PanelItem] = field(default_factory=list)


def attachment_kind(content_type: str) -> str:
    if content_type.startswith("image/"):
        return "image"
    if content_type == "application/pdf":
        return "pdf"
    return "document"


class InvestigationsEditor(SectionEditor[InvestigationsSlice]):
    slice_name = "investigations"

    def _investigations(self) -> list[Investigation]:
        return self.current.investigations

    def order(
        self,
        name: str,
        type: InvestigationType = InvestigationType.LAB,
        priority: Priority = Priority.ROUTINE,
        **details: Any,
    ) -> Investigation:
        """Order one investigation. New investigations always start as ``ordered``."""
        details.pop("status", None)
        data = {
            **details,
            "id": new_id("inv"),
            "name": name,
            "type": type,
            "priority": priority,
            "status": S.ORDERED,
            "ordered_at": self.clock(),
            "ordered_by": details.get("ordered_by") or self.author or "",
        }
        investigation = self.build(Investigation, "investigations", data)
        self.on_change("investigations", [*self._investigations(), investigation])
        return investigation

    def apply_panel(self, panel: InvestigationPanel, priority: Priority = Priority.ROUTINE) -> list[Investigation]:
        now = self.clock()
        added = [
            self.build(
                Investigation,
                "investigations",
                {
                    "id": new_id("inv"),
                    "name": item.name,
                    "type": item.type,
                    "code": item.code,
                    "category": panel.category,
                    "department": item.department,
                    "priority": priority,
                    "status": S.ORDERED,
                    "ordered_at": now,
                    "ordered_by": self.author or "",
                },
            )
            for item in panel.items
        ]
        if added:
            self.on_change("investigations", [*self._investigations(), *added])
            logger.debug(f"Ordered panel '{panel.name}' ({len(added)} investigations)")
        return added

    def remove(self, investigation_id: str) -> None:
        self.on_change("investigations", without_id(self._investigations(), investigation_id))

    def advance(self, investigation_id: str, target: InvestigationStatus) -> Investigation:
        """Move an investigation to ``target`` status.

        Raises:
            InvalidTransitionError: ``target`` is not reachable from the current status.
        """
        target = InvestigationStatus(target)
        current = find_by_id(self._investigations(), investigation_id)
        if not can_transition(current.status, target):
            raise InvalidTransitionError(current.status.value, target.value)

        update: dict[str, Any] = {"status": target}
        stamp = STATUS_TIMESTAMPS.get(target)
        if stamp:
            update[stamp] = self.clock()
        return self._replace(investigation_id, update)

    def cancel(self, investigation_id: str) -> Investigation:
        return self.advance(investigation_id, S.CANCELLED)

    def record_result(self, investigation_id: str, result: InvestigationResult | dict[str, Any]) -> Investigation:
        """Attach a result to a completed investigation; it becomes ``reported``.

        Existing result attachments are kept when the new result carries none.
        """
        current = find_by_id(self._investigations(), investigation_id)
        if current.status not in RESULT_STATUSES:
            raise InvalidTransitionError(current.status.value, S.REPORTED.value)

        if isinstance(result, InvestigationResult):
            result = result.model_dump()
        result = dict(result)
        if current.result is not None and not result.get("attachments"):
            result["attachments"] = [a.model_dump() for a in current.result.attachments]
        if not result.get("reported_by"):
            result["reported_by"] = self.author

        update: dict[str, Any] = {"result": result}
        if current.status == S.COMPLETED:
            update.update(status=S.REPORTED, reported_at=self.clock())
        return self._replace(investigation_id, update)

    async def attach_result_file(
        self,
        investigation_id: str,
        file: UploadFile,
        port: AttachmentPort,
        max_bytes: int = MAX_ATTACHMENT_BYTES,
    ) -> ResultAttachment:
        """Upload a report file and add it to the investigation's result.

        The investigation is looked up again after the upload completes. On
        a rejected file or upload failure nothing changes.

        Raises:
            AttachmentRejected: empty file, or larger than ``max_bytes``.
            AttachmentUploadError: the upload backend failed.
        """
        find_by_id(self._investigations(), investigation_id)
        validate_attachment(file, max_bytes)
        url = await port.upload(file)

        current = find_by_id(self._investigations(), investigation_id)
        attachment = ResultAttachment(
            id=new_id("att"),
            name=file.filename,
            type=attachment_kind(file.content_type),
            url=url,
            upload_date=self.clock(),
        )
        result = current.result or InvestigationResult()
        result = result.model_copy(update={"attachments": [*result.attachments, attachment]})
        self._replace(investigation_id, {"result": result.model_dump()})
        return attachment

    def by_status(self, status: InvestigationStatus) -> list[Investigation]:
        return [inv for inv in self._investigations() if inv.status == status]

    def _replace(self, investigation_id: str, update: dict[str, Any]) -> Investigation:
        investigations = self.replace_item(self._investigations(), "investigations", investigation_id, update)
        self.on_change("investigations", investigations)
        return find_by_id(investigations, investigation_id)
