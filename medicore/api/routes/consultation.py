"""Consultation API: drives the operator's encounter session.

Every endpoint here sits behind the consultation section guard. Blocking
validation failures come back as 422 with the failing rule, its target slice
and message.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from medicore.api.dependencies import get_app_settings, get_attachment_port, get_encounter_session
from medicore.attachments import AttachmentPort
from medicore.attachments import UploadFile as AttachmentFile
from medicore.config import Settings
from medicore.core.exceptions import (
    AttachmentRejected,
    AttachmentUploadError,
    ChangeRejected,
    SessionStateError,
)
from medicore.encounter import (
    Advisory,
    CompletionResult,
    EncounterSession,
    EncounterStatus,
    SliceId,
)
from medicore.editors.diagnosis import DiagnosisSummary
from medicore.models import ConsultationRecord, Patient
from medicore.models.consultation import InvestigationStatus

router = APIRouter(prefix="/consultation", tags=["consultation"])
logger = logging.getLogger(__name__)

PENDING_STATUSES = (InvestigationStatus.ORDERED, InvestigationStatus.SCHEDULED, InvestigationStatus.IN_PROGRESS)


# ── Request / Response Models ─────────────────────────────────────────────────


class StartRequest(BaseModel):
    patient: Optional[Patient] = None


class ChangeRequest(BaseModel):
    slice: str
    field: str
    value: Any = None


class ChiefComplaintRequest(BaseModel):
    text: str


class ConsultationView(BaseModel):
    status: EncounterStatus
    dirty: bool
    encounter_id: Optional[str] = None
    patient: Optional[Patient] = None
    record: Optional[ConsultationRecord] = None

    @classmethod
    def of(cls, session: EncounterSession) -> "ConsultationView":
        return cls(
            status=session.status,
            dirty=session.dirty,
            encounter_id=session.encounter_id,
            patient=session.patient,
            record=session.record,
        )


class SaveResponse(BaseModel):
    saved: bool
    status: EncounterStatus


class ConsultationSummary(BaseModel):
    """Read-only overview of the open encounter."""

    encounter_id: str
    status: EncounterStatus
    patient: Patient
    primary_diagnosis: Optional[str] = None
    diagnoses: DiagnosisSummary
    medications: int
    pending_investigations: list[str]
    reported_investigations: list[str]
    next_appointment: Optional[datetime] = None
    advisories: list[Advisory]


class AttachmentResponse(BaseModel):
    url: str
    slice: SliceId
    field: str
    degraded: bool


def _conflict(e: SessionStateError) -> HTTPException:
    return HTTPException(status_code=409, detail=str(e))


def _rejected(e: ChangeRejected) -> HTTPException:
    return HTTPException(
        status_code=422,
        detail={"slice": e.slice_name, "field": e.field, "reason": e.reason},
    )


# ── Endpoints ─────────────────────────────────────────────────────────────────


@router.post("/start", response_model=ConsultationView)
async def start(body: StartRequest, session: EncounterSession = Depends(get_encounter_session)) -> ConsultationView:
    """Select a patient. Any unsaved record for the previous patient is dropped."""
    session.start(body.patient)
    return ConsultationView.of(session)


@router.get("", response_model=ConsultationView)
async def current(session: EncounterSession = Depends(get_encounter_session)) -> ConsultationView:
    return ConsultationView.of(session)


@router.post("/change", response_model=ConsultationView)
async def change(body: ChangeRequest, session: EncounterSession = Depends(get_encounter_session)) -> ConsultationView:
    try:
        session.apply_change(body.slice, body.field, body.value)
    except SessionStateError as e:
        raise _conflict(e)
    except ChangeRejected as e:
        raise _rejected(e)
    return ConsultationView.of(session)


@router.post("/chief-complaint", response_model=ConsultationView)
async def chief_complaint(
    body: ChiefComplaintRequest,
    session: EncounterSession = Depends(get_encounter_session),
) -> ConsultationView:
    try:
        session.update_chief_complaint(body.text)
    except SessionStateError as e:
        raise _conflict(e)
    return ConsultationView.of(session)


@router.post("/save", response_model=SaveResponse)
async def save(session: EncounterSession = Depends(get_encounter_session)) -> SaveResponse:
    try:
        saved = session.save()
    except SessionStateError as e:
        raise _conflict(e)
    return SaveResponse(saved=saved, status=session.status)


@router.post("/complete", response_model=CompletionResult)
async def complete(session: EncounterSession = Depends(get_encounter_session)):
    try:
        result = session.complete()
    except SessionStateError as e:
        raise _conflict(e)

    if not result.ok:
        return JSONResponse(status_code=422, content=result.model_dump(mode="json"))
    return result


@router.get("/advisories", response_model=list[Advisory])
async def advisories(session: EncounterSession = Depends(get_encounter_session)) -> list[Advisory]:
    try:
        return session.advisories()
    except SessionStateError as e:
        raise _conflict(e)


@router.get("/summary", response_model=ConsultationSummary)
async def summary(session: EncounterSession = Depends(get_encounter_session)) -> ConsultationSummary:
    try:
        diagnosis = session.editor(SliceId.DIAGNOSIS)
        investigations = session.editor(SliceId.INVESTIGATIONS)
        advisories = session.advisories()
    except SessionStateError as e:
        raise _conflict(e)

    record = session.record
    primary = diagnosis.primary()
    pending = [
        inv.name for status in PENDING_STATUSES for inv in investigations.by_status(status)
    ]
    return ConsultationSummary(
        encounter_id=session.encounter_id,
        status=session.status,
        patient=session.patient,
        primary_diagnosis=primary.description if primary else None,
        diagnoses=diagnosis.summary(),
        medications=len(record.orders.medications),
        pending_investigations=pending,
        reported_investigations=[inv.name for inv in investigations.by_status(InvestigationStatus.REPORTED)],
        next_appointment=record.followup.next_appointment,
        advisories=advisories,
    )


@router.post("/attachments", response_model=AttachmentResponse)
async def upload_attachment(
    file: UploadFile = File(...),
    slice_name: str = Form(..., alias="slice"),
    field: str = Form(...),
    session: EncounterSession = Depends(get_encounter_session),
    port: Optional[AttachmentPort] = Depends(get_attachment_port),
    settings: Settings = Depends(get_app_settings),
) -> AttachmentResponse:
    """Upload an image and embed it at the end of a rich-text field.

    At most one byte past the size limit is read, enough for the size check
    to reject the file.
    """
    if port is None:
        raise HTTPException(status_code=503, detail="No attachment uploader configured")

    attachment = AttachmentFile(
        filename=file.filename or "upload",
        content_type=file.content_type or "application/octet-stream",
        data=await file.read(settings.max_image_bytes + 1),
    )

    try:
        editor = session.editor(slice_name)
        url = await editor.embed_image(field, attachment, port, max_bytes=settings.max_image_bytes)
    except SessionStateError as e:
        raise _conflict(e)
    except ChangeRejected as e:
        raise _rejected(e)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except AttachmentRejected as e:
        raise HTTPException(status_code=400, detail=str(e))
    except AttachmentUploadError as e:
        logger.error(f"Attachment upload failed: {e}")
        raise HTTPException(status_code=502, detail=str(e))

    return AttachmentResponse(url=url, slice=SliceId(slice_name), field=field, degraded=port.degraded)
