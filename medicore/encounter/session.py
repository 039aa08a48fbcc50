"""Encounter session: the active patient, their record and its lifecycle.

One session belongs to one operator. It is constructed explicitly and handed
to whoever needs it; nothing here is module-global.

Lifecycle::

    empty -> seeded -> dirty <-> saved -> completed

Starting a new patient from any state discards the current record without
writing it. Single writer: there is no locking or merge logic, concurrent
writers to the same session are not supported.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Optional

from pydantic import BaseModel

from medicore.core.exceptions import SessionStateError
from medicore.core.users import Operator
from medicore.editors import EDITORS, SectionEditor
from medicore.encounter.slices import SliceId, apply_change, get_slice, parse_slice_id
from medicore.encounter.store import EncounterSink, PersistedEncounter
from medicore.encounter.validation import Advisory, ValidationFailure, ValidationGate
from medicore.models.consultation import ConsultationRecord, ExaminationSlice, HistorySlice
from medicore.models.patient import Patient, VitalSigns

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class EncounterStatus(str, Enum):
    EMPTY = "empty"
    SEEDED = "seeded"
    DIRTY = "dirty"
    SAVED = "saved"
    COMPLETED = "completed"


class CompletionResult(BaseModel):
    """Outcome of a complete attempt. Validation failures are values."""

    ok: bool
    failure: Optional[ValidationFailure] = None
    persisted: Optional[PersistedEncounter] = None


def seed_record(patient: Patient) -> ConsultationRecord:
    """Fresh record carrying over the patient's triage vitals and complaint."""
    return ConsultationRecord(
        history=HistorySlice(present_illness=patient.chief_complaint or ""),
        examination=ExaminationSlice(vital_signs=patient.vital_signs or VitalSigns()),
    )


class EncounterSession:
    """Owns the selected patient and the in-progress consultation record."""

    def __init__(
        self,
        sink: EncounterSink,
        operator: Operator,
        gate: Optional[ValidationGate] = None,
        clock: Optional[Clock] = None,
    ):
        self.sink = sink
        self.operator = operator
        self.gate = gate or ValidationGate()
        self.clock = clock or utc_now

        self._patient: Optional[Patient] = None
        self._record: Optional[ConsultationRecord] = None
        self._encounter_id: Optional[str] = None
        self._dirty = False
        self._status = EncounterStatus.EMPTY

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def patient(self) -> Optional[Patient]:
        return self._patient

    @property
    def record(self) -> Optional[ConsultationRecord]:
        return self._record

    @property
    def encounter_id(self) -> Optional[str]:
        return self._encounter_id

    @property
    def dirty(self) -> bool:
        return self._dirty

    @property
    def status(self) -> EncounterStatus:
        return self._status

    @property
    def active(self) -> bool:
        return self._patient is not None and self._record is not None

    def _require_active(self) -> ConsultationRecord:
        if not self.active:
            raise SessionStateError(f"No active encounter (status={self._status.value})")
        return self._record

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def start(self, patient: Optional[Patient]) -> None:
        """Begin an encounter for ``patient``. ``None`` is ignored."""
        if patient is None:
            return

        if self.active:
            logger.info(
                f"Discarding unsaved={self._dirty} encounter {self._encounter_id} "
                f"for patient {self._patient.id} on switch to {patient.id}"
            )

        self._patient = patient
        self._record = seed_record(patient)
        self._encounter_id = uuid.uuid4().hex
        self._dirty = False
        self._status = EncounterStatus.SEEDED
        logger.info(f"Started encounter {self._encounter_id} for patient {patient.id} by {self.operator.id}")

    def apply_change(self, slice_id: SliceId | str, field: str, value: Any) -> ConsultationRecord:
        """Replace one field of one slice and mark the record dirty.

        Raises:
            ChangeRejected: unknown slice or field, or invalid value.
            SessionStateError: no active encounter.
        """
        record = self._require_active()
        slice_id = parse_slice_id(slice_id)
        self._record = apply_change(record, slice_id, field, value)
        self._mark_dirty()
        return self._record

    def update_chief_complaint(self, text: str) -> None:
        """Write the complaint to the patient summary and the present illness together."""
        record = self._require_active()
        new_record = apply_change(record, SliceId.HISTORY, "present_illness", text)
        new_patient = self._patient.model_copy(update={"chief_complaint": text})

        self._patient = new_patient
        self._record = new_record
        self._mark_dirty()

    def save(self) -> bool:
        """Persist the record if it has unsaved changes.

        Returns:
            True if a snapshot was written.
        """
        record = self._require_active()
        if not self._dirty:
            return False

        self.sink.persist(self._snapshot(record))
        self._dirty = False
        self._status = EncounterStatus.SAVED
        return True

    def complete(self) -> CompletionResult:
        """Validate, write the final snapshot and tear the session down."""
        record = self._require_active()

        failure = self.gate.first_failure(record)
        if failure is not None:
            logger.info(f"Encounter {self._encounter_id} not complete: {failure.rule}")
            return CompletionResult(ok=False, failure=failure)

        now = self.clock()
        final = self._snapshot(record, completed_at=now)
        self.sink.persist(final)

        logger.info(f"Completed encounter {self._encounter_id} for patient {self._patient.id}")
        self._patient = None
        self._record = None
        self._encounter_id = None
        self._dirty = False
        self._status = EncounterStatus.COMPLETED
        return CompletionResult(ok=True, persisted=final)

    # ------------------------------------------------------------------
    # Editors and status
    # ------------------------------------------------------------------

    def editor(self, slice_id: SliceId | str) -> SectionEditor:
        """Editor for one slice, bound to the encounter that is active now.

        The editor's reads and writes raise ``SessionStateError`` once that
        encounter has been completed or replaced by another patient.
        """
        self._require_active()
        slice_id = parse_slice_id(slice_id)
        encounter_id = self._encounter_id

        def read_slice():
            return get_slice(self._require_encounter(encounter_id), slice_id)

        def on_change(field: str, value: Any) -> ConsultationRecord:
            self._require_encounter(encounter_id)
            return self.apply_change(slice_id, field, value)

        editor_cls = EDITORS[slice_id.value]
        return editor_cls(
            read_slice=read_slice,
            on_change=on_change,
            author=self.operator.id,
            clock=self.clock,
        )

    def advisories(self) -> list[Advisory]:
        return self.gate.advisories(self._require_active())

    def _require_encounter(self, encounter_id: str) -> ConsultationRecord:
        record = self._require_active()
        if self._encounter_id != encounter_id:
            raise SessionStateError(
                f"Encounter {encounter_id} is no longer open (current is {self._encounter_id})"
            )
        return record

    def _mark_dirty(self) -> None:
        self._dirty = True
        self._status = EncounterStatus.DIRTY

    def _snapshot(self, record: ConsultationRecord, completed_at: Optional[datetime] = None) -> PersistedEncounter:
        return PersistedEncounter(
            encounter_id=self._encounter_id,
            patient=self._patient,
            operator=self.operator,
            record=record,
            saved_at=self.clock(),
            completed_at=completed_at,
        )
