"""Consultation record: the multi-slice draft owned by one encounter session.

Every model here is frozen. Slices are never edited in place; the slice
update protocol builds a new slice and the session swaps it in.
"""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Any, Iterable, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from medicore.models.patient import VitalSigns


class RecordModel(BaseModel):
    """Base for all record parts."""

    model_config = ConfigDict(frozen=True, extra="forbid")


def _check_unique_ids(items: Iterable[Any], what: str) -> None:
    seen: set[str] = set()
    for item in items:
        if item.id in seen:
            raise ValueError(f"duplicate {what} id '{item.id}'")
        seen.add(item.id)


# ── History ───────────────────────────────────────────────────────────────────


class SubstanceStatus(str, Enum):
    NEVER = "never"
    CURRENT = "current"
    FORMER = "former"


class Occupation(RecordModel):
    current: str = ""
    duration: str = ""
    exposures: list[str] = Field(default_factory=list)
    previous_occupations: str = ""


class Smoking(RecordModel):
    status: SubstanceStatus = SubstanceStatus.NEVER
    type: list[str] = Field(default_factory=list)
    amount_per_day: int = Field(0, ge=0)
    start_age: int = Field(0, ge=0)
    end_age: Optional[int] = Field(None, ge=0)
    duration: int = Field(0, ge=0, description="years")
    pack_years: Optional[float] = Field(None, ge=0)
    quit_attempts: Optional[int] = Field(None, ge=0)
    quit_desire: Optional[Literal["none", "low", "medium", "high"]] = None


class Alcohol(RecordModel):
    status: SubstanceStatus = SubstanceStatus.NEVER
    frequency: Literal["never", "occasional", "weekly", "daily"] = "never"
    type: list[str] = Field(default_factory=list)
    amount_per_week: float = Field(0, ge=0)
    duration: int = Field(0, ge=0, description="years")
    last_drink: Optional[str] = None


class Diet(RecordModel):
    type: str = ""
    restrictions: list[str] = Field(default_factory=list)
    regular_meals: bool = True
    caffeine: bool = False
    caffeine_amount: Optional[str] = None


class Exercise(RecordModel):
    frequency: Literal["never", "occasional", "regular", "daily"] = "never"
    type: list[str] = Field(default_factory=list)
    duration: int = Field(0, ge=0, description="minutes per session")
    intensity: Literal["light", "moderate", "vigorous"] = "light"


class Sleep(RecordModel):
    hours_per_night: float = Field(7, ge=0, le=24)
    quality: Literal["good", "fair", "poor"] = "good"
    issues: list[str] = Field(default_factory=list)


class MenstrualHistory(RecordModel):
    menarche_age: Optional[int] = Field(None, ge=0)
    regularity: Literal["regular", "irregular"] = "regular"
    cycle: Optional[int] = Field(None, ge=0, description="days")
    flow: Literal["light", "moderate", "heavy"] = "moderate"
    pain: Literal["none", "mild", "moderate", "severe"] = "none"
    last_period: Optional[date] = None
    menopause: bool = False
    menopause_age: Optional[int] = Field(None, ge=0)


MaritalStatus = Literal["single", "married", "divorced", "widowed", "separated", "other"]


class SocialHistory(RecordModel):
    occupation: Occupation = Field(default_factory=Occupation)
    smoking: Smoking = Field(default_factory=Smoking)
    alcohol: Alcohol = Field(default_factory=Alcohol)
    marital_status: MaritalStatus = "single"
    children: int = Field(0, ge=0)
    living_arrangement: str = ""
    education: str = ""
    diet: Diet = Field(default_factory=Diet)
    exercise: Exercise = Field(default_factory=Exercise)
    sleep: Sleep = Field(default_factory=Sleep)
    menstrual_history: Optional[MenstrualHistory] = None


class FamilyMember(RecordModel):
    id: str
    relation: str = Field(..., min_length=1)
    age: Optional[int] = Field(None, ge=0)
    is_alive: bool = True
    cause_of_death: Optional[str] = None
    conditions: list[str] = Field(default_factory=list)


class HistorySlice(RecordModel):
    present_illness: str = ""
    past_history: str = ""
    family_history: str = ""
    family_members: list[FamilyMember] = Field(default_factory=list)
    social_history: SocialHistory = Field(default_factory=SocialHistory)

    @model_validator(mode="after")
    def _unique_members(self) -> "HistorySlice":
        _check_unique_ids(self.family_members, "family member")
        return self


# ── Examination ───────────────────────────────────────────────────────────────


class ExaminationSlice(RecordModel):
    vital_signs: VitalSigns = Field(default_factory=VitalSigns)
    general_examination: str = ""
    systemic_examination: str = ""
    neurological_examination: str = ""


# ── Diagnosis ─────────────────────────────────────────────────────────────────


class DiagnosisType(str, Enum):
    PRIMARY = "primary"
    SECONDARY = "secondary"
    DIFFERENTIAL = "differential"


class Certainty(str, Enum):
    CONFIRMED = "confirmed"
    SUSPECTED = "suspected"
    RULE_OUT = "rule_out"


class Severity(str, Enum):
    MILD = "mild"
    MODERATE = "moderate"
    SEVERE = "severe"


class Onset(str, Enum):
    ACUTE = "acute"
    SUBACUTE = "subacute"
    CHRONIC = "chronic"


class DiagnosisStatus(str, Enum):
    ACTIVE = "active"
    RESOLVED = "resolved"
    IMPROVING = "improving"
    WORSENING = "worsening"


class Prognosis(str, Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"
    GUARDED = "guarded"


class Diagnosis(RecordModel):
    """One diagnosis entry, in the canonical (rich) shape.

    The simple list shape used by older screens (``name``, ``notes``,
    ``rule-out``) is mapped onto this one on input.
    """

    id: str
    type: DiagnosisType = DiagnosisType.PRIMARY
    certainty: Certainty = Certainty.CONFIRMED
    code: Optional[str] = None
    description: str = Field(..., min_length=1)
    severity: Optional[Severity] = None
    onset: Optional[Onset] = None
    status: DiagnosisStatus = DiagnosisStatus.ACTIVE
    reasoning: str = ""
    differential_notes: str = ""
    order: int = Field(..., ge=1, description="1-based priority, dense within the record")
    created_at: Optional[datetime] = None
    created_by: Optional[str] = None
    last_modified: Optional[datetime] = None
    modified_by: Optional[str] = None
    related_findings: list[str] = Field(default_factory=list)
    treatment_plan: Optional[str] = None
    follow_up_required: bool = False
    follow_up_date: Optional[date] = None
    complications: list[str] = Field(default_factory=list)
    prognosis: Optional[Prognosis] = None

    @model_validator(mode="before")
    @classmethod
    def _map_simple_shape(cls, data: Any) -> Any:
        if isinstance(data, dict):
            data = dict(data)
            if "name" in data and "description" not in data:
                data["description"] = data.pop("name")
            if "notes" in data and "reasoning" not in data:
                data["reasoning"] = data.pop("notes") or ""
        return data

    @field_validator("certainty", mode="before")
    @classmethod
    def _normalize_certainty(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.replace("-", "_")
        return value

    @property
    def has_reasoning(self) -> bool:
        return bool(self.reasoning.strip())


class DiagnosisSlice(RecordModel):
    diagnoses: list[Diagnosis] = Field(default_factory=list)
    clinical_reasoning: str = ""
    differential_diagnosis: str = ""

    @model_validator(mode="after")
    def _dense_unique_order(self) -> "DiagnosisSlice":
        _check_unique_ids(self.diagnoses, "diagnosis")
        orders = sorted(d.order for d in self.diagnoses)
        if orders != list(range(1, len(orders) + 1)):
            raise ValueError(f"diagnosis order must be a dense 1..n sequence, got {orders}")
        return self

    def by_priority(self) -> list[Diagnosis]:
        return sorted(self.diagnoses, key=lambda d: d.order)


# ── Orders ────────────────────────────────────────────────────────────────────


class MedicationOrder(RecordModel):
    id: str
    name: str = Field(..., min_length=1)
    dosage: str = ""
    frequency: str = ""
    duration: str = ""
    route: str = "oral"
    instructions: str = ""


class OrderType(str, Enum):
    LAB = "lab"
    IMAGING = "imaging"
    PROCEDURE = "procedure"


class Urgency(str, Enum):
    ROUTINE = "routine"
    URGENT = "urgent"
    STAT = "stat"


class InvestigationOrder(RecordModel):
    id: str
    type: OrderType = OrderType.LAB
    name: str = Field(..., min_length=1)
    urgency: Urgency = Urgency.ROUTINE
    instructions: str = ""


class OrdersSlice(RecordModel):
    medications: list[MedicationOrder] = Field(default_factory=list)
    investigations: list[InvestigationOrder] = Field(default_factory=list)
    general_instructions: str = ""

    @model_validator(mode="after")
    def _unique_orders(self) -> "OrdersSlice":
        _check_unique_ids(self.medications, "medication")
        _check_unique_ids(self.investigations, "investigation order")
        return self


# ── Investigations ────────────────────────────────────────────────────────────


class InvestigationType(str, Enum):
    LAB = "lab"
    IMAGING = "imaging"
    CARDIOLOGY = "cardiology"
    ENDOSCOPY = "endoscopy"
    PATHOLOGY = "pathology"
    FUNCTION = "function"


class InvestigationStatus(str, Enum):
    ORDERED = "ordered"
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    REPORTED = "reported"


class Priority(str, Enum):
    ROUTINE = "routine"
    URGENT = "urgent"
    STAT = "stat"
    ASAP = "asap"


class ResultStatus(str, Enum):
    NORMAL = "normal"
    ABNORMAL = "abnormal"
    CRITICAL = "critical"
    PENDING = "pending"


class ValueFlag(str, Enum):
    NORMAL = "normal"
    HIGH = "high"
    LOW = "low"
    CRITICAL = "critical"


class ResultValue(RecordModel):
    parameter: str
    value: str
    unit: str = ""
    reference_range: str = ""
    status: ValueFlag = ValueFlag.NORMAL


class ResultAttachment(RecordModel):
    id: str
    name: str
    type: Literal["image", "pdf", "document"] = "document"
    url: str
    upload_date: datetime


class InvestigationResult(RecordModel):
    status: ResultStatus = ResultStatus.PENDING
    summary: str = ""
    details: str = ""
    values: list[ResultValue] = Field(default_factory=list)
    attachments: list[ResultAttachment] = Field(default_factory=list)
    reported_by: Optional[str] = None
    verified_by: Optional[str] = None


class Investigation(RecordModel):
    id: str
    type: InvestigationType = InvestigationType.LAB
    category: str = ""
    name: str = Field(..., min_length=1)
    code: Optional[str] = None
    priority: Priority = Priority.ROUTINE
    status: InvestigationStatus = InvestigationStatus.ORDERED
    ordered_at: datetime
    scheduled_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    reported_at: Optional[datetime] = None
    ordered_by: str = ""
    department: str = ""
    instructions: Optional[str] = None
    clinical_info: Optional[str] = None
    result: Optional[InvestigationResult] = None


class InvestigationsSlice(RecordModel):
    investigations: list[Investigation] = Field(default_factory=list)

    @model_validator(mode="after")
    def _unique_investigations(self) -> "InvestigationsSlice":
        _check_unique_ids(self.investigations, "investigation")
        return self


# ── Follow-up ─────────────────────────────────────────────────────────────────


class FollowupType(str, Enum):
    CLINIC = "clinic"
    PHONE = "phone"
    VIDEO = "video"
    MESSAGE = "message"


class EmergencyContact(RecordModel):
    id: str
    name: str = Field(..., min_length=1)
    phone: str
    relationship: str = ""


class FollowupSlice(RecordModel):
    followup_plan: str = ""
    next_appointment: Optional[datetime] = None
    health_education: str = ""
    followup_type: FollowupType = FollowupType.CLINIC
    followup_interval: str = ""
    followup_instructions: str = ""
    medication_review: bool = False
    lab_review: bool = False
    imaging_review: bool = False
    emergency_contacts: list[EmergencyContact] = Field(default_factory=list)
    warning_signs_education: list[str] = Field(default_factory=list)
    lifestyle_recommendations: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _unique_contacts(self) -> "FollowupSlice":
        _check_unique_ids(self.emergency_contacts, "emergency contact")
        return self


# ── Record ────────────────────────────────────────────────────────────────────


class ConsultationRecord(RecordModel):
    """Complete consultation draft."""

    history: HistorySlice = Field(default_factory=HistorySlice)
    examination: ExaminationSlice = Field(default_factory=ExaminationSlice)
    diagnosis: DiagnosisSlice = Field(default_factory=DiagnosisSlice)
    orders: OrdersSlice = Field(default_factory=OrdersSlice)
    investigations: InvestigationsSlice = Field(default_factory=InvestigationsSlice)
    followup: FollowupSlice = Field(default_factory=FollowupSlice)
