"""Data models for patients and consultation records."""

from medicore.models.consultation import (
    Alcohol,
    Certainty,
    ConsultationRecord,
    Diagnosis,
    DiagnosisSlice,
    DiagnosisStatus,
    DiagnosisType,
    Diet,
    EmergencyContact,
    ExaminationSlice,
    Exercise,
    FamilyMember,
    FollowupSlice,
    FollowupType,
    HistorySlice,
    Investigation,
    InvestigationOrder,
    InvestigationResult,
    InvestigationsSlice,
    InvestigationStatus,
    InvestigationType,
    MedicationOrder,
    MenstrualHistory,
    Occupation,
    OrdersSlice,
    OrderType,
    Priority,
    ResultAttachment,
    ResultStatus,
    ResultValue,
    Sleep,
    Smoking,
    SocialHistory,
    Urgency,
)
from medicore.models.patient import Patient, VisitType, VitalSigns

__all__ = [
    "Alcohol",
    "Certainty",
    "ConsultationRecord",
    "Diagnosis",
    "DiagnosisSlice",
    "DiagnosisStatus",
    "DiagnosisType",
    "Diet",
    "EmergencyContact",
    "ExaminationSlice",
    "Exercise",
    "FamilyMember",
    "FollowupSlice",
    "FollowupType",
    "HistorySlice",
    "Investigation",
    "InvestigationOrder",
    "InvestigationResult",
    "InvestigationsSlice",
    "InvestigationStatus",
    "InvestigationType",
    "MedicationOrder",
    "MenstrualHistory",
    "Occupation",
    "OrdersSlice",
    "OrderType",
    "Patient",
    "Priority",
    "ResultAttachment",
    "ResultStatus",
    "ResultValue",
    "Sleep",
    "Smoking",
    "SocialHistory",
    "Urgency",
    "VisitType",
    "VitalSigns",
]
