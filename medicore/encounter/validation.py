"""Completion gate: ordered rules that must pass before an encounter completes.

Rules are evaluated strictly in order and evaluation stops at the first
failure, so the caller can take the operator straight to the offending
section. Advisories are computed separately and never block completion.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from pydantic import BaseModel

from medicore.encounter.slices import SliceId
from medicore.models.consultation import ConsultationRecord, DiagnosisType


class ValidationFailure(BaseModel):
    """A blocking rule that did not pass."""

    rule: str
    target: SliceId
    message: str


class Advisory(BaseModel):
    """Non-blocking completeness signal, shown as status text."""

    code: str
    target: SliceId
    message: str


@dataclass(frozen=True)
class CompletionRule:
    name: str
    target: SliceId
    message: str
    # True when the record satisfies the rule
    predicate: Callable[[ConsultationRecord], bool]

    def check(self, record: ConsultationRecord) -> Optional[ValidationFailure]:
        if self.predicate(record):
            return None
        return ValidationFailure(rule=self.name, target=self.target, message=self.message)


@dataclass(frozen=True)
class AdvisoryCheck:
    code: str
    target: SliceId
    # Returns the status text when the signal applies, else None
    evaluate: Callable[[ConsultationRecord], Optional[str]]


DEFAULT_RULES: tuple[CompletionRule, ...] = (
    CompletionRule(
        name="present_illness_required",
        target=SliceId.HISTORY,
        message="Present illness must be filled in",
        predicate=lambda r: bool(r.history.present_illness.strip()),
    ),
    CompletionRule(
        name="diagnosis_required",
        target=SliceId.DIAGNOSIS,
        message="Add at least one diagnosis",
        predicate=lambda r: len(r.diagnosis.diagnoses) > 0,
    ),
)


def _missing_reasoning(record: ConsultationRecord) -> Optional[str]:
    lacking = [d for d in record.diagnosis.diagnoses if not d.has_reasoning]
    if not lacking:
        return None
    return f"{len(lacking)} of {len(record.diagnosis.diagnoses)} diagnoses lack supporting reasoning"


def _no_primary(record: ConsultationRecord) -> Optional[str]:
    diagnoses = record.diagnosis.diagnoses
    if diagnoses and not any(d.type == DiagnosisType.PRIMARY for d in diagnoses):
        return "No primary diagnosis recorded"
    return None


def _incomplete_vitals(record: ConsultationRecord) -> Optional[str]:
    if not record.examination.vital_signs.is_complete:
        return "Vital signs are incomplete"
    return None


DEFAULT_ADVISORIES: tuple[AdvisoryCheck, ...] = (
    AdvisoryCheck("diagnosis_reasoning_missing", SliceId.DIAGNOSIS, _missing_reasoning),
    AdvisoryCheck("primary_diagnosis_missing", SliceId.DIAGNOSIS, _no_primary),
    AdvisoryCheck("vital_signs_incomplete", SliceId.EXAMINATION, _incomplete_vitals),
)


class ValidationGate:
    """Fail-fast evaluator for completion rules."""

    def __init__(
        self,
        rules: Sequence[CompletionRule] = DEFAULT_RULES,
        advisories: Sequence[AdvisoryCheck] = DEFAULT_ADVISORIES,
    ):
        self.rules = tuple(rules)
        self.advisory_checks = tuple(advisories)

    def first_failure(self, record: ConsultationRecord) -> Optional[ValidationFailure]:
        """Return the first failing rule, or None when the record may complete."""
        for rule in self.rules:
            failure = rule.check(record)
            if failure is not None:
                return failure
        return None

    def advisories(self, record: ConsultationRecord) -> list[Advisory]:
        found = []
        for check in self.advisory_checks:
            message = check.evaluate(record)
            if message:
                found.append(Advisory(code=check.code, target=check.target, message=message))
        return found
