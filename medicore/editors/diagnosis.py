"""Diagnosis editor.

Diagnosis ``order`` is a 1-based priority kept dense: additions go to the end
and removals close the gap, so the list always reads 1..n.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

from medicore.editors.base import SectionEditor, find_by_id, new_id
from medicore.models.consultation import (
    Certainty,
    Diagnosis,
    DiagnosisSlice,
    DiagnosisStatus,
    DiagnosisType,
)

logger = logging.getLogger(__name__)

# Fields a template entry may carry; everything else is filled in fresh
TEMPLATE_FIELDS = ("type", "certainty", "code", "description", "name", "severity", "onset", "status")


@dataclass
class DiagnosisTemplate:
    """A named set of diagnoses applied in one step."""

    name: str
    diagnoses: list[dict[str, Any]] = field(default_factory=list)


@dataclass
class DiagnosisSummary:
    total: int
    primary: int
    secondary: int
    differential: int
    confirmed: int
    suspected: int
    with_reasoning: int


def renumber(diagnoses: Iterable[Diagnosis]) -> list[Diagnosis]:
    """Sort by current order and reassign 1..n."""
    ranked = sorted(diagnoses, key=lambda d: d.order)
    return [d if d.order == i else d.model_copy(update={"order": i}) for i, d in enumerate(ranked, start=1)]


class DiagnosisEditor(SectionEditor[DiagnosisSlice]):
    slice_name = "diagnosis"
    rich_text_fields = ("clinical_reasoning", "differential_diagnosis")

    def _audit(self, created: bool = False) -> dict[str, Any]:
        now = self.clock()
        stamp = {"last_modified": now, "modified_by": self.author}
        if created:
            stamp.update(created_at=now, created_by=self.author)
        return stamp

    def add(
        self,
        description: str,
        type: DiagnosisType = DiagnosisType.PRIMARY,
        certainty: Certainty = Certainty.CONFIRMED,
        **extra: Any,
    ) -> Diagnosis:
        """Append a diagnosis at the lowest priority."""
        diagnoses = self.current.diagnoses
        data = {
            **extra,
            "id": new_id("diag"),
            "description": description.strip(),
            "type": type,
            "certainty": certainty,
            "order": len(diagnoses) + 1,
            **self._audit(created=True),
        }
        diagnosis = self.build(Diagnosis, "diagnoses", data)
        self.on_change("diagnoses", [*diagnoses, diagnosis])
        return diagnosis

    def remove(self, diagnosis_id: str) -> None:
        """Drop a diagnosis; those after it move up one place."""
        remaining = [d for d in self.current.diagnoses if d.id != diagnosis_id]
        self.on_change("diagnoses", renumber(remaining))

    def update(self, diagnosis_id: str, **changes: Any) -> Diagnosis:
        """Change fields of one diagnosis. Identity and priority are not editable here."""
        for locked in ("id", "order", "created_at", "created_by"):
            if locked in changes:
                raise ValueError(f"{locked} cannot be changed with update()")

        updated = self.replace_item(self.current.diagnoses, "diagnoses", diagnosis_id, {**changes, **self._audit()})
        self.on_change("diagnoses", updated)
        return find_by_id(updated, diagnosis_id)

    def duplicate(self, diagnosis_id: str) -> Diagnosis:
        diagnoses = self.current.diagnoses
        source = find_by_id(diagnoses, diagnosis_id)
        data = source.model_dump()
        data.update(
            id=new_id("diag"),
            description=f"{source.description} (copy)",
            order=len(diagnoses) + 1,
            **self._audit(created=True),
        )
        copy = self.build(Diagnosis, "diagnoses", data)
        self.on_change("diagnoses", [*diagnoses, copy])
        return copy

    def apply_template(self, template: DiagnosisTemplate) -> list[Diagnosis]:
        """Append every entry of ``template`` in its listed order."""
        diagnoses = self.current.diagnoses
        added = []
        for offset, entry in enumerate(template.diagnoses, start=1):
            data = {k: v for k, v in entry.items() if k in TEMPLATE_FIELDS}
            data.update(
                id=new_id("diag"),
                order=len(diagnoses) + offset,
                **self._audit(created=True),
            )
            added.append(self.build(Diagnosis, "diagnoses", data))

        if added:
            self.on_change("diagnoses", [*diagnoses, *added])
            logger.debug(f"Applied diagnosis template '{template.name}' ({len(added)} entries)")
        return added

    def move(self, diagnosis_id: str, position: int) -> None:
        """Place a diagnosis at 1-based ``position``; others keep their relative order."""
        ranked = self.current.by_priority()
        target = find_by_id(ranked, diagnosis_id)
        others = [d for d in ranked if d.id != diagnosis_id]
        position = max(1, min(position, len(ranked)))
        others.insert(position - 1, target)
        reordered = [d if d.order == i else d.model_copy(update={"order": i}) for i, d in enumerate(others, start=1)]
        self.on_change("diagnoses", reordered)

    def set_clinical_reasoning(self, text: str) -> None:
        self.on_change("clinical_reasoning", text)

    def set_differential(self, text: str) -> None:
        self.on_change("differential_diagnosis", text)

    def primary(self) -> Optional[Diagnosis]:
        for diagnosis in self.current.by_priority():
            if diagnosis.type == DiagnosisType.PRIMARY:
                return diagnosis
        return None

    def filtered(self, kind: str = "all") -> list[Diagnosis]:
        """Diagnoses in priority order, narrowed to active, resolved or pending (no reasoning)."""
        ranked = self.current.by_priority()
        if kind == "active":
            return [d for d in ranked if d.status == DiagnosisStatus.ACTIVE]
        if kind == "resolved":
            return [d for d in ranked if d.status == DiagnosisStatus.RESOLVED]
        if kind == "pending":
            return [d for d in ranked if not d.has_reasoning]
        return ranked

    def summary(self) -> DiagnosisSummary:
        diagnoses = self.current.diagnoses
        return DiagnosisSummary(
            total=len(diagnoses),
            primary=sum(1 for d in diagnoses if d.type == DiagnosisType.PRIMARY),
            secondary=sum(1 for d in diagnoses if d.type == DiagnosisType.SECONDARY),
            differential=sum(1 for d in diagnoses if d.type == DiagnosisType.DIFFERENTIAL),
            confirmed=sum(1 for d in diagnoses if d.certainty == Certainty.CONFIRMED),
            suspected=sum(1 for d in diagnoses if d.certainty == Certainty.SUSPECTED),
            with_reasoning=sum(1 for d in diagnoses if d.has_reasoning),
        )
