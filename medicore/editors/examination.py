"""Examination editor: vital signs and examination notes."""

from typing import Any, Optional

from medicore.editors.base import SectionEditor
from medicore.models.consultation import ExaminationSlice
from medicore.models.patient import VitalSigns


def compute_bmi(weight: Optional[float], height: Optional[float]) -> Optional[float]:
    """BMI from kg and cm, one decimal. None unless both are positive."""
    if not weight or not height or weight <= 0 or height <= 0:
        return None
    meters = height / 100
    return round(weight / (meters * meters), 1)


def bmi_category(bmi: float) -> str:
    # Chinese adult cut-offs
    if bmi < 18.5:
        return "underweight"
    if bmi < 24:
        return "normal"
    if bmi < 28:
        return "overweight"
    return "obese"


class ExaminationEditor(SectionEditor[ExaminationSlice]):
    slice_name = "examination"
    rich_text_fields = ("general_examination", "systemic_examination", "neurological_examination")

    def update_vital_signs(self, **changes: Any) -> VitalSigns:
        """Merge ``changes`` into the current vital signs and emit the whole object.

        BMI is recomputed from weight and height whenever either is known;
        an explicitly passed ``bmi`` is ignored.
        """
        changes.pop("bmi", None)
        data = self.current.vital_signs.model_dump()
        data.update(changes)
        data["bmi"] = compute_bmi(data.get("weight"), data.get("height"))

        vitals = self.build(VitalSigns, "vital_signs", data)
        self.on_change("vital_signs", vitals)
        return vitals

    def set_general_examination(self, text: str) -> None:
        self.on_change("general_examination", text)

    def set_systemic_examination(self, text: str) -> None:
        self.on_change("systemic_examination", text)

    def set_neurological_examination(self, text: str) -> None:
        self.on_change("neurological_examination", text)
