"""Follow-up editor."""

from datetime import datetime
from typing import Optional

from medicore.editors.base import SectionEditor, new_id, without_id
from medicore.models.consultation import EmergencyContact, FollowupSlice, FollowupType

REVIEW_FLAGS = ("medication_review", "lab_review", "imaging_review")


class FollowupEditor(SectionEditor[FollowupSlice]):
    slice_name = "followup"
    rich_text_fields = ("followup_plan", "health_education", "followup_instructions")

    def set_plan(self, text: str) -> None:
        self.on_change("followup_plan", text)

    def set_health_education(self, text: str) -> None:
        self.on_change("health_education", text)

    def set_instructions(self, text: str) -> None:
        self.on_change("followup_instructions", text)

    def schedule(
        self,
        next_appointment: Optional[datetime],
        followup_type: FollowupType = FollowupType.CLINIC,
        interval: Optional[str] = None,
    ) -> None:
        """Set the appointment, its type and optionally the interval.

        All values are checked before anything is emitted, so a bad type
        leaves the slice untouched.
        """
        update = {"next_appointment": next_appointment, "followup_type": followup_type}
        if interval is not None:
            update["followup_interval"] = interval
        data = self.current.model_dump()
        data.update(update)
        checked = self.build(FollowupSlice, "followup_type", data)

        for field in update:
            self.on_change(field, getattr(checked, field))

    def toggle_review(self, flag: str) -> bool:
        """Flip one of the review checkboxes and return its new value."""
        if flag not in REVIEW_FLAGS:
            raise ValueError(f"Unknown review flag: {flag}")
        value = not getattr(self.current, flag)
        self.on_change(flag, value)
        return value

    # Lists of free-text entries, no duplicates

    def add_warning_sign(self, sign: str) -> None:
        self._add_unique("warning_signs_education", sign)

    def remove_warning_sign(self, sign: str) -> None:
        self._remove_value("warning_signs_education", sign)

    def add_lifestyle_recommendation(self, recommendation: str) -> None:
        self._add_unique("lifestyle_recommendations", recommendation)

    def remove_lifestyle_recommendation(self, recommendation: str) -> None:
        self._remove_value("lifestyle_recommendations", recommendation)

    def _add_unique(self, field: str, value: str) -> None:
        value = value.strip()
        current = getattr(self.current, field)
        if value and value not in current:
            self.on_change(field, [*current, value])

    def _remove_value(self, field: str, value: str) -> None:
        self.on_change(field, [v for v in getattr(self.current, field) if v != value])

    # Emergency contacts

    def add_emergency_contact(self, name: str, phone: str, relationship: str = "") -> EmergencyContact:
        data = {"id": new_id("ec"), "name": name, "phone": phone, "relationship": relationship}
        contact = self.build(EmergencyContact, "emergency_contacts", data)
        self.on_change("emergency_contacts", [*self.current.emergency_contacts, contact])
        return contact

    def remove_emergency_contact(self, contact_id: str) -> None:
        self.on_change("emergency_contacts", without_id(self.current.emergency_contacts, contact_id))
