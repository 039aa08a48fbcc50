"""History editor: present illness, past/family history and social history."""

import logging
from typing import Any, Optional

from medicore.editors.base import SectionEditor, find_by_id, new_id, without_id
from medicore.models.consultation import FamilyMember, HistorySlice, SocialHistory

logger = logging.getLogger(__name__)

# Social history parts that are nested objects and get merged field by field
SOCIAL_OBJECT_PARTS = ("occupation", "smoking", "alcohol", "diet", "exercise", "sleep", "menstrual_history")
SOCIAL_SCALAR_PARTS = ("marital_status", "children", "living_arrangement", "education")


class HistoryEditor(SectionEditor[HistorySlice]):
    slice_name = "history"
    rich_text_fields = ("present_illness", "past_history", "family_history")

    def set_present_illness(self, text: str) -> None:
        self.on_change("present_illness", text)

    def set_past_history(self, text: str) -> None:
        self.on_change("past_history", text)

    def set_family_history(self, text: str) -> None:
        self.on_change("family_history", text)

    # Social history

    def update_social(self, part: str, value: Any = None, **changes: Any) -> SocialHistory:
        """Replace one part of the social history.

        Object parts (smoking, diet, ...) take keyword ``changes`` merged into
        the current values. Scalar parts take ``value``. The whole social
        history object is emitted.
        """
        social = self.current.social_history
        if part in SOCIAL_OBJECT_PARTS:
            existing = getattr(social, part)
            data = existing.model_dump() if existing is not None else {}
            if isinstance(value, dict):
                data.update(value)
            data.update(changes)
            new_part: Any = data
        elif part in SOCIAL_SCALAR_PARTS:
            new_part = value
        else:
            raise ValueError(f"Unknown social history part: {part}")

        merged = social.model_dump()
        merged[part] = new_part
        updated = self.build(SocialHistory, "social_history", merged)
        self.on_change("social_history", updated)
        return updated

    def clear_menstrual_history(self) -> None:
        social = self.current.social_history.model_copy(update={"menstrual_history": None})
        self.on_change("social_history", social)

    # Family members

    def add_family_member(
        self,
        relation: str,
        age: Optional[int] = None,
        is_alive: bool = True,
        cause_of_death: Optional[str] = None,
        conditions: Optional[list[str]] = None,
    ) -> FamilyMember:
        """Add a relative. Duplicate conditions are dropped, first one wins."""
        data = {
            "id": new_id("fm"),
            "relation": relation,
            "age": age,
            "is_alive": is_alive,
            "cause_of_death": None if is_alive else cause_of_death,
            "conditions": list(dict.fromkeys(conditions or [])),
        }
        member = self.build(FamilyMember, "family_members", data)
        self.on_change("family_members", [*self.current.family_members, member])
        return member

    def remove_family_member(self, member_id: str) -> None:
        self.on_change("family_members", without_id(self.current.family_members, member_id))

    def add_member_condition(self, member_id: str, condition: str) -> None:
        condition = condition.strip()
        member = self._member(member_id)
        if not condition or condition in member.conditions:
            return
        self._update_member(member_id, conditions=[*member.conditions, condition])

    def remove_member_condition(self, member_id: str, condition: str) -> None:
        member = self._member(member_id)
        self._update_member(member_id, conditions=[c for c in member.conditions if c != condition])

    def _member(self, member_id: str) -> FamilyMember:
        return find_by_id(self.current.family_members, member_id)

    def _update_member(self, member_id: str, **update: Any) -> None:
        members = self.replace_item(self.current.family_members, "family_members", member_id, update)
        self.on_change("family_members", members)
