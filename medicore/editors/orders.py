"""Orders editor: medications, investigation requests and general instructions."""

from typing import Any

from medicore.editors.base import SectionEditor, new_id, without_id
from medicore.models.consultation import InvestigationOrder, MedicationOrder, OrdersSlice, OrderType, Urgency


class OrdersEditor(SectionEditor[OrdersSlice]):
    slice_name = "orders"
    rich_text_fields = ("general_instructions",)

    def add_medication(self, name: str, **details: Any) -> MedicationOrder:
        medication = self.build(MedicationOrder, "medications", {**details, "id": new_id("med"), "name": name})
        self.on_change("medications", [*self.current.medications, medication])
        return medication

    def update_medication(self, medication_id: str, **changes: Any) -> None:
        changes.pop("id", None)
        medications = self.replace_item(self.current.medications, "medications", medication_id, changes)
        self.on_change("medications", medications)

    def remove_medication(self, medication_id: str) -> None:
        self.on_change("medications", without_id(self.current.medications, medication_id))

    def add_investigation(
        self,
        name: str,
        type: OrderType = OrderType.LAB,
        urgency: Urgency = Urgency.ROUTINE,
        instructions: str = "",
    ) -> InvestigationOrder:
        data = {"id": new_id("ord"), "name": name, "type": type, "urgency": urgency, "instructions": instructions}
        order = self.build(InvestigationOrder, "investigations", data)
        self.on_change("investigations", [*self.current.investigations, order])
        return order

    def remove_investigation(self, order_id: str) -> None:
        self.on_change("investigations", without_id(self.current.investigations, order_id))

    def set_general_instructions(self, text: str) -> None:
        self.on_change("general_instructions", text)
