"""Section editors, one per consultation record slice."""

from medicore.editors.base import SectionEditor, new_id
from medicore.editors.diagnosis import DiagnosisEditor, DiagnosisTemplate
from medicore.editors.examination import ExaminationEditor, compute_bmi
from medicore.editors.followup import FollowupEditor
from medicore.editors.history import HistoryEditor
from medicore.editors.investigations import InvestigationPanel, InvestigationsEditor, PanelItem
from medicore.editors.orders import OrdersEditor

# Keyed by slice name
EDITORS: dict[str, type[SectionEditor]] = {
    "history": HistoryEditor,
    "examination": ExaminationEditor,
    "diagnosis": DiagnosisEditor,
    "orders": OrdersEditor,
    "investigations": InvestigationsEditor,
    "followup": FollowupEditor,
}

__all__ = [
    "EDITORS",
    "DiagnosisEditor",
    "DiagnosisTemplate",
    "ExaminationEditor",
    "FollowupEditor",
    "HistoryEditor",
    "InvestigationPanel",
    "InvestigationsEditor",
    "OrdersEditor",
    "PanelItem",
    "SectionEditor",
    "compute_bmi",
    "new_id",
]
