"""Slice update protocol.

A change event names a slice, a field of that slice and a new value. The
update function takes the whole current slice and returns a whole new slice
with only that field replaced; nested objects and lists are replaced as given,
never merged element-wise. The value is validated by the slice model, so a
change either produces a valid slice or is rejected without side effects.
"""

from enum import Enum
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from medicore.core.exceptions import ChangeRejected
from medicore.models.consultation import (
    ConsultationRecord,
    DiagnosisSlice,
    ExaminationSlice,
    FollowupSlice,
    HistorySlice,
    InvestigationsSlice,
    OrdersSlice,
)

SliceT = TypeVar("SliceT", bound=BaseModel)


class SliceId(str, Enum):
    """Named sub-object of the consultation record (one per editor tab)."""

    HISTORY = "history"
    EXAMINATION = "examination"
    DIAGNOSIS = "diagnosis"
    ORDERS = "orders"
    INVESTIGATIONS = "investigations"
    FOLLOWUP = "followup"


SLICE_MODELS: dict[SliceId, type[BaseModel]] = {
    SliceId.HISTORY: HistorySlice,
    SliceId.EXAMINATION: ExaminationSlice,
    SliceId.DIAGNOSIS: DiagnosisSlice,
    SliceId.ORDERS: OrdersSlice,
    SliceId.INVESTIGATIONS: InvestigationsSlice,
    SliceId.FOLLOWUP: FollowupSlice,
}


def parse_slice_id(value: Any) -> SliceId:
    try:
        return SliceId(value)
    except ValueError:
        raise ChangeRejected(str(value), "*", "unknown slice") from None


def get_slice(record: ConsultationRecord, slice_id: SliceId) -> BaseModel:
    return getattr(record, slice_id.value)


def replace_field(current: SliceT, slice_id: SliceId, field: str, value: Any) -> SliceT:
    """Return a copy of ``current`` with ``field`` set to ``value``.

    Raises:
        ChangeRejected: unknown field, or the new slice fails validation.
    """
    model_cls = type(current)
    if field not in model_cls.model_fields:
        raise ChangeRejected(slice_id.value, field, "unknown field")

    data = {name: getattr(current, name) for name in model_cls.model_fields}
    data[field] = value
    try:
        return model_cls.model_validate(data)
    except ValidationError as e:
        raise ChangeRejected.from_validation(slice_id.value, field, e) from e


def apply_change(record: ConsultationRecord, slice_id: SliceId, field: str, value: Any) -> ConsultationRecord:
    """Return a new record with one slice field replaced."""
    new_slice = replace_field(get_slice(record, slice_id), slice_id, field, value)
    return record.model_copy(update={slice_id.value: new_slice})

