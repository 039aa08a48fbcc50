"""Persistence collaborator for encounters."""

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

from medicore.core.users import Operator
from medicore.models.consultation import ConsultationRecord
from medicore.models.patient import Patient

logger = logging.getLogger(__name__)


class PersistedEncounter(BaseModel):
    """Snapshot written on save and on completion."""

    model_config = ConfigDict(frozen=True)

    encounter_id: str
    patient: Patient
    operator: Operator
    record: ConsultationRecord
    saved_at: datetime
    completed_at: Optional[datetime] = None

    @property
    def is_final(self) -> bool:
        return self.completed_at is not None


class EncounterSink(ABC):
    """Where encounter snapshots go. Implementations may raise on failure."""

    @abstractmethod
    def persist(self, encounter: PersistedEncounter) -> None:
        """Write one snapshot."""
        ...


class InMemoryEncounterSink(EncounterSink):
    """Keeps every written snapshot in process memory."""

    def __init__(self):
        self.writes: list[PersistedEncounter] = []

    def persist(self, encounter: PersistedEncounter) -> None:
        self.writes.append(encounter)
        logger.debug(
            f"Persisted encounter {encounter.encounter_id} "
            f"(final={encounter.is_final}, total writes={len(self.writes)})"
        )

    def latest(self, encounter_id: str) -> Optional[PersistedEncounter]:
        for encounter in reversed(self.writes):
            if encounter.encounter_id == encounter_id:
                return encounter
        return None
