"""One encounter session per operator, held on the application object."""

import logging
from typing import Optional

from medicore.core.users import Operator
from medicore.encounter.session import EncounterSession
from medicore.encounter.store import EncounterSink, InMemoryEncounterSink
from medicore.encounter.validation import ValidationGate

logger = logging.getLogger(__name__)


class SessionRegistry:
    def __init__(self, sink: Optional[EncounterSink] = None, gate: Optional[ValidationGate] = None):
        self.sink = sink or InMemoryEncounterSink()
        self.gate = gate or ValidationGate()
        self._sessions: dict[str, EncounterSession] = {}

    def for_operator(self, operator: Operator) -> EncounterSession:
        """Return the operator's session, creating an empty one on first use."""
        session = self._sessions.get(operator.id)
        if session is None:
            session = EncounterSession(self.sink, operator, gate=self.gate)
            self._sessions[operator.id] = session
            logger.debug(f"Created encounter session for operator {operator.id}")
        return session

    def get(self, operator_id: str) -> Optional[EncounterSession]:
        return self._sessions.get(operator_id)

    def discard(self, operator_id: str) -> None:
        """Drop an operator's session, e.g. on logout. Unsaved work is lost."""
        if self._sessions.pop(operator_id, None) is not None:
            logger.info(f"Discarded encounter session for operator {operator_id}")

    def __len__(self) -> int:
        return len(self._sessions)
