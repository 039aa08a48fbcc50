"""Encounter session, slice update protocol and completion gate."""

from medicore.encounter.registry import SessionRegistry
from medicore.encounter.session import CompletionResult, EncounterSession, EncounterStatus
from medicore.encounter.slices import SliceId, apply_change, get_slice
from medicore.encounter.store import EncounterSink, InMemoryEncounterSink, PersistedEncounter
from medicore.encounter.validation import (
    Advisory,
    CompletionRule,
    ValidationFailure,
    ValidationGate,
)

__all__ = [
    "Advisory",
    "CompletionResult",
    "CompletionRule",
    "EncounterSession",
    "EncounterSink",
    "EncounterStatus",
    "InMemoryEncounterSink",
    "PersistedEncounter",
    "SessionRegistry",
    "SliceId",
    "ValidationFailure",
    "ValidationGate",
    "apply_change",
    "get_slice",
]
