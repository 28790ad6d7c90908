"""
Services package for the Courtside Match Clock.

This package contains service classes that handle business logic.
Includes a factory that wires the session and its persistence backend.
"""
from .persistence_service import PersistenceStore, MemoryStore, JsonFileStore, merge_with_default
from .clock_engine import ClockEngine, TRANSITIONS, next_phase, transition_for
from .score_ledger import ScoreLedger, resolve_swipe
from .entitlement_gate import (
    EntitlementGate, expected_key, format_key, generate_device_id
)
from .tick_scheduler import (
    TickScheduler, TimerBackend, TkAfterBackend, ThreadingTimerBackend
)
from .match_session import MatchSession, ActivationRequiredError, load_match_state
from .service_factory import ServiceFactory

__all__ = [
    "PersistenceStore", "MemoryStore", "JsonFileStore", "merge_with_default",
    "ClockEngine", "TRANSITIONS", "next_phase", "transition_for",
    "ScoreLedger", "resolve_swipe",
    "EntitlementGate", "expected_key", "format_key", "generate_device_id",
    "TickScheduler", "TimerBackend", "TkAfterBackend", "ThreadingTimerBackend",
    "MatchSession", "ActivationRequiredError", "load_match_state",
    "ServiceFactory"
]
