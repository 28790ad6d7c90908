"""
Models package for the Courtside Match Clock.

This package contains the core data models used throughout the application.
"""
from .phase import GamePhase
from .settings import GameSettings
from .team import TeamConfig
from .clock_state import ClockState
from .entitlement import EntitlementState, EntitlementStatus
from .records import SettingsProfile, GameStat
from .match_state import MatchState

__all__ = [
    "GamePhase", "GameSettings", "TeamConfig", "ClockState",
    "EntitlementState", "EntitlementStatus", "SettingsProfile", "GameStat",
    "MatchState"
]
