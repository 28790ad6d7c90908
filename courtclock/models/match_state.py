"""
MatchState model for the Courtside Match Clock application.

This module contains the MatchState dataclass, the single explicit state
container owned by the session. Services receive it by reference and mutate
it only through their own operations.
"""
from dataclasses import dataclass, field
from typing import List

from .clock_state import ClockState
from .records import GameStat, SettingsProfile
from .settings import GameSettings
from .team import TeamConfig


@dataclass
class MatchState:
    """
    Represents the complete state of a match session.

    Attributes:
        clock: Phase, remaining seconds and running flag
        settings: Phase lengths and sound selection
        home_team: Home display record and score
        guest_team: Guest display record and score
        profiles: Saved setting presets
        history: Recorded match results, oldest first
    """
    clock: ClockState = field(default_factory=ClockState)
    settings: GameSettings = field(default_factory=GameSettings)
    home_team: TeamConfig = field(default_factory=TeamConfig.default_home)
    guest_team: TeamConfig = field(default_factory=TeamConfig.default_guest)
    profiles: List[SettingsProfile] = field(default_factory=list)
    history: List[GameStat] = field(default_factory=list)

    def team(self, side: str) -> TeamConfig:
        """Return the team record for ``side`` ('home' or 'guest')."""
        if side == "home":
            return self.home_team
        if side == "guest":
            return self.guest_team
        raise ValueError(f"Unknown side: {side!r}")
