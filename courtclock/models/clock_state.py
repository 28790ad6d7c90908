"""
ClockState model for the Courtside Match Clock application.
"""
from dataclasses import dataclass

from .phase import GamePhase
from ..utils.constants import DEFAULT_QUARTER_LENGTH_MIN


@dataclass
class ClockState:
    """
    Live state of the match clock.

    Attributes:
        phase: Active match phase
        time_left_seconds: Seconds remaining in the active phase, never negative
        is_running: Whether the clock is counting down
    """
    phase: GamePhase = GamePhase.PRE_GAME
    time_left_seconds: int = DEFAULT_QUARTER_LENGTH_MIN * 60
    is_running: bool = False

    def to_json(self) -> dict:
        return {
            "phase": self.phase.value,
            "time_left_seconds": self.time_left_seconds,
            "is_running": self.is_running,
        }
