"""
Match phase enumeration for the Courtside Match Clock.

Phases run in a fixed order with one cycle: a finished match returns to
``PRE_GAME`` when advanced again.
"""
from enum import Enum


class GamePhase(str, Enum):
    """One discrete segment of a match."""

    PRE_GAME = "PRE_GAME"
    START_DELAY = "START_DELAY"
    Q1 = "Q1"
    Q1_BREAK = "Q1_BREAK"
    Q2 = "Q2"
    HALFTIME = "HALFTIME"
    Q3 = "Q3"
    Q3_BREAK = "Q3_BREAK"
    Q4 = "Q4"
    END_GAME = "END_GAME"

    @property
    def is_break(self) -> bool:
        """True for the rest phases between quarters."""
        return self in BREAK_PHASES

    @property
    def period_label(self) -> str:
        """Short label shown in the centre of the scoreboard."""
        return PERIOD_LABELS.get(self, "0")

    @staticmethod
    def parse(value, default: "GamePhase" = None) -> "GamePhase":
        try:
            return GamePhase(value)
        except (TypeError, ValueError):
            return default if default is not None else GamePhase.PRE_GAME


BREAK_PHASES = frozenset({GamePhase.Q1_BREAK, GamePhase.HALFTIME, GamePhase.Q3_BREAK})

PERIOD_LABELS = {
    GamePhase.Q1: "1",
    GamePhase.Q2: "2",
    GamePhase.Q3: "3",
    GamePhase.Q4: "4",
    GamePhase.Q1_BREAK: "B1",
    GamePhase.Q3_BREAK: "B3",
    GamePhase.HALFTIME: "HT",
    GamePhase.END_GAME: "FINAL SCORE",
    GamePhase.START_DELAY: "SD",
}
