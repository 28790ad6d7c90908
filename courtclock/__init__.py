"""
Courtside Match Clock

A scoreboard clock for quarter-based matches: it runs the match phases
(pre-game, quarters, breaks, halftime, final), signals every phase boundary,
keeps the home and guest scores, and gates continued use behind a local
trial window and a device-bound activation key.

This package provides both desktop (Tkinter) and web (Flask) interfaces
over the same match session.
"""
from .models import GamePhase, GameSettings, MatchState
from .services import ClockEngine, EntitlementGate, MatchSession, ScoreLedger
from .utils import fmt_mmss, now_ms, APP_TITLE

__version__ = "1.0.0"

__all__ = [
    "GamePhase", "GameSettings", "MatchState", "ClockEngine", "EntitlementGate",
    "MatchSession", "ScoreLedger", "fmt_mmss", "now_ms", "APP_TITLE"
]
