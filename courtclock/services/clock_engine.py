"""Clock engine for the Courtside Match Clock application."""

import logging
from typing import Callable, Dict, List, Optional, Tuple

from ..models import GamePhase, GameSettings, MatchState
from ..utils import START_DELAY_SECONDS

logger = logging.getLogger(__name__)

SoundListener = Callable[[], None]
PhaseListener = Callable[[GamePhase, GamePhase], None]

# phase -> (next phase, GameSettings attribute holding its length in seconds)
TRANSITIONS: Dict[GamePhase, Tuple[GamePhase, Optional[str]]] = {
    GamePhase.PRE_GAME: (GamePhase.Q1, "quarter_seconds"),
    GamePhase.START_DELAY: (GamePhase.Q1, "quarter_seconds"),
    GamePhase.Q1: (GamePhase.Q1_BREAK, "break_seconds"),
    GamePhase.Q1_BREAK: (GamePhase.Q2, "quarter_seconds"),
    GamePhase.Q2: (GamePhase.HALFTIME, "halftime_seconds"),
    GamePhase.HALFTIME: (GamePhase.Q3, "quarter_seconds"),
    GamePhase.Q3: (GamePhase.Q3_BREAK, "break_seconds"),
    GamePhase.Q3_BREAK: (GamePhase.Q4, "quarter_seconds"),
    GamePhase.Q4: (GamePhase.END_GAME, None),
    GamePhase.END_GAME: (GamePhase.PRE_GAME, "quarter_seconds"),
}


def next_phase(phase: GamePhase) -> GamePhase:
    return TRANSITIONS[phase][0]


def transition_for(phase: GamePhase, settings: GameSettings) -> Tuple[GamePhase, int]:
    """Return the phase following ``phase`` and its length in seconds."""

    following, length_attr = TRANSITIONS[phase]
    duration = getattr(settings, length_attr) if length_attr else 0
    return following, duration


class ClockEngine:
    """Phase/timer state machine advanced by a 1 Hz tick.

    The engine reads ``state.settings`` only when a new phase begins, so a
    settings change never resizes the countdown already in progress.
    """

    def __init__(self, state: MatchState):
        self.state = state
        self._sound_listeners: List[SoundListener] = []
        self._phase_listeners: List[PhaseListener] = []

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------
    def on_sound(self, listener: SoundListener) -> None:
        """Register a callback fired once per countdown crossing to zero."""

        self._sound_listeners.append(listener)

    def on_phase_change(self, listener: PhaseListener) -> None:
        """Register a callback receiving ``(old_phase, new_phase)``."""

        self._phase_listeners.append(listener)

    # ------------------------------------------------------------------
    # Core clock controls
    # ------------------------------------------------------------------
    def toggle(self) -> None:
        """Start a fresh match from PRE_GAME, otherwise pause or resume."""

        clock = self.state.clock
        if not clock.is_running and clock.phase == GamePhase.PRE_GAME:
            clock.time_left_seconds = START_DELAY_SECONDS
            clock.is_running = True
            self._enter(GamePhase.START_DELAY)
            return

        clock.is_running = not clock.is_running
        logger.debug("Clock %s in %s", "resumed" if clock.is_running else "paused", clock.phase.value)

    def start(self) -> None:
        self.toggle()

    def stop(self) -> None:
        """Pause the clock without changing phase or remaining time."""

        self.state.clock.is_running = False

    def tick(self) -> bool:
        """Advance the running clock by one second.

        Returns:
            True if the state changed, False when the call was a no-op.
        """

        clock = self.state.clock
        if not clock.is_running or clock.time_left_seconds <= 0:
            return False

        if clock.time_left_seconds > 1:
            clock.time_left_seconds -= 1
            return True

        if clock.phase == GamePhase.START_DELAY:
            following = GamePhase.Q1
            duration = self.state.settings.quarter_seconds
        else:
            following, duration = transition_for(clock.phase, self.state.settings)

        clock.time_left_seconds = duration
        if following == GamePhase.END_GAME:
            clock.is_running = False

        self._emit_sound()
        self._enter(following)
        return True

    def skip(self) -> None:
        """Jump straight to the next phase and leave the clock paused."""

        clock = self.state.clock
        following, duration = transition_for(clock.phase, self.state.settings)
        clock.time_left_seconds = duration
        clock.is_running = False
        self._enter(following)

    def reset(self) -> None:
        """Return to PRE_GAME with a full quarter on the clock. Scores are untouched."""

        clock = self.state.clock
        clock.is_running = False
        clock.time_left_seconds = self.state.settings.quarter_seconds
        self._enter(GamePhase.PRE_GAME)

    # ------------------------------------------------------------------
    # Query helpers
    # ------------------------------------------------------------------
    @property
    def phase(self) -> GamePhase:
        return self.state.clock.phase

    @property
    def time_left_seconds(self) -> int:
        return self.state.clock.time_left_seconds

    @property
    def is_running(self) -> bool:
        return self.state.clock.is_running

    def needs_tick(self) -> bool:
        """True while a tick would change state."""

        return self.state.clock.is_running and self.state.clock.time_left_seconds > 0

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _enter(self, phase: GamePhase) -> None:
        previous = self.state.clock.phase
        self.state.clock.phase = phase
        logger.debug(
            "Phase %s -> %s (%ss)", previous.value, phase.value, self.state.clock.time_left_seconds
        )
        for listener in list(self._phase_listeners):
            listener(previous, phase)

    def _emit_sound(self) -> None:
        for listener in list(self._sound_listeners):
            listener()
