"""
Match session orchestration for the Courtside Match Clock application.

The session owns the ``MatchState`` container, wires the tick source to the
clock engine and persists every committed change. User interfaces talk to
the session only.
"""
import logging
import threading
from typing import Any, Callable, Dict, List, Optional

from ..models import (
    ClockState, GamePhase, GameSettings, GameStat, MatchState, SettingsProfile, TeamConfig
)
from ..utils import fmt_mmss, generate_safe_id, now_ms, STORAGE_KEYS
from ..utils.constants import MAX_PHASE_LENGTH_MIN, MIN_PHASE_LENGTH_MIN, SOUND_TYPES
from .clock_engine import ClockEngine
from .entitlement_gate import EntitlementGate
from .persistence_service import PersistenceStore
from .score_ledger import ScoreLedger, resolve_swipe
from .tick_scheduler import TickScheduler, TimerBackend

logger = logging.getLogger(__name__)

TEAM_FIELDS = ("name", "color", "text_color", "logo_url")
LENGTH_FIELDS = ("quarter_length", "break_length", "halftime_length")


def load_match_state(store: PersistenceStore) -> MatchState:
    """Rebuild a MatchState from ``store``, tolerating missing or stale records."""

    settings = GameSettings.from_json(
        store.load(STORAGE_KEYS["SETTINGS"], GameSettings().to_json())
    )
    home = TeamConfig.default_home()
    guest = TeamConfig.default_guest()
    home = TeamConfig.from_json(store.load(STORAGE_KEYS["HOME_TEAM"], home.to_json()), home)
    guest = TeamConfig.from_json(store.load(STORAGE_KEYS["GUEST_TEAM"], guest.to_json()), guest)

    profiles = [SettingsProfile.from_json(p) for p in store.load(STORAGE_KEYS["PROFILES"], [])]
    history = [GameStat.from_json(g) for g in store.load(STORAGE_KEYS["GAME_HISTORY"], [])]

    return MatchState(
        clock=ClockState(time_left_seconds=settings.quarter_seconds),
        settings=settings,
        home_team=home,
        guest_team=guest,
        profiles=[p for p in profiles if p is not None],
        history=[g for g in history if g is not None],
    )


def _whole_minutes(key: str, value: Any) -> int:
    """Validate a phase length in whole minutes; strings of digits are accepted."""
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise ValueError(f"{key} must be a whole number of minutes")
    try:
        minutes = int(value)
    except (TypeError, ValueError):
        raise ValueError(f"{key} must be a whole number of minutes") from None
    if not MIN_PHASE_LENGTH_MIN <= minutes <= MAX_PHASE_LENGTH_MIN:
        raise ValueError(
            f"{key} must be between {MIN_PHASE_LENGTH_MIN} and {MAX_PHASE_LENGTH_MIN} minutes"
        )
    return minutes


class ActivationRequiredError(Exception):
    """Raised when a gated operation is attempted while activation is required."""


class MatchSession:
    """
    App orchestrator for one running clock.

    Args:
        store: Persistence backend for all records
        timer_backend: Tick source; without one the clock only moves when
            ``tick`` is called explicitly
        clock: Callable returning the current epoch milliseconds
        lock: Lock shared with a threaded timer backend, if any
    """

    def __init__(
        self,
        store: PersistenceStore,
        timer_backend: Optional[TimerBackend] = None,
        clock: Callable[[], int] = now_ms,
        lock: Optional[threading.RLock] = None,
    ):
        self.store = store
        self.now = clock
        self.lock = lock or threading.RLock()

        self.state = load_match_state(store)
        self.engine = ClockEngine(self.state)
        self.scores = ScoreLedger(self.state)
        self.gate = EntitlementGate.bootstrap(store, self.now())
        self.scheduler = TickScheduler(timer_backend) if timer_backend else None

        self.sound_seq = 0
        self.muted = False
        self._recorded = False
        self._sound_listeners: List[Callable[[], None]] = []
        self._change_listeners: List[Callable[[], None]] = []

        self.engine.on_sound(self._on_sound)
        self.engine.on_phase_change(self._on_phase_change)

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------
    def on_sound(self, listener: Callable[[], None]) -> None:
        """Register an audio renderer callback."""
        self._sound_listeners.append(listener)

    def on_change(self, listener: Callable[[], None]) -> None:
        """Register a callback run after every committed change."""
        self._change_listeners.append(listener)

    # ------------------------------------------------------------------
    # Clock controls
    # ------------------------------------------------------------------
    def toggle(self) -> None:
        with self.lock:
            self._require_entitlement()
            self.engine.toggle()
            self._commit_clock()

    def skip(self) -> None:
        with self.lock:
            self._require_entitlement()
            self.engine.skip()
            self._commit_clock()

    def reset_match(self) -> None:
        """Reset the clock to PRE_GAME and both scores to zero."""
        with self.lock:
            self._require_entitlement()
            self.engine.reset()
            self.scores.reset()
            self._save_teams()
            self._commit_clock()

    def tick(self) -> bool:
        """Apply one tick and commit it; used by the scheduler and by tests."""
        with self.lock:
            changed = self.engine.tick()
            if changed:
                self._commit_clock()
            return changed

    def close(self) -> None:
        """Stop the clock and drop any pending tick."""
        with self.lock:
            self.engine.stop()
            if self.scheduler:
                self.scheduler.cancel()

    # ------------------------------------------------------------------
    # Scores
    # ------------------------------------------------------------------
    def adjust_score(self, side: str, delta: int) -> int:
        with self.lock:
            self._require_entitlement()
            value = self.scores.adjust(side, delta)
            self._save_team(side)
            self._notify_change()
            return value

    def swipe_score(self, side: str, start_y: float, end_y: float) -> int:
        """Resolve a drag gesture into at most one score step."""
        with self.lock:
            delta = resolve_swipe(start_y, end_y)
            if delta == 0:
                return self.state.team(side).score
            return self.adjust_score(side, delta)

    def set_muted(self, muted: bool) -> bool:
        """Silence or restore the boundary sound; the clock keeps running either way."""
        with self.lock:
            self.muted = bool(muted)
            logger.info("Sound %s", "muted" if self.muted else "unmuted")
            self._notify_change()
            return self.muted

    # ------------------------------------------------------------------
    # Settings and teams
    # ------------------------------------------------------------------
    def update_settings(self, **changes: Any) -> GameSettings:
        """
        Change phase lengths and/or sound type.

        New lengths apply from the next phase onwards; the running countdown
        keeps its current remaining time.

        Raises:
            ValueError: For unknown fields or out-of-range values.
        """
        with self.lock:
            settings = self.state.settings
            validated: Dict[str, Any] = {}
            for key, value in changes.items():
                if key in LENGTH_FIELDS:
                    validated[key] = _whole_minutes(key, value)
                elif key == "sound_type":
                    if value not in SOUND_TYPES:
                        raise ValueError(f"Unknown sound type: {value!r}")
                    validated[key] = value
                else:
                    raise ValueError(f"Unknown setting: {key!r}")

            for key, value in validated.items():
                setattr(settings, key, value)

            self._save(STORAGE_KEYS["SETTINGS"], settings.to_json())
            self._commit_clock()
            return settings

    def update_team(self, side: str, **changes: Any) -> TeamConfig:
        """Edit a team's display fields; scores change only via ``adjust_score``."""
        with self.lock:
            team = self.state.team(side)
            unknown = set(changes) - set(TEAM_FIELDS)
            if unknown:
                raise ValueError(f"Unknown team field(s): {', '.join(sorted(unknown))}")
            for key, value in changes.items():
                setattr(team, key, value)
            self._save_team(side)
            self._notify_change()
            return team

    # ------------------------------------------------------------------
    # Profiles
    # ------------------------------------------------------------------
    def save_profile(self, name: str) -> SettingsProfile:
        with self.lock:
            name = (name or "").strip()
            if not name:
                raise ValueError("Profile name is required")
            profile = SettingsProfile(
                id=generate_safe_id(),
                profile_name=name,
                created_at=self.now(),
                settings=GameSettings(**self.state.settings.to_json()),
                home_team=self.state.home_team.copy(),
                guest_team=self.state.guest_team.copy(),
            )
            self.state.profiles.append(profile)
            self._save_profiles()
            return profile

    def delete_profile(self, profile_id: str) -> None:
        with self.lock:
            self._find(self.state.profiles, profile_id)
            self.state.profiles = [p for p in self.state.profiles if p.id != profile_id]
            self._save_profiles()

    def load_profile(self, profile_id: str) -> SettingsProfile:
        """Apply a saved profile's settings and team records."""
        with self.lock:
            profile = self._find(self.state.profiles, profile_id)
            self.state.settings = GameSettings(**profile.settings.to_json())
            self.state.home_team = profile.home_team.copy()
            self.state.guest_team = profile.guest_team.copy()
            self._save(STORAGE_KEYS["SETTINGS"], self.state.settings.to_json())
            self._save_teams()
            self._commit_clock()
            logger.info("Loaded profile %s", profile.profile_name)
            return profile

    # ------------------------------------------------------------------
    # Match history
    # ------------------------------------------------------------------
    def record_current_game(self) -> GameStat:
        """Append the current teams and phase to the match history."""
        with self.lock:
            stat = GameStat(
                id=generate_safe_id(),
                timestamp=self.now(),
                home_config=self.state.home_team.copy(),
                guest_config=self.state.guest_team.copy(),
                final_phase=self.state.clock.phase,
            )
            self.state.history.append(stat)
            self._save_history()
            logger.info(
                "Recorded result %s %s - %s %s",
                stat.home_config.name, stat.home_config.score,
                stat.guest_config.score, stat.guest_config.name,
            )
            return stat

    def delete_game(self, game_id: str) -> None:
        with self.lock:
            self._find(self.state.history, game_id)
            self.state.history = [g for g in self.state.history if g.id != game_id]
            self._save_history()

    def clear_history(self) -> None:
        with self.lock:
            self.state.history = []
            self._save_history()

    # ------------------------------------------------------------------
    # Entitlement
    # ------------------------------------------------------------------
    def activation_status(self):
        return self.gate.evaluate(self.now())

    def activate(self, key: str) -> bool:
        with self.lock:
            accepted = self.gate.accept(key, self.now())
            if accepted:
                self._persist(self.gate.save_to, self.store)
                self._notify_change()
            return accepted

    # ------------------------------------------------------------------
    # Query helpers
    # ------------------------------------------------------------------
    def snapshot(self) -> Dict[str, Any]:
        """Return a JSON-ready view of everything a UI renders."""
        with self.lock:
            clock = self.state.clock
            return {
                "clock": {
                    **clock.to_json(),
                    "display": fmt_mmss(clock.time_left_seconds),
                    "period_label": clock.phase.period_label,
                    "is_break": clock.phase.is_break,
                },
                "home_team": self.state.home_team.to_json(),
                "guest_team": self.state.guest_team.to_json(),
                "settings": self.state.settings.to_json(),
                "sound_seq": self.sound_seq,
                "muted": self.muted,
                "device_id": self.gate.device_id,
                "entitlement": self.activation_status().to_json(),
            }

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _require_entitlement(self) -> None:
        if self.gate.must_activate(self.now()):
            raise ActivationRequiredError("Activation required")

    def _commit_clock(self) -> None:
        if self.scheduler:
            self.scheduler.rearm(self.engine.needs_tick(), self.tick)
        self._notify_change()

    def _on_sound(self) -> None:
        if self.muted:
            return
        self.sound_seq += 1
        for listener in list(self._sound_listeners):
            listener()

    def _on_phase_change(self, previous: GamePhase, current: GamePhase) -> None:
        if current == GamePhase.END_GAME and not self._recorded:
            self._recorded = True
            self.record_current_game()
        if current in (GamePhase.PRE_GAME, GamePhase.START_DELAY):
            self._recorded = False

    def _notify_change(self) -> None:
        for listener in list(self._change_listeners):
            listener()

    @staticmethod
    def _find(items: list, item_id: str):
        for item in items:
            if item.id == item_id:
                return item
        raise KeyError(item_id)

    def _save_team(self, side: str) -> None:
        key = STORAGE_KEYS["HOME_TEAM"] if side == "home" else STORAGE_KEYS["GUEST_TEAM"]
        self._save(key, self.state.team(side).to_json())

    def _save_teams(self) -> None:
        self._save_team("home")
        self._save_team("guest")

    def _save_profiles(self) -> None:
        self._save(STORAGE_KEYS["PROFILES"], [p.to_json() for p in self.state.profiles])
        self._notify_change()

    def _save_history(self) -> None:
        self._save(STORAGE_KEYS["GAME_HISTORY"], [g.to_json() for g in self.state.history])
        self._notify_change()

    def _save(self, key: str, value: Any) -> None:
        self._persist(self.store.save, key, value)

    def _persist(self, func: Callable, *args: Any) -> None:
        # A failed write must not stop the clock
        try:
            func(*args)
        except OSError as e:
            logger.warning("Could not persist state: %s", e)
