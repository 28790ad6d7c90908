"""
Saved profile and match history records.

Both are snapshots: they copy the settings and team records at the moment
they are created, so later edits never alter them.
"""
from dataclasses import dataclass
from typing import Any, Optional

from .phase import GamePhase
from .settings import GameSettings
from .team import TeamConfig


def _as_dict(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


def _as_int(value: Any) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError, OverflowError):
        return 0


@dataclass
class SettingsProfile:
    """A named preset of settings and both team configurations."""
    id: str
    profile_name: str
    created_at: int
    settings: GameSettings
    home_team: TeamConfig
    guest_team: TeamConfig

    def to_json(self) -> dict:
        return {
            "id": self.id,
            "profile_name": self.profile_name,
            "created_at": self.created_at,
            "settings": self.settings.to_json(),
            "home_team": self.home_team.to_json(),
            "guest_team": self.guest_team.to_json(),
        }

    @staticmethod
    def from_json(data: dict) -> Optional["SettingsProfile"]:
        """Build a profile, or return None for an entry without an id."""
        if not isinstance(data, dict) or not data.get("id"):
            return None
        return SettingsProfile(
            id=str(data["id"]),
            profile_name=str(data.get("profile_name", "")),
            created_at=_as_int(data.get("created_at")),
            settings=GameSettings.from_json(_as_dict(data.get("settings"))),
            home_team=TeamConfig.from_json(_as_dict(data.get("home_team")), TeamConfig.default_home()),
            guest_team=TeamConfig.from_json(_as_dict(data.get("guest_team")), TeamConfig.default_guest()),
        )


@dataclass
class GameStat:
    """One recorded match result."""
    id: str
    timestamp: int
    home_config: TeamConfig
    guest_config: TeamConfig
    final_phase: GamePhase

    def to_json(self) -> dict:
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "home_config": self.home_config.to_json(),
            "guest_config": self.guest_config.to_json(),
            "final_phase": self.final_phase.value,
        }

    @staticmethod
    def from_json(data: dict) -> Optional["GameStat"]:
        if not isinstance(data, dict) or not data.get("id"):
            return None
        return GameStat(
            id=str(data["id"]),
            timestamp=_as_int(data.get("timestamp")),
            home_config=TeamConfig.from_json(_as_dict(data.get("home_config")), TeamConfig.default_home()),
            guest_config=TeamConfig.from_json(_as_dict(data.get("guest_config")), TeamConfig.default_guest()),
            final_phase=GamePhase.parse(data.get("final_phase"), GamePhase.END_GAME),
        )
