"""
GameSettings model for the Courtside Match Clock application.

Phase lengths are stored in minutes; the clock engine converts them to
seconds at the moment a new phase begins.
"""
from dataclasses import dataclass, asdict

from ..utils.constants import (
    DEFAULT_QUARTER_LENGTH_MIN,
    DEFAULT_BREAK_LENGTH_MIN,
    DEFAULT_HALFTIME_LENGTH_MIN,
    DEFAULT_SOUND_TYPE,
    SOUND_TYPES,
)


def _positive_or(value, fallback: int) -> int:
    try:
        value = int(value)
    except (TypeError, ValueError, OverflowError):
        return fallback
    return value if value > 0 else fallback


@dataclass
class GameSettings:
    """
    Operator-configurable match settings.

    Attributes:
        quarter_length: Quarter length in minutes
        break_length: Quarter break length in minutes
        halftime_length: Halftime length in minutes
        sound_type: Timbre the audio renderer plays at phase boundaries
    """
    quarter_length: int = DEFAULT_QUARTER_LENGTH_MIN
    break_length: int = DEFAULT_BREAK_LENGTH_MIN
    halftime_length: int = DEFAULT_HALFTIME_LENGTH_MIN
    sound_type: str = DEFAULT_SOUND_TYPE

    @property
    def quarter_seconds(self) -> int:
        return _positive_or(self.quarter_length, DEFAULT_QUARTER_LENGTH_MIN) * 60

    @property
    def break_seconds(self) -> int:
        return _positive_or(self.break_length, DEFAULT_BREAK_LENGTH_MIN) * 60

    @property
    def halftime_seconds(self) -> int:
        return _positive_or(self.halftime_length, DEFAULT_HALFTIME_LENGTH_MIN) * 60

    def to_json(self) -> dict:
        return asdict(self)

    @staticmethod
    def from_json(data: dict) -> "GameSettings":
        """
        Create GameSettings from a JSON dictionary.

        Lengths that are missing or not positive fall back to defaults and an
        unknown sound type falls back to the default timbre.
        """
        if not isinstance(data, dict):
            return GameSettings()
        sound_type = data.get("sound_type", DEFAULT_SOUND_TYPE)
        if sound_type not in SOUND_TYPES:
            sound_type = DEFAULT_SOUND_TYPE
        return GameSettings(
            quarter_length=_positive_or(data.get("quarter_length"), DEFAULT_QUARTER_LENGTH_MIN),
            break_length=_positive_or(data.get("break_length"), DEFAULT_BREAK_LENGTH_MIN),
            halftime_length=_positive_or(data.get("halftime_length"), DEFAULT_HALFTIME_LENGTH_MIN),
            sound_type=sound_type,
        )
