"""
TeamConfig model for the Courtside Match Clock application.

A team record carries its display attributes together with its running score.
"""
from dataclasses import dataclass, asdict
from typing import Optional

from ..utils.constants import (
    DEFAULT_HOME_NAME,
    DEFAULT_HOME_COLOR,
    DEFAULT_GUEST_NAME,
    DEFAULT_GUEST_COLOR,
    DEFAULT_TEXT_COLOR,
)


def _text(value, fallback: str) -> str:
    return value if isinstance(value, str) and value else fallback


@dataclass
class TeamConfig:
    """
    Display configuration and score for one side.

    Attributes:
        name: Team name shown under the logo
        color: Accent colour (hex)
        text_color: Name text colour (hex)
        logo_url: Opaque logo reference supplied by the UI, if any
        score: Current score, never negative
    """
    name: str
    color: str
    text_color: str = DEFAULT_TEXT_COLOR
    logo_url: Optional[str] = None
    score: int = 0

    @staticmethod
    def default_home() -> "TeamConfig":
        return TeamConfig(name=DEFAULT_HOME_NAME, color=DEFAULT_HOME_COLOR)

    @staticmethod
    def default_guest() -> "TeamConfig":
        return TeamConfig(name=DEFAULT_GUEST_NAME, color=DEFAULT_GUEST_COLOR)

    def copy(self) -> "TeamConfig":
        return TeamConfig(**asdict(self))

    def to_json(self) -> dict:
        return asdict(self)

    @staticmethod
    def from_json(data: dict, default: Optional["TeamConfig"] = None) -> "TeamConfig":
        """Create a TeamConfig, filling gaps from ``default``."""
        base = default or TeamConfig(name="", color=DEFAULT_TEXT_COLOR)
        if not isinstance(data, dict):
            return base.copy()
        try:
            score = max(0, int(data.get("score", base.score) or 0))
        except (TypeError, ValueError, OverflowError):
            score = base.score
        logo_url = data.get("logo_url", base.logo_url)
        return TeamConfig(
            name=_text(data.get("name"), base.name),
            color=_text(data.get("color"), base.color),
            text_color=_text(data.get("text_color"), base.text_color),
            logo_url=logo_url if isinstance(logo_url, str) else base.logo_url,
            score=score,
        )
