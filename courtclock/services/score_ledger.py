"""Score ledger for the Courtside Match Clock application."""

from ..models import MatchState
from ..utils.constants import SCORE_SWIPE_THRESHOLD_PX

SIDES = ("home", "guest")


def resolve_swipe(start_y: float, end_y: float, threshold: float = SCORE_SWIPE_THRESHOLD_PX) -> int:
    """Map a vertical drag to a score step.

    Screen coordinates grow downwards, so dragging up (``end_y`` above
    ``start_y``) by more than ``threshold`` pixels is +1, dragging down is -1
    and anything shorter is 0.
    """

    diff = start_y - end_y
    if abs(diff) <= threshold:
        return 0
    return 1 if diff > 0 else -1


class ScoreLedger:
    """Two non-negative counters stored on the home and guest team records."""

    def __init__(self, state: MatchState):
        self.state = state

    @property
    def home(self) -> int:
        return self.state.home_team.score

    @property
    def guest(self) -> int:
        return self.state.guest_team.score

    def adjust(self, side: str, delta: int) -> int:
        """Apply a single +1/-1 step to ``side`` and return the new score.

        Raises:
            ValueError: If ``side`` is unknown or ``delta`` is not +1 or -1.
        """

        if side not in SIDES:
            raise ValueError(f"Unknown side: {side!r}")
        if delta not in (1, -1):
            raise ValueError("Score changes must be +1 or -1")

        team = self.state.team(side)
        team.score = max(0, (team.score or 0) + delta)
        return team.score

    def reset(self) -> None:
        self.state.home_team.score = 0
        self.state.guest_team.score = 0
