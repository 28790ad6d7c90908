"""Identifier helpers for profiles and recorded matches."""
import random
import string

from .time_utils import now_ms

_BASE36 = string.digits + string.ascii_lowercase


def to_base36(value: int) -> str:
    """Render a non-negative integer in lowercase base 36."""
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def generate_safe_id() -> str:
    """Return a time-ordered id: base-36 milliseconds plus 8 random chars."""
    suffix = "".join(random.choice(_BASE36) for _ in range(8))
    return to_base36(now_ms()) + suffix
