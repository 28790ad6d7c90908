"""
Entitlement gate for the Courtside Match Clock application.

This module decides whether continued use requires activation. It covers a
fixed trial window from first launch, a fixed license window from the moment
a key is accepted, and the deterministic device-bound key itself. The gate is
an offline convenience check, not a security boundary.
"""
import logging
import random
import re
from typing import Optional

from ..models import EntitlementState, EntitlementStatus
from ..utils import now_ms, STORAGE_KEYS
from ..utils.constants import (
    ACTIVATION_KEY_LENGTH,
    DAY_MS,
    DEVICE_ID_LENGTH,
    LICENSE_MS,
    MINUTE_MS,
    TRIAL_MS,
)
from .persistence_service import PersistenceStore

logger = logging.getLogger(__name__)

_NON_HEX = re.compile(r"[^0-9A-F]")


def clean_device_id(device_id: Optional[str]) -> str:
    """Uppercase ``device_id`` and drop every character that is not hex."""
    return _NON_HEX.sub("", (device_id or "").upper())


def _hex_block(chunk: str) -> str:
    # an empty chunk does not parse and renders as "NaN"
    if not chunk:
        return "NaN"
    return str(int(chunk, 16))


def expected_key(device_id: Optional[str]) -> str:
    """
    Derive the activation key for ``device_id``.

    Args:
        device_id: Device identifier, any case, separators allowed

    Returns:
        16-character key built from a checksum block, the decimal values of
        the first and second four hex digits, and the constant suffix "88"

    Example:
        >>> expected_key("A1B2C3D4")
        '3276413945013288'
    """
    clean_id = clean_device_id(device_id)
    # sum of UTF-16 code units; clean_id is ASCII so ord() matches
    checksum = sum(ord(ch) for ch in clean_id)

    part1 = str(checksum * 7)[:4].rjust(4, "1")
    part2 = _hex_block(clean_id[0:4])[:5].rjust(5, "2")
    part3 = _hex_block(clean_id[4:8])[:5].rjust(5, "3")
    part4 = "88"
    return (part1 + part2 + part3 + part4)[:ACTIVATION_KEY_LENGTH]


def normalize_key_input(key: Optional[str]) -> str:
    """Remove all whitespace from an operator-entered key."""
    return "".join((key or "").split())


def format_key(key: str) -> str:
    """Group a key in blocks of four for display, e.g. '3276 4139 4501 3288'."""
    compact = normalize_key_input(key)
    return " ".join(compact[i:i + 4] for i in range(0, len(compact), 4))


def generate_device_id(rng: Optional[random.Random] = None) -> str:
    """Draw a fresh identifier: 8 uppercase hex characters."""
    rng = rng or random.Random()
    return "".join(format(rng.randrange(16), "X") for _ in range(DEVICE_ID_LENGTH))


def _ceil_div(value: int, unit: int) -> int:
    return -(-value // unit)


class EntitlementGate:
    """
    Evaluates trial and license expiry for one installation.

    The gate holds a reference to an ``EntitlementState``; ``accept`` is the
    only operation that writes to it. Evaluation is a pure function of the
    state and the supplied time.
    """

    def __init__(self, state: EntitlementState):
        self.state = state

    @classmethod
    def bootstrap(cls, store: PersistenceStore, now: Optional[int] = None) -> "EntitlementGate":
        """
        Load persisted entitlement facts, creating them on first run.

        The install timestamp and device id are written only when absent, so
        repeated bootstraps never change them.

        Args:
            store: Persistence backend
            now: Current epoch milliseconds (defaults to the wall clock)

        Returns:
            Gate bound to the loaded state
        """
        now = now_ms() if now is None else now

        install_ts = store.load(STORAGE_KEYS["FIRST_LAUNCH"], 0)
        if not install_ts or install_ts <= 0:
            install_ts = now
            store.save(STORAGE_KEYS["FIRST_LAUNCH"], install_ts)
            logger.info("First launch recorded at %s", install_ts)

        device_id = store.load(STORAGE_KEYS["DEVICE_ID"], "")
        if not device_id:
            device_id = generate_device_id()
            store.save(STORAGE_KEYS["DEVICE_ID"], device_id)
            logger.info("Generated device id %s", device_id)

        is_activated = store.load(STORAGE_KEYS["ACTIVATED"], False)
        activation_ts = store.load(STORAGE_KEYS["ACTIVATION_DATE"], 0)

        return cls(EntitlementState(
            device_id=device_id,
            install_timestamp=int(install_ts),
            is_activated=is_activated,
            activation_timestamp=int(activation_ts) if activation_ts else None,
        ))

    def save_to(self, store: PersistenceStore) -> None:
        """Persist the activation flag and, once set, its timestamp."""
        store.save(STORAGE_KEYS["ACTIVATED"], self.state.is_activated)
        if self.state.activation_timestamp:
            store.save(STORAGE_KEYS["ACTIVATION_DATE"], self.state.activation_timestamp)

    @property
    def device_id(self) -> str:
        return self.state.device_id

    def accept(self, input_key: str, now: Optional[int] = None) -> bool:
        """
        Try to activate with ``input_key``.

        Whitespace in the input is ignored; the comparison is otherwise exact
        and case-sensitive. The activation timestamp is stamped on the first
        success and re-stamped only when the previous license has expired.
        Without that re-stamp an expired license could never be renewed, since
        the window is always measured from the stored timestamp.

        Returns:
            True on success; False leaves the state untouched.
        """
        now = now_ms() if now is None else now
        if normalize_key_input(input_key) != expected_key(self.state.device_id):
            logger.info("Rejected activation key for device %s", self.state.device_id)
            return False

        if (
            not self.state.is_activated
            or self.state.activation_timestamp is None
            or self._license_expired(now)
        ):
            self.state.activation_timestamp = now
        self.state.is_activated = True
        logger.info("Device %s activated at %s", self.state.device_id, self.state.activation_timestamp)
        return True

    def evaluate(self, now: Optional[int] = None) -> EntitlementStatus:
        """Compute expiry flags and remaining windows at ``now``."""
        now = now_ms() if now is None else now
        elapsed = now - self.state.install_timestamp

        trial_expired = not self.state.is_activated and elapsed > TRIAL_MS
        license_expired = self._license_expired(now)

        license_days = 0
        if self.state.is_activated and self.state.activation_timestamp is not None:
            left = LICENSE_MS - (now - self.state.activation_timestamp)
            license_days = _ceil_div(max(0, left), DAY_MS)

        return EntitlementStatus(
            trial_expired=trial_expired,
            license_expired=license_expired,
            must_activate=trial_expired or license_expired,
            is_activated=self.state.is_activated,
            trial_minutes_remaining=_ceil_div(max(0, TRIAL_MS - elapsed), MINUTE_MS),
            license_days_remaining=license_days,
        )

    def must_activate(self, now: Optional[int] = None) -> bool:
        return self.evaluate(now).must_activate

    def _license_expired(self, now: int) -> bool:
        return (
            self.state.is_activated
            and self.state.activation_timestamp is not None
            and now - self.state.activation_timestamp > LICENSE_MS
        )
