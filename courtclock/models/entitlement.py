"""
Entitlement models for the Courtside Match Clock application.

``EntitlementState`` is the persisted input of the gate and
``EntitlementStatus`` is the result of evaluating it at a given instant.
"""
from dataclasses import dataclass, asdict
from typing import Optional


@dataclass
class EntitlementState:
    """
    Persisted trial and activation facts for this installation.

    Attributes:
        device_id: 8 uppercase hex characters, generated once
        install_timestamp: First launch, epoch milliseconds, never changes
        is_activated: Whether a valid key has been accepted
        activation_timestamp: When the key was accepted (epoch ms)
    """
    device_id: str
    install_timestamp: int
    is_activated: bool = False
    activation_timestamp: Optional[int] = None


@dataclass(frozen=True)
class EntitlementStatus:
    """Outcome of evaluating the gate at one instant."""
    trial_expired: bool
    license_expired: bool
    must_activate: bool
    is_activated: bool
    trial_minutes_remaining: int
    license_days_remaining: int

    def to_json(self) -> dict:
        return asdict(self)
