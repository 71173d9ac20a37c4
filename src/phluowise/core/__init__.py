"""Shared helpers: clock and identifier generation."""

from phluowise.core.clock import Clock, utcnow
from phluowise.core.identifiers import (
    generate_id,
    generate_payout_reference,
    generate_referral_code,
    generate_token,
)

__all__ = [
    "Clock",
    "utcnow",
    "generate_id",
    "generate_payout_reference",
    "generate_referral_code",
    "generate_token",
]
