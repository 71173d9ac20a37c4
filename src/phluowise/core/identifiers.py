"""Random identifiers for records, sessions, referral codes and payouts."""

import secrets
import string

REFERRAL_ALPHABET = string.ascii_uppercase + string.digits


def generate_id(prefix: str = "") -> str:
    """Generate a short random record id, optionally prefixed."""
    return f"{prefix}{secrets.token_hex(6)}"


def generate_token() -> str:
    """Generate an opaque session token."""
    return secrets.token_urlsafe(32)


def generate_referral_code(length: int = 8) -> str:
    """Generate a referral code.

    Format: uppercase letters and digits, e.g. ``K7QX2M9A``.
    """
    return "".join(secrets.choice(REFERRAL_ALPHABET) for _ in range(length))


def generate_payout_reference() -> str:
    """Generate a payout reference of the form ``PAY-XXXXXXXX``."""
    suffix = "".join(secrets.choice(REFERRAL_ALPHABET) for _ in range(8))
    return f"PAY-{suffix}"
