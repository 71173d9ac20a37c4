"""Referral records."""

from datetime import datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel

from phluowise.storage.collections import RecordModel


class ReferralStatus(str, Enum):
    """Referral lifecycle states."""
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class Referral(RecordModel):
    """Individual referral record.

    ``user_id`` is the referrer; the referee fields describe who signed up.
    """
    id: str
    user_id: str
    referee_id: str | None = None
    referee_email: str | None = None
    referee_name: str | None = None

    # Status
    status: ReferralStatus = ReferralStatus.PENDING
    bonus_amount: Decimal = Decimal("0")
    bonus_credited: bool = False  # Referrer balance already credited

    # Timestamps
    created_at: datetime
    updated_at: datetime

    def __repr__(self):
        return f"<Referral(referrer={self.user_id}, referee={self.referee_id}, status={self.status.value})>"


class ReferralStats(BaseModel):
    """Referral counts and earnings for one referrer."""
    total: int = 0
    completed: int = 0
    pending: int = 0
    failed: int = 0
    total_earned: Decimal = Decimal("0")
