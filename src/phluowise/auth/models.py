"""Authentication models for user accounts and sessions."""

from datetime import datetime
from decimal import Decimal
from enum import Enum

from pydantic import ConfigDict, Field

from phluowise.settings import settings
from phluowise.storage.collections import RecordModel


class UserStatus(str, Enum):
    """Account status."""
    ACTIVE = "active"
    SUSPENDED = "suspended"


class PaymentMethod(RecordModel):
    """Where a payout is sent.

    ``type`` is e.g. ``mobile_money`` or ``bank_transfer``; ``provider`` is
    e.g. ``MTN``, ``Airtel`` or a bank name.
    """
    type: str
    provider: str | None = None
    account_number: str | None = None
    account_name: str | None = None
    currency: str = Field(default_factory=lambda: settings.default_currency)


class User(RecordModel):
    """User account.

    Financial fields start at zero and are only changed by the services.
    """
    id: str
    email: str
    password_hash: str
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None

    # Earnings
    balance: Decimal = Decimal("0")
    total_earned: Decimal = Decimal("0")
    referral_count: int = 0
    referral_earnings: Decimal = Decimal("0")

    # Referral
    referral_code: str
    referred_by: str | None = None  # Referrer's user id

    # Status
    status: UserStatus = UserStatus.ACTIVE
    is_verified: bool = False
    payment_methods: list[PaymentMethod] = Field(default_factory=list)

    # Timestamps
    created_at: datetime
    updated_at: datetime
    last_login: datetime | None = None

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email})>"

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part)


class UserUpdate(RecordModel):
    """Fields that ``AuthService.update_user`` may change."""

    model_config = ConfigDict(extra="forbid")

    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    phone: str | None = None
    balance: Decimal | None = None
    total_earned: Decimal | None = None
    referral_count: int | None = None
    referral_earnings: Decimal | None = None
    status: UserStatus | None = None
    is_verified: bool | None = None
    payment_methods: list[PaymentMethod] | None = None


class Session(RecordModel):
    """Login session. Expiry is checked when the session is read."""
    id: str
    user_id: str
    token: str
    expires_at: datetime
    created_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at < now
