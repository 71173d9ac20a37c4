"""Transaction and payout request records."""

from datetime import datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel

from phluowise.auth.models import PaymentMethod
from phluowise.storage.collections import RecordModel

PAYOUT_REQUEST = "payout_request"


class PaymentStatus(str, Enum):
    """Payment and transaction states."""
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class Transaction(RecordModel):
    """Generic money movement recorded for a user."""
    id: str
    user_id: str
    amount: Decimal
    type: str  # credit, debit, bonus, ...
    status: PaymentStatus = PaymentStatus.PENDING
    description: str | None = None
    reference: str | None = None

    # Timestamps
    created_at: datetime
    updated_at: datetime

    def __repr__(self):
        return f"<Transaction(user={self.user_id}, amount={self.amount}, type={self.type})>"


class Payment(RecordModel):
    """Payout request.

    ``processed_at`` is only set when the status becomes completed.
    """
    id: str
    user_id: str
    amount: Decimal
    type: str = PAYOUT_REQUEST
    status: PaymentStatus = PaymentStatus.PENDING
    payment_method: PaymentMethod | None = None
    description: str | None = None
    reference: str | None = None
    notes: str | None = None

    # Timestamps
    created_at: datetime
    updated_at: datetime
    processed_at: datetime | None = None

    def __repr__(self):
        return f"<Payment(id={self.id}, amount={self.amount}, status={self.status.value})>"


class NextPayout(BaseModel):
    """Pending payout total and when it is expected to be processed."""
    amount: Decimal
    date: datetime
    count: int
