"""Payout requests and earnings aggregates."""

import random
from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from phluowise.auth.models import PaymentMethod
from phluowise.auth.service import AuthService
from phluowise.core import Clock, generate_id, generate_payout_reference, utcnow
from phluowise.errors import InvalidAmountError, NotAuthenticatedError, NotFoundError
from phluowise.logging_config import get_logger
from phluowise.payments.models import PAYOUT_REQUEST, NextPayout, Payment, PaymentStatus
from phluowise.payments.transactions import TransactionService
from phluowise.settings import settings
from phluowise.storage.collections import Collection, Storage, get_storage

logger = get_logger(__name__)

CENT = Decimal("0.01")

# Payment methods used for generated demo data
TEST_PAYMENT_METHODS = [
    {"type": "mobile_money", "provider": "MTN", "account_number": "2567**123456"},
    {"type": "mobile_money", "provider": "Airtel", "account_number": "2567**654321"},
    {"type": "bank_transfer", "provider": "Chase Bank", "account_number": "****4567"},
]
TEST_STATUSES = [PaymentStatus.COMPLETED, PaymentStatus.PENDING, PaymentStatus.FAILED]


def parse_amount(value: Any) -> Decimal:
    """Parse a payout amount from a number or numeric string.

    Args:
        value: Amount such as ``25.5`` or ``"25.50"``

    Returns:
        Amount rounded to cents

    Raises:
        InvalidAmountError: If not numeric, not finite, or not positive
    """
    if isinstance(value, bool) or value is None:
        raise InvalidAmountError(value)

    try:
        amount = Decimal(str(value).strip())
        if not amount.is_finite():
            raise InvalidAmountError(value)
        amount = amount.quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise InvalidAmountError(value) from None

    if amount <= 0:
        raise InvalidAmountError(value)
    return amount


class PaymentService:
    """Service for payout requests.

    Operations:
    - Record and request payouts
    - Update payout status (paid / failed)
    - Earnings aggregates: total, monthly, pending, next payout
    """

    def __init__(
        self,
        storage: Storage | None = None,
        auth: AuthService | None = None,
        clock: Clock = utcnow,
    ):
        """Initialize payment service.

        Args:
            storage: Collection storage (defaults to the process storage)
            auth: Auth service used to resolve the current user
            clock: Time source
        """
        self.storage = storage or get_storage()
        self.auth = auth or AuthService(self.storage, clock=clock)
        self.transactions = TransactionService(self.storage, clock=clock)
        self.clock = clock
        self.logger = get_logger(__name__)

    def _load(self) -> list[Payment]:
        return self.storage.load_models(Collection.PAYMENTS, Payment)

    def _save(self, payments: list[Payment]) -> None:
        self.storage.save_models(Collection.PAYMENTS, payments)

    # ==================== REQUESTS ====================

    def record_payment_request(
        self,
        user_id: str,
        amount: Decimal,
        payment_method: PaymentMethod | None = None,
        description: str | None = None,
        reference: str | None = None,
    ) -> Payment:
        """Store a pending payout request.

        Returns:
            Created payment record
        """
        now = self.clock()
        payment = Payment(
            id=generate_id("req_"),
            user_id=user_id,
            amount=amount,
            payment_method=payment_method,
            description=description,
            reference=reference,
            created_at=now,
            updated_at=now,
        )

        payments = self._load()
        payments.append(payment)
        self._save(payments)

        return payment

    def request_payout(
        self,
        user_id: str,
        amount: Any,
        payment_method: PaymentMethod | dict[str, Any],
        description: str = "",
        token: str | None = None,
    ) -> Payment:
        """Request a payout for a user.

        Args:
            user_id: User receiving the payout
            amount: Amount as number or numeric string
            payment_method: Destination (type, provider, account details)
            description: Optional description
            token: Session token; the stored current token when omitted

        Returns:
            Pending payment with a ``PAY-XXXXXXXX`` reference

        Raises:
            NotAuthenticatedError: If there is no valid session for ``user_id``
            InvalidAmountError: If amount is not a positive number
        """
        current = self.auth.get_current_user(token)
        if not current or current.id != user_id:
            self.logger.info("payout_rejected", user_id=user_id, reason="not_authenticated")
            raise NotAuthenticatedError()

        numeric_amount = parse_amount(amount)

        if isinstance(payment_method, dict):
            payment_method = PaymentMethod.model_validate(payment_method)

        payment = self.record_payment_request(
            user_id=user_id,
            amount=numeric_amount,
            payment_method=payment_method,
            description=description or f"Payout request for ${numeric_amount:.2f}",
            reference=generate_payout_reference(),
        )

        self.logger.info(
            "payout_requested",
            user_id=user_id,
            payment_id=payment.id,
            amount=str(numeric_amount),
            method=payment_method.type,
        )
        return payment

    def request_withdrawal(
        self,
        user_id: str,
        amount: Any,
        method_type: str,
        token: str | None = None,
    ) -> bool:
        """Request a payout of part of the user's balance.

        The amount may not exceed the balance minus payouts still pending.
        The user's saved payment method of ``method_type`` is used when
        there is one.

        Returns:
            True if the request was recorded, False on insufficient balance

        Raises:
            NotFoundError: If the user does not exist
            NotAuthenticatedError: If there is no valid session
            InvalidAmountError: If amount is not a positive number
        """
        numeric_amount = parse_amount(amount)
        user = self.auth.get_user_by_id(user_id)
        if not user:
            raise NotFoundError("user", user_id)

        pending = sum((p.amount for p in self.get_pending_requests(user_id)), Decimal("0"))
        available = user.balance - pending
        if numeric_amount > available:
            self.logger.warning(
                "withdrawal_rejected",
                user_id=user_id,
                amount=str(numeric_amount),
                available=str(available),
            )
            return False

        method = next((m for m in user.payment_methods if m.type == method_type), None)
        if method is None:
            method = PaymentMethod(type=method_type)

        self.request_payout(user_id, numeric_amount, method, token=token)
        return True

    # ==================== STATUS ====================

    def update_payment_status(
        self,
        payment_id: str,
        status: PaymentStatus | str,
        notes: str = "",
    ) -> Payment:
        """Update a payout request's status.

        ``processed_at`` is set when moving to completed and left unchanged
        otherwise. Empty ``notes`` keep the previous notes. A payout request
        completed for the first time is debited from the user's balance.

        Raises:
            NotFoundError: If the payment does not exist
        """
        status = PaymentStatus(status)
        payments = self._load()
        payment = next((p for p in payments if p.id == payment_id), None)

        if not payment:
            raise NotFoundError("payment request", payment_id)

        now = self.clock()
        first_completion = status == PaymentStatus.COMPLETED and payment.processed_at is None
        payment.status = status
        payment.notes = notes or payment.notes
        payment.updated_at = now
        if status == PaymentStatus.COMPLETED:
            payment.processed_at = now
        self._save(payments)

        if first_completion and payment.type == PAYOUT_REQUEST:
            self._debit_balance(payment)

        self.logger.info("payment_status_updated", payment_id=payment_id, status=status.value)
        return payment

    def _debit_balance(self, payment: Payment) -> None:
        """Take a paid-out amount off the user's balance and record the debit."""
        user = self.auth.get_user_by_id(payment.user_id)
        if not user:
            self.logger.warning("payout_user_missing", payment_id=payment.id, user_id=payment.user_id)
            return

        # Balance never goes negative; direct payout requests are not checked against it
        new_balance = max(user.balance - payment.amount, Decimal("0"))
        self.auth.update_user(user.id, balance=new_balance)
        self.transactions.create_transaction(
            user_id=user.id,
            amount=-payment.amount,
            type="payout",
            description=payment.description,
            reference=payment.reference,
            status=PaymentStatus.COMPLETED,
        )

        self.logger.info(
            "balance_debited",
            user_id=user.id,
            payment_id=payment.id,
            amount=str(payment.amount),
            balance_after=str(new_balance),
        )

    def mark_as_paid(self, payment_id: str, notes: str = "") -> Payment:
        return self.update_payment_status(payment_id, PaymentStatus.COMPLETED, notes)

    def mark_as_failed(self, payment_id: str, reason: str = "") -> Payment:
        return self.update_payment_status(payment_id, PaymentStatus.FAILED, reason)

    # ==================== QUERIES ====================

    def get_payment(self, payment_id: str) -> Payment | None:
        return next((p for p in self._load() if p.id == payment_id), None)

    def get_user_payments(self, user_id: str) -> list[Payment]:
        """User's payments, newest first."""
        payments = [p for p in self._load() if p.user_id == user_id]
        return sorted(payments, key=lambda p: p.created_at, reverse=True)

    def get_total_earnings(self, user_id: str) -> Decimal:
        """Sum of the user's completed payments."""
        return sum(
            (p.amount for p in self.get_user_payments(user_id) if p.status == PaymentStatus.COMPLETED),
            Decimal("0"),
        )

    def get_pending_requests(self, user_id: str) -> list[Payment]:
        """Pending payout requests, newest first."""
        return [
            p for p in self.get_user_payments(user_id)
            if p.status == PaymentStatus.PENDING and p.type == PAYOUT_REQUEST
        ]

    def get_monthly_earnings(self, user_id: str, days: int | None = None) -> Decimal:
        """Completed amounts processed within the last ``days`` days."""
        days = settings.monthly_window_days if days is None else days
        since = self.clock() - timedelta(days=days)

        total = Decimal("0")
        for payment in self.get_user_payments(user_id):
            if payment.status != PaymentStatus.COMPLETED:
                continue
            if (payment.processed_at or payment.created_at) >= since:
                total += payment.amount
        return total

    def get_next_payout(self, user_id: str) -> NextPayout | None:
        """Pending payout total, dated from the oldest pending request.

        Returns:
            NextPayout, or None if nothing is pending
        """
        pending = self.get_pending_requests(user_id)
        if not pending:
            return None

        oldest = min(p.created_at for p in pending)
        return NextPayout(
            amount=sum((p.amount for p in pending), Decimal("0")),
            date=oldest + timedelta(days=settings.payout_processing_days),
            count=len(pending),
        )

    # ==================== DEMO DATA ====================

    def generate_test_payments(
        self,
        user_id: str,
        count: int = 5,
        rng: random.Random | None = None,
    ) -> list[Payment]:
        """Append synthetic payout requests for demos.

        Row ``i`` gets status completed, pending, then failed for every
        later row. Completed rows are processed one day after creation.

        Args:
            user_id: Owner of the generated rows
            count: Number of rows
            rng: Random source (seed it for reproducible data)

        Returns:
            Generated payments
        """
        rng = rng or random.Random()
        now = self.clock()

        generated = []
        for i in range(count):
            status = TEST_STATUSES[min(i, len(TEST_STATUSES) - 1)]
            amount = Decimal(str(rng.random() * 1000 + 50)).quantize(CENT, rounding=ROUND_HALF_UP)
            created_at = now - timedelta(days=rng.randrange(30))
            method = PaymentMethod(**rng.choice(TEST_PAYMENT_METHODS), account_name="John Doe")

            processed_at: datetime | None = None
            if status == PaymentStatus.COMPLETED:
                processed_at = min(created_at + timedelta(days=1), now)

            generated.append(Payment(
                id=generate_id("test_"),
                user_id=user_id,
                amount=amount,
                status=status,
                payment_method=method,
                description=f"Payment request #{i + 1}",
                reference=generate_payout_reference(),
                created_at=created_at,
                updated_at=now,
                processed_at=processed_at,
            ))

        self._save(self._load() + generated)

        self.logger.info("test_payments_generated", user_id=user_id, count=count)
        return generated
