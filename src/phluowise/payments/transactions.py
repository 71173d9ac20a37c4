"""Generic transaction records."""

from decimal import Decimal

from phluowise.core import Clock, generate_id, utcnow
from phluowise.logging_config import get_logger
from phluowise.payments.models import PaymentStatus, Transaction
from phluowise.storage.collections import Collection, Storage, get_storage

logger = get_logger(__name__)


class TransactionService:
    """Create and list a user's transactions."""

    def __init__(self, storage: Storage | None = None, clock: Clock = utcnow):
        self.storage = storage or get_storage()
        self.clock = clock
        self.logger = get_logger(__name__)

    def create_transaction(
        self,
        user_id: str,
        amount: Decimal | float | str,
        type: str,
        description: str | None = None,
        reference: str | None = None,
        status: PaymentStatus = PaymentStatus.PENDING,
    ) -> Transaction:
        """Record a transaction, pending unless told otherwise.

        Args:
            user_id: Owner (not validated)
            amount: Signed amount
            type: Transaction type, e.g. ``credit`` or ``debit``
            description: Optional description
            reference: Optional external reference
            status: Initial status

        Returns:
            Created transaction
        """
        now = self.clock()
        transaction = Transaction(
            id=generate_id(),
            user_id=user_id,
            amount=amount,
            type=type,
            description=description,
            reference=reference,
            status=status,
            created_at=now,
            updated_at=now,
        )

        transactions = self.storage.load_models(Collection.TRANSACTIONS, Transaction)
        transactions.append(transaction)
        self.storage.save_models(Collection.TRANSACTIONS, transactions)

        self.logger.info("transaction_created", transaction_id=transaction.id, user_id=user_id, type=type)
        return transaction

    def get_user_transactions(self, user_id: str) -> list[Transaction]:
        """User's transactions in insertion order."""
        return [
            t for t in self.storage.load_models(Collection.TRANSACTIONS, Transaction)
            if t.user_id == user_id
        ]
