"""Payout requests, transactions and earnings aggregates."""

from phluowise.payments.models import NextPayout, Payment, PaymentStatus, Transaction
from phluowise.payments.service import PaymentService, parse_amount
from phluowise.payments.transactions import TransactionService

__all__ = [
    "NextPayout",
    "Payment",
    "PaymentService",
    "PaymentStatus",
    "Transaction",
    "TransactionService",
    "parse_amount",
]
