"""Phluowise referral and payout service layer."""

__version__ = "0.1.0"
