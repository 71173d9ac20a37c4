"""Referral tracking.

A user's referral code is handed out in a signup link. Signing up with the
code creates a pending referral; completing it credits the referrer's bonus.
"""

from phluowise.referral.models import Referral, ReferralStats, ReferralStatus
from phluowise.referral.service import ReferralService

__all__ = ["Referral", "ReferralStats", "ReferralStatus", "ReferralService"]
