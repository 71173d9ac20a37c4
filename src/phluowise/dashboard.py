"""Per-user dashboard figures."""

from decimal import Decimal

from pydantic import BaseModel

from phluowise.auth.models import User
from phluowise.payments.models import NextPayout
from phluowise.payments.service import PaymentService
from phluowise.referral.models import ReferralStats
from phluowise.referral.service import ReferralService


class DashboardSummary(BaseModel):
    """Earnings and referral figures shown for a user."""
    user_id: str
    balance: Decimal
    total_earnings: Decimal
    monthly_earnings: Decimal
    referrals: ReferralStats
    next_payout: NextPayout | None = None
    referral_link: str | None = None


def build_dashboard(
    user: User,
    payments: PaymentService,
    referrals: ReferralService,
) -> DashboardSummary:
    """Collect the dashboard figures for ``user``."""
    return DashboardSummary(
        user_id=user.id,
        balance=user.balance,
        total_earnings=payments.get_total_earnings(user.id),
        monthly_earnings=payments.get_monthly_earnings(user.id),
        referrals=referrals.get_referral_stats(user.id),
        next_payout=payments.get_next_payout(user.id),
        referral_link=referrals.generate_referral_link(user.id),
    )
