"""Referral service for managing referrals and referral bonuses."""

from decimal import Decimal
from urllib.parse import urlencode

from phluowise.auth.models import User
from phluowise.auth.service import AuthService
from phluowise.core import Clock, generate_id, utcnow
from phluowise.errors import NotFoundError
from phluowise.logging_config import get_logger
from phluowise.referral.models import Referral, ReferralStats, ReferralStatus
from phluowise.settings import settings
from phluowise.storage.collections import Collection, Storage, get_storage

logger = get_logger(__name__)


class ReferralService:
    """Service for managing referrals."""

    def __init__(self, storage: Storage | None = None, clock: Clock = utcnow):
        """Initialize referral service."""
        self.storage = storage or get_storage()
        self.clock = clock
        self.logger = get_logger(__name__)

    def _load(self) -> list[Referral]:
        return self.storage.load_models(Collection.REFERRALS, Referral)

    def _save(self, referrals: list[Referral]) -> None:
        self.storage.save_models(Collection.REFERRALS, referrals)

    def create_referral(
        self,
        user_id: str,
        referee_id: str | None = None,
        referee_email: str | None = None,
        referee_name: str | None = None,
        bonus_amount: Decimal | None = None,
    ) -> Referral:
        """Create a pending referral.

        Args:
            user_id: Referrer's user ID (not validated)
            referee_id: ID of the referred user, if registered
            referee_email: Referred user's email
            referee_name: Referred user's display name
            bonus_amount: Bonus for the referrer (defaults to settings)

        Returns:
            Created referral
        """
        now = self.clock()
        referral = Referral(
            id=generate_id(),
            user_id=user_id,
            referee_id=referee_id,
            referee_email=referee_email,
            referee_name=referee_name,
            bonus_amount=settings.referral_bonus if bonus_amount is None else bonus_amount,
            created_at=now,
            updated_at=now,
        )

        referrals = self._load()
        referrals.append(referral)
        self._save(referrals)

        self.logger.info("referral_created", referral_id=referral.id, referrer_id=user_id)
        return referral

    def get_user_referrals(self, user_id: str) -> list[Referral]:
        """Referrals made by ``user_id``."""
        return [r for r in self._load() if r.user_id == user_id]

    def get_referral(self, referral_id: str) -> Referral | None:
        return next((r for r in self._load() if r.id == referral_id), None)

    def update_referral_status(self, referral_id: str, status: ReferralStatus | str) -> Referral:
        """Set a referral's status.

        Raises:
            NotFoundError: If the referral does not exist
        """
        status = ReferralStatus(status)
        referrals = self._load()
        referral = next((r for r in referrals if r.id == referral_id), None)

        if not referral:
            raise NotFoundError("referral", referral_id)

        referral.status = status
        referral.updated_at = self.clock()
        self._save(referrals)

        self.logger.info("referral_status_updated", referral_id=referral_id, status=status.value)
        return referral

    def complete_referral(self, referral_id: str) -> Referral:
        """Mark a referral completed and credit the referrer's bonus.

        The bonus is credited at most once per referral. A missing referrer
        account leaves the bonus uncredited.

        Raises:
            NotFoundError: If the referral does not exist
        """
        referral = self.update_referral_status(referral_id, ReferralStatus.COMPLETED)
        if referral.bonus_credited:
            return referral

        users = self.storage.load_models(Collection.USERS, User)
        referrer = next((u for u in users if u.id == referral.user_id), None)
        if not referrer:
            self.logger.warning("referrer_missing", referral_id=referral_id, referrer_id=referral.user_id)
            return referral

        bonus = referral.bonus_amount
        referrer.balance += bonus
        referrer.total_earned += bonus
        referrer.referral_earnings += bonus
        referrer.updated_at = self.clock()
        self.storage.save_models(Collection.USERS, users)

        referrals = self._load()
        for stored in referrals:
            if stored.id == referral_id:
                stored.bonus_credited = True
                referral = stored
        self._save(referrals)

        self.logger.info(
            "referral_bonus_credited",
            referral_id=referral_id,
            referrer_id=referrer.id,
            bonus=str(bonus),
        )
        return referral

    def process_referral_signup(self, code: str, new_user: User) -> Referral | None:
        """Record a signup made with a referral code.

        Creates a pending referral for the code's owner and bumps their
        referral count.

        Args:
            code: Referral code entered at signup
            new_user: The user being registered

        Returns:
            Referral record, or None if the code matches no user
        """
        auth = AuthService(self.storage, clock=self.clock)
        referrer = auth.get_user_by_referral_code(code)

        if not referrer:
            self.logger.warning("referral_code_unknown", code=code.strip().upper())
            return None

        auth.update_user(referrer.id, referral_count=referrer.referral_count + 1)

        return self.create_referral(
            user_id=referrer.id,
            referee_id=new_user.id,
            referee_email=new_user.email,
            referee_name=new_user.full_name or None,
        )

    def get_referral_stats(self, user_id: str) -> ReferralStats:
        """Get referral statistics for a user."""
        stats = ReferralStats()
        for referral in self.get_user_referrals(user_id):
            stats.total += 1
            if referral.status == ReferralStatus.COMPLETED:
                stats.completed += 1
                stats.total_earned += referral.bonus_amount
            elif referral.status == ReferralStatus.PENDING:
                stats.pending += 1
            else:
                stats.failed += 1
        return stats

    def generate_referral_link(self, user_id: str) -> str | None:
        """Signup link carrying the user's referral code, or None for unknown users."""
        users = self.storage.load_models(Collection.USERS, User)
        user = next((u for u in users if u.id == user_id), None)
        if not user:
            return None
        return f"{settings.referral_link_base}?{urlencode({'ref': user.referral_code})}"
