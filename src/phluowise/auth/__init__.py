"""Authentication: user accounts, password login and sessions."""

from phluowise.auth.models import PaymentMethod, Session, User, UserStatus, UserUpdate
from phluowise.auth.service import AuthService

__all__ = [
    "AuthService",
    "PaymentMethod",
    "Session",
    "User",
    "UserStatus",
    "UserUpdate",
]
