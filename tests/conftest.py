"""Pytest configuration and shared fixtures for all tests."""

from datetime import datetime, timedelta, timezone

import pytest

from phluowise.auth.service import AuthService
from phluowise.payments.service import PaymentService
from phluowise.payments.transactions import TransactionService
from phluowise.referral.service import ReferralService
from phluowise.storage.backends import MemoryBackend
from phluowise.storage.collections import Storage
from phluowise.teams.service import TeamService

PASSWORD = "correct-horse-battery"


class FrozenClock:
    """Clock that only moves when told to."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    """Clock fixed at 2026-10-01 12:00 UTC."""
    return FrozenClock(datetime(2026, 10, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def storage():
    """Initialized storage over an in-memory backend."""
    storage = Storage(MemoryBackend(), prefix="phluowise_")
    storage.initialize()
    return storage


@pytest.fixture
def auth(storage, clock):
    return AuthService(storage, clock=clock)


@pytest.fixture
def referrals(storage, clock):
    return ReferralService(storage, clock=clock)


@pytest.fixture
def teams(storage, clock):
    return TeamService(storage, clock=clock)


@pytest.fixture
def transactions(storage, clock):
    return TransactionService(storage, clock=clock)


@pytest.fixture
def payments(storage, auth, clock):
    return PaymentService(storage, auth, clock=clock)


@pytest.fixture
def user(auth):
    """Registered user, not logged in."""
    return auth.register(
        email="ada@example.com",
        password=PASSWORD,
        first_name="Ada",
        last_name="Lovelace",
    )


@pytest.fixture
def logged_in_user(auth, user):
    """Registered user with an active current session."""
    auth.login(user.email, PASSWORD)
    return user
