"""Local authentication service (email/password) with stored sessions."""

from datetime import timedelta
from typing import Any

from passlib.context import CryptContext

from phluowise.auth.models import Session, User, UserUpdate
from phluowise.core import Clock, generate_id, generate_referral_code, generate_token, utcnow
from phluowise.errors import DuplicateEmailError, InvalidCredentialsError
from phluowise.logging_config import get_logger
from phluowise.settings import settings
from phluowise.storage.collections import Collection, Storage, get_storage

logger = get_logger(__name__)

# Password hashing
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

# Attempts at drawing a referral code not held by another user
REFERRAL_CODE_ATTEMPTS = 10


class AuthService:
    """Registration, login and session lookup."""

    def __init__(self, storage: Storage | None = None, clock: Clock = utcnow):
        """Initialize auth service.

        Args:
            storage: Collection storage (defaults to the process storage)
            clock: Time source
        """
        self.storage = storage or get_storage()
        self.clock = clock
        self.logger = get_logger(__name__)

    # ==================== PASSWORD ====================

    def hash_password(self, password: str) -> str:
        return pwd_context.hash(password)

    def verify_password(self, password: str, hashed: str) -> bool:
        return pwd_context.verify(password, hashed)

    # ==================== USERS ====================

    def _load_users(self) -> list[User]:
        return self.storage.load_models(Collection.USERS, User)

    def _save_users(self, users: list[User]) -> None:
        self.storage.save_models(Collection.USERS, users)

    def _new_referral_code(self, users: list[User]) -> str:
        """Draw a referral code, retrying on collision with an existing one."""
        taken = {user.referral_code for user in users}
        code = generate_referral_code(settings.referral_code_length)
        attempts = 0
        while code in taken and attempts < REFERRAL_CODE_ATTEMPTS:
            code = generate_referral_code(settings.referral_code_length)
            attempts += 1

        if code in taken:
            self.logger.warning("referral_code_collision", code=code)
        return code

    def register(
        self,
        email: str,
        password: str,
        first_name: str | None = None,
        last_name: str | None = None,
        phone: str | None = None,
        referral_code: str | None = None,
    ) -> User:
        """Register a new user.

        Args:
            email: User email (unique, case-insensitive)
            password: Plain password, stored hashed
            first_name: Optional first name
            last_name: Optional last name
            phone: Optional phone number
            referral_code: Code of the user who referred this one

        Returns:
            Created user

        Raises:
            DuplicateEmailError: If email already exists
        """
        email = email.strip().lower()
        users = self._load_users()

        if any(user.email == email for user in users):
            self.logger.info("registration_rejected", email=email, reason="duplicate_email")
            raise DuplicateEmailError(email)

        now = self.clock()
        user = User(
            id=generate_id(),
            email=email,
            password_hash=self.hash_password(password),
            first_name=first_name,
            last_name=last_name,
            phone=phone,
            referral_code=self._new_referral_code(users),
            created_at=now,
            updated_at=now,
        )

        # Referral processing writes the referrer, so users are reloaded after it
        if referral_code:
            from phluowise.referral.service import ReferralService

            referral = ReferralService(self.storage, clock=self.clock).process_referral_signup(
                referral_code, user
            )
            if referral:
                user.referred_by = referral.user_id
            users = self._load_users()

        users.append(user)
        self._save_users(users)

        self.logger.info("user_registered", user_id=user.id, email=email, referred_by=user.referred_by)
        return user

    def get_user_by_id(self, user_id: str) -> User | None:
        return next((u for u in self._load_users() if u.id == user_id), None)

    def get_user_by_email(self, email: str) -> User | None:
        email = email.strip().lower()
        return next((u for u in self._load_users() if u.email == email), None)

    def get_user_by_referral_code(self, code: str) -> User | None:
        code = code.strip().upper()
        return next((u for u in self._load_users() if u.referral_code == code), None)

    def update_user(self, user_id: str, **changes: Any) -> bool:
        """Update stored user fields.

        Args:
            user_id: User ID
            **changes: Fields accepted by ``UserUpdate``

        Returns:
            True if updated, False if the user does not exist

        Raises:
            pydantic.ValidationError: On unknown fields or bad values
            DuplicateEmailError: If the new email belongs to another user
        """
        update = UserUpdate(**changes)
        users = self._load_users()

        index = next((i for i, u in enumerate(users) if u.id == user_id), None)
        if index is None:
            return False

        fields = {
            name: getattr(update, name)
            for name in update.model_fields_set
            if getattr(update, name) is not None
        }
        if "email" in fields:
            fields["email"] = fields["email"].strip().lower()
            if any(u.email == fields["email"] and u.id != user_id for u in users):
                raise DuplicateEmailError(fields["email"])

        fields["updated_at"] = self.clock()
        users[index] = users[index].model_copy(update=fields)
        self._save_users(users)

        self.logger.info("user_updated", user_id=user_id, fields=sorted(fields))
        return True

    def change_password(self, user_id: str, old_password: str, new_password: str) -> bool:
        """Change user password.

        Returns:
            True if changed successfully
        """
        users = self._load_users()
        user = next((u for u in users if u.id == user_id), None)

        if not user or not self.verify_password(old_password, user.password_hash):
            return False

        user.password_hash = self.hash_password(new_password)
        user.updated_at = self.clock()
        self._save_users(users)

        self.logger.info("password_changed", user_id=user_id)
        return True

    # ==================== SESSIONS ====================

    def _load_sessions(self) -> list[Session]:
        return self.storage.load_models(Collection.SESSIONS, Session)

    def login(self, email: str, password: str) -> tuple[User, Session]:
        """Authenticate a user and open a session.

        The session token becomes the current token in storage.

        Args:
            email: User email
            password: Plain password

        Returns:
            Tuple of (user, session)

        Raises:
            InvalidCredentialsError: On unknown email or wrong password
        """
        email = email.strip().lower()
        users = self._load_users()
        user = next((u for u in users if u.email == email), None)

        if not user or not self.verify_password(password, user.password_hash):
            self.logger.info("login_failed", email=email)
            raise InvalidCredentialsError()

        now = self.clock()
        session = Session(
            id=generate_id(),
            user_id=user.id,
            token=generate_token(),
            expires_at=now + timedelta(days=settings.session_ttl_days),
            created_at=now,
        )

        sessions = self._load_sessions()
        sessions.append(session)
        self.storage.save_models(Collection.SESSIONS, sessions)
        self.storage.set_current_token(session.token)

        # Update last login
        user.last_login = now
        self._save_users(users)

        self.logger.info("user_logged_in", user_id=user.id, session_id=session.id)
        return user, session

    def get_session(self, token: str) -> Session | None:
        """Find a session by token, expired or not."""
        return next((s for s in self._load_sessions() if s.token == token), None)

    def get_current_user(self, token: str | None = None) -> User | None:
        """Resolve the user behind a session token.

        Args:
            token: Session token; the stored current token when omitted

        Returns:
            User, or None if there is no valid session. An expired session
            is left in place; only the current-token pointer is cleared.
        """
        current = self.storage.current_token
        token = token or current
        if not token:
            return None

        session = self.get_session(token)
        if not session or session.is_expired(self.clock()):
            if token == current:
                self.storage.clear_current_token()
            self.logger.debug("session_invalid", found=session is not None)
            return None

        return self.get_user_by_id(session.user_id)

    def is_authenticated(self, token: str | None = None) -> bool:
        return self.get_current_user(token) is not None

    def logout(self, token: str | None = None) -> None:
        """Remove the session for ``token`` (default: current) and clear the pointer."""
        current = self.storage.current_token
        token = token or current

        if token:
            sessions = [s for s in self._load_sessions() if s.token != token]
            self.storage.save_models(Collection.SESSIONS, sessions)
            self.logger.info("user_logged_out")

        if token == current:
            self.storage.clear_current_token()
