"""Errors raised by the Phluowise services."""

from typing import Any


class PhluowiseError(Exception):
    """Base class for service errors."""
    pass


class StorageError(PhluowiseError):
    """A stored collection could not be decoded."""
    pass


class DuplicateEmailError(PhluowiseError):
    """Raised when an email is already registered."""

    def __init__(self, email: str):
        self.email = email
        super().__init__("Email already registered")


class InvalidCredentialsError(PhluowiseError):
    """Raised when login fails."""

    def __init__(self):
        super().__init__("Invalid email or password")


class NotAuthenticatedError(PhluowiseError):
    """Raised when an operation needs a logged-in user."""

    def __init__(self):
        super().__init__("User not authenticated")


class NotFoundError(PhluowiseError):
    """Raised when a record id does not exist in its collection."""

    def __init__(self, entity: str, entity_id: str):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity.capitalize()} not found: {entity_id}")


class AlreadyMemberError(PhluowiseError):
    """Raised when adding a user that is already in the team."""

    def __init__(self, team_id: str, user_id: str):
        self.team_id = team_id
        self.user_id = user_id
        super().__init__("User is already a member of this team")


class InvalidAmountError(PhluowiseError):
    """Raised for non-numeric, non-finite or non-positive amounts."""

    def __init__(self, value: Any):
        self.value = value
        super().__init__(f"Invalid payment amount: {value!r}")
