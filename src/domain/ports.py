"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the interfaces (ports) that the domain requires
from infrastructure. Adapters implement these protocols.
"""

from enum import Enum
from typing import Any, Protocol

from .user import User, UserRole


class RegistrationOutcome(Enum):
    """Result variants of a successful registration."""

    REGISTERED = "registered"
    REGISTERED_NOTIFICATION_FAILED = "registered_notification_failed"


class VerifyEmailResult(Enum):
    """Result variants of a successful email verification."""

    VERIFIED = "verified"
    ALREADY_VERIFIED = "already_verified"


class UserRepository(Protocol):
    """
    Port interface for user persistence.

    Lookups are read-only. Every mutator advances updated_at.
    Any method may raise DomainError(STORAGE) when the backend is down.
    """

    def find_by_id(self, user_id: str) -> User | None: ...

    def find_by_email(self, email: str) -> User | None:
        """Look up by normalized (lowercase) email."""
        ...

    def create(self, user: User) -> User:
        """
        Persist a new user.

        Raises:
            DomainError(CONFLICT): If the email is already stored. The
                store is the authority on uniqueness, whatever the caller
                checked beforehand.
        """
        ...

    def update(self, user_id: str, fields: dict[str, Any]) -> User | None:
        """Write the given fields; returns None if the user does not exist."""
        ...

    def delete(self, user_id: str) -> bool: ...

    def find_all(self, filters: dict[str, Any] | None = None) -> list[User]:
        """Return users whose attributes equal every value in filters."""
        ...

    def find_by_role(self, role: UserRole) -> list[User]: ...

    def find_by_email_verification_token(self, token: str) -> User | None: ...

    def find_by_password_reset_token(self, token: str) -> User | None: ...

    def update_password(self, user_id: str, hashed_password: str) -> bool: ...

    def verify_email(self, user_id: str) -> bool:
        """
        Mark the email as verified.

        Sets email_verified and moves a PENDING status to ACTIVE, only if
        the email is not verified yet. Returns True only for the call that
        made the change, so concurrent callers see exactly one True.
        """
        ...

    def complete_password_reset(self, user_id: str, token: str, hashed_password: str) -> bool:
        """
        Store a new password hash and clear the reset token.

        Applies only while token is still the user's reset token, so a
        token is consumed at most once. Returns whether the write happened.
        """
        ...

    def update_refresh_token(self, user_id: str, token: str | None) -> bool: ...

    def ping(self) -> None:
        """Raise DomainError(STORAGE) if the backend is unreachable."""
        ...


class EmailSender(Protocol):
    """
    Port interface for email delivery.

    Implementations raise NotificationError when a message cannot be sent.
    """

    def send_verification_email(self, email: str, token: str, first_name: str) -> None: ...

    def send_password_reset_email(self, email: str, token: str, first_name: str) -> None: ...

    def send_welcome_email(self, email: str, first_name: str) -> None: ...


class TokenIssuer(Protocol):
    """Port interface for signed session tokens."""

    expires_label: str

    def issue(self, user: User) -> str:
        """Sign a session token whose subject is the user id."""
        ...

    def decode(self, token: str) -> dict[str, Any]:
        """
        Verify a session token and return its claims.

        Raises:
            DomainError(UNAUTHORIZED): Bad signature, malformed or expired
        """
        ...
