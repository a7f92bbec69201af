"""
User entity - the central record of the platform.

Invariants:
- email is stored lowercase and is unique across users
- a user starts PENDING with email_verified False
- hashed_password is a bcrypt digest, never the plaintext
- updated_at strictly advances on every mutation
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from enum import Enum


class UserRole(str, Enum):
    """Roles a platform user can hold."""

    STUDENT = "student"
    TEACHER = "teacher"
    ADMIN = "admin"


class UserStatus(str, Enum):
    """
    Account lifecycle stages.

    State Transitions:
    - PENDING -> ACTIVE (email verification)
    - any -> INACTIVE / SUSPENDED (profile update, written as a raw field)
    """

    PENDING = "pending"
    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def next_timestamp(previous: datetime | None) -> datetime:
    """Current time, bumped past previous so updated_at never stalls."""
    now = utcnow()
    if previous is not None and now <= previous:
        return previous + timedelta(microseconds=1)
    return now


@dataclass
class User:
    id: str
    email: str
    first_name: str
    last_name: str
    role: UserRole
    hashed_password: str
    status: UserStatus = UserStatus.PENDING
    email_verified: bool = False
    phone: str | None = None
    bio: str | None = None
    avatar: str | None = None
    date_of_birth: date | None = None
    address: str | None = None
    refresh_token: str | None = None
    email_verification_token: str | None = None
    email_verification_expires: datetime | None = None
    password_reset_token: str | None = None
    password_reset_expires: datetime | None = None
    last_login_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def has_active_password_reset(self, now: datetime) -> bool:
        """A reset token counts only while now < password_reset_expires."""
        return (
            self.password_reset_token is not None
            and self.password_reset_expires is not None
            and now < self.password_reset_expires
        )

    def verification_expired(self, now: datetime) -> bool:
        # Records without an expiry never expire
        return self.email_verification_expires is not None and now >= self.email_verification_expires


# Attributes callers may pass to UserRepository.update()
MUTABLE_FIELDS = frozenset(
    {
        "email",
        "first_name",
        "last_name",
        "role",
        "hashed_password",
        "status",
        "email_verified",
        "phone",
        "bio",
        "avatar",
        "date_of_birth",
        "address",
        "refresh_token",
        "email_verification_token",
        "email_verification_expires",
        "password_reset_token",
        "password_reset_expires",
        "last_login_at",
    }
)
