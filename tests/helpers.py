"""Test data builders shared across suites."""

from src.domain.security import PasswordHasher
from src.domain.user import User, UserRole, UserStatus, utcnow

STRONG_PASSWORD = "Abcdef1!"
TEST_SECRET = "test-secret"


def make_user(
    hasher: PasswordHasher,
    *,
    user_id: str = "user-1",
    email: str = "jo@example.com",
    password: str = STRONG_PASSWORD,
    role: UserRole = UserRole.STUDENT,
    verified: bool = False,
    verification_token: str | None = "verify-token",
) -> User:
    """Build a user record as registration would have stored it."""
    now = utcnow()
    return User(
        id=user_id,
        email=email,
        first_name="Jo",
        last_name="Do",
        role=role,
        hashed_password=hasher.hash(password),
        status=UserStatus.ACTIVE if verified else UserStatus.PENDING,
        email_verified=verified,
        email_verification_token=verification_token,
        created_at=now,
        updated_at=now,
    )
