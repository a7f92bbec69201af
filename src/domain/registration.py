"""
Registration domain service - sign-up and email verification.

This module contains the business logic that takes a new user from
sign-up to a verified account.

Verification Lifecycle
======================

States:
- PENDING (email_verified False): created by register()
- ACTIVE (email_verified True): reached through verify_email()

Transitions:
    PENDING -> ACTIVE   (known, unexpired verification token)

Verification is idempotent: replaying a token that already verified its
user succeeds again without touching the record or re-sending the
welcome email. The token stays on the record for that reason and is
ignored once email_verified is True.

Email uniqueness is checked up front for a clean error, but the
repository's unique constraint is what decides a race between two
concurrent sign-ups for the same address.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from .exceptions import DomainError, NotificationError
from .password_policy import check_password
from .ports import EmailSender, RegistrationOutcome, UserRepository, VerifyEmailResult
from .security import PasswordHasher, generate_token, new_id
from .user import User, UserRole, UserStatus, utcnow

logger = logging.getLogger(__name__)

REGISTERED_MESSAGE = "Registration successful. Please check your email to verify your account."
NOTIFICATION_FAILED_MESSAGE = (
    "Registration successful, but verification email could not be sent. "
    "Please contact support."
)
VERIFIED_MESSAGE = "Email verified successfully! Your account is now active and you can log in."
ALREADY_VERIFIED_MESSAGE = "Email is already verified. You can now log in."


@dataclass(frozen=True)
class RegistrationResult:
    outcome: RegistrationOutcome
    user_id: str

    @property
    def message(self) -> str:
        if self.outcome is RegistrationOutcome.REGISTERED_NOTIFICATION_FAILED:
            return NOTIFICATION_FAILED_MESSAGE
        return REGISTERED_MESSAGE


def normalize_email(email: str) -> str:
    """
    Normalize email address for consistent storage and lookup.

    Applies: strip whitespace + lowercase
    """
    return email.strip().lower()


def create_pending_user(
    repository: UserRepository,
    hasher: PasswordHasher,
    *,
    email: str,
    password: str,
    first_name: str,
    last_name: str,
    role: UserRole,
    phone: str | None = None,
    bio: str | None = None,
    verification_token: str | None = None,
    verification_expires: datetime | None = None,
) -> User:
    """
    Validate, hash and persist a new PENDING user.

    Shared by self-service registration and direct user creation.

    Raises:
        DomainError(CONFLICT): Email already registered
        DomainError(VALIDATION): Password fails the policy
    """
    email = normalize_email(email)
    if repository.find_by_email(email) is not None:
        raise DomainError.conflict(email)

    check_password(password)

    now = utcnow()
    user = User(
        id=new_id(),
        email=email,
        first_name=first_name,
        last_name=last_name,
        role=role,
        hashed_password=hasher.hash(password),
        status=UserStatus.PENDING,
        email_verified=False,
        phone=phone,
        bio=bio,
        email_verification_token=verification_token,
        email_verification_expires=verification_expires,
        created_at=now,
        updated_at=now,
    )
    return repository.create(user)


@dataclass
class RegistrationService:
    """
    Domain service for user registration.

    Orchestrates the registration flow: existence check, password policy,
    hashing, token generation, persistence and notification.
    """

    repository: UserRepository
    email_sender: EmailSender
    hasher: PasswordHasher = field(default_factory=PasswordHasher)
    verification_ttl: timedelta = timedelta(hours=24)

    def register(
        self,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        role: UserRole,
        phone: str | None = None,
        bio: str | None = None,
    ) -> RegistrationResult:
        """
        Register a new user and send the verification email.

        A failed verification email does not undo the registration; the
        result then carries REGISTERED_NOTIFICATION_FAILED.

        Returns:
            RegistrationResult with the new user's id

        Raises:
            DomainError(CONFLICT): Email already registered
            DomainError(VALIDATION): Password fails the policy
            DomainError(STORAGE): Repository unavailable
        """
        token = generate_token()
        user = create_pending_user(
            self.repository,
            self.hasher,
            email=email,
            password=password,
            first_name=first_name,
            last_name=last_name,
            role=role,
            phone=phone,
            bio=bio,
            verification_token=token,
            verification_expires=utcnow() + self.verification_ttl,
        )
        logger.info("Registered user %s", user.id)

        try:
            self.email_sender.send_verification_email(user.email, token, user.first_name)
        except NotificationError:
            logger.exception("Verification email could not be sent for user %s", user.id)
            return RegistrationResult(RegistrationOutcome.REGISTERED_NOTIFICATION_FAILED, user.id)

        return RegistrationResult(RegistrationOutcome.REGISTERED, user.id)

    def verify_email(self, token: str) -> VerifyEmailResult:
        """
        Mark the email behind a verification token as verified.

        Returns:
            VERIFIED on the first successful call, ALREADY_VERIFIED after

        Raises:
            DomainError(VALIDATION): Empty or expired token
            DomainError(NOT_FOUND): Unknown token
        """
        if not token:
            raise DomainError.validation("token", "Verification token is required")

        user = self.repository.find_by_email_verification_token(token)
        if user is None:
            raise DomainError.not_found("User with this verification token")

        if user.email_verified:
            return VerifyEmailResult.ALREADY_VERIFIED

        if user.verification_expired(utcnow()):
            raise DomainError.validation("token", "Verification token has expired")

        if not self.repository.verify_email(user.id):
            # Another call verified first, or the user was deleted meanwhile
            if self.repository.find_by_id(user.id) is None:
                raise DomainError.not_found(f"User with ID {user.id}")
            return VerifyEmailResult.ALREADY_VERIFIED
        logger.info("Verified email for user %s", user.id)

        try:
            self.email_sender.send_welcome_email(user.email, user.first_name)
        except Exception:
            logger.exception("Failed to send welcome email to user %s", user.id)

        return VerifyEmailResult.VERIFIED
