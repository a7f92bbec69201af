"""
Authentication domain service - password login and session issuance.

Login checks run in a fixed order: user lookup, password, then the
email-verification gate. A session token is issued only when all pass.
"""

import logging
from dataclasses import dataclass, field

from .exceptions import DomainError, ErrorKind
from .ports import TokenIssuer, UserRepository
from .registration import normalize_email
from .security import PasswordHasher
from .user import User, utcnow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoginResult:
    access_token: str
    user: User
    expires_in: str


@dataclass
class AuthenticationService:
    """Domain service for credential login."""

    repository: UserRepository
    token_issuer: TokenIssuer
    hasher: PasswordHasher = field(default_factory=PasswordHasher)

    def login(self, email: str, password: str) -> LoginResult:
        """
        Authenticate with email and password.

        Returns:
            LoginResult with a signed session token whose subject is the user id

        Raises:
            DomainError(NOT_FOUND): No user with this email
            DomainError(INVALID_CREDENTIALS): Wrong password
            DomainError(EMAIL_NOT_VERIFIED): Correct password, unverified email
        """
        normalized_email = normalize_email(email)
        user = self.repository.find_by_email(normalized_email)
        if user is None:
            raise DomainError.not_found(f"User with email {normalized_email}")

        if not self.hasher.verify(password, user.hashed_password):
            logger.info("Rejected login for user %s: invalid password", user.id)
            raise DomainError.invalid_credentials()

        if not user.email_verified:
            logger.info("Rejected login for user %s: email not verified", user.id)
            raise DomainError.email_not_verified()

        access_token = self.token_issuer.issue(user)
        self.repository.update(user.id, {"last_login_at": utcnow()})
        logger.info("User %s logged in", user.id)

        return LoginResult(
            access_token=access_token,
            user=user,
            expires_in=self.token_issuer.expires_label,
        )

    def refresh(self, refresh_token: str) -> LoginResult:
        """Exchange a refresh token for a new session. Not supported yet."""
        raise DomainError(
            ErrorKind.NOT_IMPLEMENTED,
            "Refresh token functionality not implemented yet",
        )
