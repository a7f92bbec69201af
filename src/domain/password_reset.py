"""
Password reset domain service.

A reset token is valid only while now < password_reset_expires. Using a
token clears it, so each one works at most once.
"""

import logging
from dataclasses import dataclass, field
from datetime import timedelta

from .exceptions import DomainError, NotificationError
from .password_policy import check_password
from .ports import EmailSender, UserRepository
from .registration import normalize_email
from .security import PasswordHasher, generate_token
from .user import utcnow

logger = logging.getLogger(__name__)

RESET_REQUESTED_MESSAGE = "If an account exists for this email, a password reset link has been sent."
RESET_COMPLETED_MESSAGE = "Password has been reset successfully."


@dataclass
class PasswordResetService:
    repository: UserRepository
    email_sender: EmailSender
    hasher: PasswordHasher = field(default_factory=PasswordHasher)
    reset_ttl: timedelta = timedelta(minutes=60)

    def request_reset(self, email: str) -> None:
        """
        Issue a reset token and email it.

        Unknown emails are ignored silently so the caller cannot learn
        which addresses are registered.
        """
        user = self.repository.find_by_email(normalize_email(email))
        if user is None:
            logger.info("Password reset requested for unknown email")
            return

        token = generate_token()
        self.repository.update(
            user.id,
            {
                "password_reset_token": token,
                "password_reset_expires": utcnow() + self.reset_ttl,
            },
        )
        try:
            self.email_sender.send_password_reset_email(user.email, token, user.first_name)
        except NotificationError:
            # Same answer either way; the user can ask again
            logger.exception("Password reset email could not be sent for user %s", user.id)
            return
        logger.info("Password reset issued for user %s", user.id)

    def reset_password(self, token: str, new_password: str) -> None:
        """
        Replace the password behind an active reset token.

        Raises:
            DomainError(VALIDATION): Empty, unknown or expired token, or weak password
        """
        if not token:
            raise DomainError.validation("token", "Reset token is required")

        user = self.repository.find_by_password_reset_token(token)
        if user is None or not user.has_active_password_reset(utcnow()):
            raise DomainError.validation("token", "Reset token is invalid or has expired")

        check_password(new_password, field="newPassword")

        if not self.repository.complete_password_reset(user.id, token, self.hasher.hash(new_password)):
            # Token consumed by a concurrent reset
            raise DomainError.validation("token", "Reset token is invalid or has expired")
        logger.info("Password reset completed for user %s", user.id)
