"""
Console email sender adapter - Implements EmailSender protocol.

This module provides a console-based implementation of the domain's
email sender port, logging verification and reset links to stdout for
development. Links point at the frontend, which forwards the token to
the API.
"""

import logging

logger = logging.getLogger(__name__)


class ConsoleEmailSender:
    """
    Implements EmailSender protocol via console logging.

    Uses structural subtyping - no explicit inheritance from Protocol.
    For demo/development purposes - prints tokens and links to stdout.
    """

    def __init__(self, frontend_url: str = "http://localhost:3001") -> None:
        self._frontend_url = frontend_url.rstrip("/")

    def verification_url(self, token: str) -> str:
        return f"{self._frontend_url}/auth/verify-email?token={token}"

    def password_reset_url(self, token: str) -> str:
        return f"{self._frontend_url}/auth/reset-password?token={token}"

    def send_verification_email(self, email: str, token: str, first_name: str) -> None:
        """
        Log the verification link (simulates email delivery).

        The link is logged at INFO level to be visible in container logs.

        Args:
            email: Recipient email address (normalized by domain layer)
            token: Email verification token
            first_name: Recipient's first name for the greeting
        """
        logger.info(
            "[VERIFICATION] Email: %s Name: %s Link: %s",
            email,
            first_name,
            self.verification_url(token),
        )

    def send_password_reset_email(self, email: str, token: str, first_name: str) -> None:
        logger.info(
            "[PASSWORD RESET] Email: %s Name: %s Link: %s",
            email,
            first_name,
            self.password_reset_url(token),
        )

    def send_welcome_email(self, email: str, first_name: str) -> None:
        logger.info("[WELCOME] Email: %s Name: %s", email, first_name)
