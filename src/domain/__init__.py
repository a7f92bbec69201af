"""
Domain layer - Pure business logic with zero framework imports.

This package contains the user registration, verification and
authentication workflows of the education platform. It defines its own
port interfaces for infrastructure abstraction, so storage, email and
session-token adapters plug in at wiring time.
"""

from .authentication import AuthenticationService, LoginResult
from .exceptions import DomainError, ErrorKind, NotificationError
from .password_reset import PasswordResetService
from .ports import (
    EmailSender,
    RegistrationOutcome,
    TokenIssuer,
    UserRepository,
    VerifyEmailResult,
)
from .registration import RegistrationResult, RegistrationService
from .security import PasswordHasher
from .user import User, UserRole, UserStatus
from .users import UserService

__all__ = [
    "AuthenticationService",
    "DomainError",
    "EmailSender",
    "ErrorKind",
    "LoginResult",
    "NotificationError",
    "PasswordHasher",
    "PasswordResetService",
    "RegistrationOutcome",
    "RegistrationResult",
    "RegistrationService",
    "TokenIssuer",
    "User",
    "UserRepository",
    "UserRole",
    "UserService",
    "UserStatus",
    "VerifyEmailResult",
]
