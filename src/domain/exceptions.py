"""
Domain exceptions - Semantic error types for the user workflows.

Errors are a closed set of kinds carried by a single exception type,
so the HTTP boundary translates them with one total mapping instead of
an isinstance chain.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Every failure a workflow or repository can report."""

    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    VALIDATION = "validation"
    INVALID_CREDENTIALS = "invalid_credentials"
    EMAIL_NOT_VERIFIED = "email_not_verified"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NOT_IMPLEMENTED = "not_implemented"
    STORAGE = "storage"
    UNEXPECTED = "unexpected"


class DomainError(Exception):
    """
    Typed domain failure.

    Attributes:
        kind: Which member of ErrorKind this failure is
        message: Human readable description
        field: Offending input field, for VALIDATION errors
    """

    def __init__(self, kind: ErrorKind, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.field = field

    def __repr__(self) -> str:
        return f"DomainError({self.kind.value!r}, {self.message!r})"

    @classmethod
    def not_found(cls, what: str) -> "DomainError":
        return cls(ErrorKind.NOT_FOUND, f"{what} not found")

    @classmethod
    def conflict(cls, email: str) -> "DomainError":
        return cls(ErrorKind.CONFLICT, f"User with email {email} already exists")

    @classmethod
    def validation(cls, field: str, message: str) -> "DomainError":
        return cls(ErrorKind.VALIDATION, f"Validation failed for {field}: {message}", field)

    @classmethod
    def invalid_credentials(cls) -> "DomainError":
        return cls(ErrorKind.INVALID_CREDENTIALS, "Invalid password provided")

    @classmethod
    def email_not_verified(cls) -> "DomainError":
        return cls(
            ErrorKind.EMAIL_NOT_VERIFIED,
            "Email address has not been verified. Please check your inbox.",
        )

    @classmethod
    def unauthorized(cls, message: str = "Unauthorized access") -> "DomainError":
        return cls(ErrorKind.UNAUTHORIZED, message)

    @classmethod
    def forbidden(cls, message: str = "Insufficient permissions") -> "DomainError":
        return cls(ErrorKind.FORBIDDEN, message)

    @classmethod
    def storage(cls, message: str = "Storage backend unavailable") -> "DomainError":
        return cls(ErrorKind.STORAGE, message)


class NotificationError(Exception):
    """An email could not be handed to the transport."""

    pass
