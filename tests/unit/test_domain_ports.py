"""
Unit tests for domain ports, value types and exceptions.

Tests verify:
- Result and lifecycle enums
- DomainError constructors carry the right kind and message
- Protocols are satisfiable by plain classes
- Domain layer stays free of framework imports
"""

import json
import subprocess
from pathlib import Path
from typing import Any

import pytest

from src.domain.exceptions import DomainError, ErrorKind, NotificationError
from src.domain.ports import (
    EmailSender,
    RegistrationOutcome,
    TokenIssuer,
    VerifyEmailResult,
)
from src.domain.user import MUTABLE_FIELDS, User, UserRole, UserStatus, next_timestamp, utcnow

DOMAIN_DIR = Path(__file__).resolve().parents[2] / "src" / "domain"


class TestEnums:
    def test_roles(self) -> None:
        assert [role.value for role in UserRole] == ["student", "teacher", "admin"]

    def test_statuses(self) -> None:
        assert [status.value for status in UserStatus] == ["pending", "active", "inactive", "suspended"]

    def test_status_is_str_mixin(self) -> None:
        """Status values serialize as plain strings."""
        assert UserStatus.ACTIVE == "active"
        assert json.dumps({"status": UserStatus.ACTIVE}) == '{"status": "active"}'

    def test_result_variants(self) -> None:
        assert len(RegistrationOutcome) == 2
        assert {result.name for result in VerifyEmailResult} == {"VERIFIED", "ALREADY_VERIFIED"}


class TestUserRecord:
    def _user(self, **overrides: Any) -> User:
        now = utcnow()
        fields: dict[str, Any] = dict(
            id="u",
            email="jo@example.com",
            first_name="Jo",
            last_name="Do",
            role=UserRole.ADMIN,
            hashed_password="x",
            created_at=now,
            updated_at=now,
        )
        fields.update(overrides)
        return User(**fields)

    def test_defaults(self) -> None:
        user = self._user()
        assert user.status is UserStatus.PENDING
        assert user.email_verified is False
        assert user.full_name == "Jo Do"
        assert user.is_admin

    def test_identity_fields_not_mutable(self) -> None:
        assert not {"id", "created_at", "updated_at"} & MUTABLE_FIELDS
        assert "email_verified" in MUTABLE_FIELDS

    def test_next_timestamp_always_advances(self) -> None:
        future = utcnow().replace(year=utcnow().year + 1)
        assert next_timestamp(future) > future


class TestDomainErrors:
    @pytest.mark.parametrize(
        ("error", "kind"),
        [
            (DomainError.not_found("User"), ErrorKind.NOT_FOUND),
            (DomainError.conflict("a@b.com"), ErrorKind.CONFLICT),
            (DomainError.validation("email", "bad"), ErrorKind.VALIDATION),
            (DomainError.invalid_credentials(), ErrorKind.INVALID_CREDENTIALS),
            (DomainError.email_not_verified(), ErrorKind.EMAIL_NOT_VERIFIED),
            (DomainError.unauthorized(), ErrorKind.UNAUTHORIZED),
            (DomainError.forbidden(), ErrorKind.FORBIDDEN),
            (DomainError.storage(), ErrorKind.STORAGE),
        ],
    )
    def test_constructor_kinds(self, error: DomainError, kind: ErrorKind) -> None:
        assert error.kind is kind
        assert str(error) == error.message

    def test_messages(self) -> None:
        assert DomainError.not_found("User").message == "User not found"
        assert DomainError.conflict("a@b.com").message == "User with email a@b.com already exists"

    def test_validation_carries_field(self) -> None:
        error = DomainError.validation("password", "too weak")
        assert error.field == "password"
        assert error.message == "Validation failed for password: too weak"

    def test_notification_error_is_separate(self) -> None:
        """Email failures are not domain errors and never reach the HTTP mapping."""
        assert not issubclass(NotificationError, DomainError)


class TestProtocols:
    def test_plain_class_satisfies_email_sender(self) -> None:
        class RecordingSender:
            def __init__(self) -> None:
                self.sent: list[str] = []

            def send_verification_email(self, email: str, token: str, first_name: str) -> None:
                self.sent.append(token)

            def send_password_reset_email(self, email: str, token: str, first_name: str) -> None:
                self.sent.append(token)

            def send_welcome_email(self, email: str, first_name: str) -> None:
                self.sent.append(email)

        sender: EmailSender = RecordingSender()
        sender.send_verification_email("a@b.com", "t", "Jo")
        assert sender.sent == ["t"]

    def test_token_issuer_declares_label(self) -> None:
        assert "expires_label" in TokenIssuer.__annotations__


class TestDomainPurity:
    """Tests for domain purity - zero framework imports."""

    @pytest.mark.parametrize("module", ["fastapi", "pydantic", "psycopg", "jose"])
    def test_no_framework_imports_in_domain(self, module: str) -> None:
        result = subprocess.run(
            ["grep", "-rE", f"^(from|import) {module}", str(DOMAIN_DIR)],
            capture_output=True,
            text=True,
        )
        assert result.returncode != 0, f"{module} import found: {result.stdout}"
