"""
User management domain service - administrative and self-service CRUD.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from .exceptions import DomainError
from .password_policy import check_password
from .ports import UserRepository
from .registration import create_pending_user, normalize_email
from .security import PasswordHasher
from .user import User, UserRole

logger = logging.getLogger(__name__)

# Fields a profile update may write
PROFILE_FIELDS = frozenset(
    {"first_name", "last_name", "phone", "bio", "avatar", "date_of_birth", "address", "status"}
)
# Profile fields backed by required columns; None is not a valid value
REQUIRED_PROFILE_FIELDS = frozenset({"first_name", "last_name", "status"})


@dataclass
class UserService:
    repository: UserRepository
    hasher: PasswordHasher = field(default_factory=PasswordHasher)

    def create_user(
        self,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        role: UserRole,
        phone: str | None = None,
        bio: str | None = None,
    ) -> User:
        """
        Create a PENDING user directly, without a verification email.

        Raises:
            DomainError(CONFLICT): Email already registered
            DomainError(VALIDATION): Password fails the policy
        """
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
        )
        logger.info("Created user %s", user.id)
        return user

    def get_by_id(self, user_id: str) -> User:
        if not user_id:
            raise DomainError.validation("id", "User ID is required")
        user = self.repository.find_by_id(user_id)
        if user is None:
            raise DomainError.not_found(f"User with ID {user_id}")
        return user

    def get_by_email(self, email: str) -> User:
        if not email:
            raise DomainError.validation("email", "Email is required")
        user = self.repository.find_by_email(normalize_email(email))
        if user is None:
            raise DomainError.not_found(f"User with email {email}")
        return user

    def list_users(self, role: UserRole | None = None) -> list[User]:
        if role is not None:
            return self.repository.find_by_role(role)
        return self.repository.find_all()

    def update_user(self, user_id: str, changes: dict[str, Any]) -> User:
        """
        Write profile fields.

        status is written as-is; no lifecycle rule is checked here.

        Raises:
            DomainError(NOT_FOUND): Unknown user
            DomainError(VALIDATION): A field outside PROFILE_FIELDS, or None
                for a field in REQUIRED_PROFILE_FIELDS
        """
        self.get_by_id(user_id)

        unknown = set(changes) - PROFILE_FIELDS
        if unknown:
            raise DomainError.validation(sorted(unknown)[0], "Field cannot be updated")

        cleared = sorted(name for name in REQUIRED_PROFILE_FIELDS if name in changes and changes[name] is None)
        if cleared:
            raise DomainError.validation(cleared[0], "Field cannot be null")

        updated = self.repository.update(user_id, changes)
        if updated is None:
            raise DomainError.not_found(f"User with ID {user_id}")
        return updated

    def change_password(self, user_id: str, current_password: str, new_password: str) -> None:
        """
        Replace the password after checking the current one.

        Raises:
            DomainError(NOT_FOUND): Unknown user
            DomainError(INVALID_CREDENTIALS): current_password is wrong
            DomainError(VALIDATION): New password is weak or unchanged
        """
        user = self.get_by_id(user_id)

        if not self.hasher.verify(current_password, user.hashed_password):
            raise DomainError.invalid_credentials()

        if self.hasher.verify(new_password, user.hashed_password):
            raise DomainError.validation(
                "newPassword", "New password must be different from current password"
            )

        check_password(new_password, field="newPassword")

        if not self.repository.update_password(user_id, self.hasher.hash(new_password)):
            raise DomainError.not_found(f"User with ID {user_id}")
        logger.info("Password changed for user %s", user_id)

    def delete_user(self, user_id: str) -> None:
        self.get_by_id(user_id)
        if not self.repository.delete(user_id):
            raise DomainError.not_found(f"User with ID {user_id}")
        logger.info("Deleted user %s", user_id)
