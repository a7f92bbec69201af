"""
In-memory repository adapter - Implements UserRepository protocol.

Keeps users in a list and answers every lookup with a linear scan.
Used by the test suite and by deployments with storage_backend=memory.
Records are copied on the way in and out so callers never share state
with the store.
"""

import threading
from dataclasses import replace
from typing import Any

from src.domain.exceptions import DomainError
from src.domain.user import MUTABLE_FIELDS, User, UserRole, UserStatus, next_timestamp


class InMemoryUserRepository:
    """
    Implements UserRepository protocol over a Python list.

    Uses structural subtyping - no explicit inheritance from Protocol.
    Every read and write holds the lock, so check-and-set operations
    (email uniqueness, verification, reset token use) are one step,
    standing in for the unique index and conditional UPDATEs of a real
    database.
    """

    def __init__(self) -> None:
        self._users: list[User] = []
        self._lock = threading.Lock()

    # Helpers below expect the caller to hold self._lock

    def _find(self, **criteria: Any) -> User | None:
        for user in self._users:
            if all(getattr(user, key) == value for key, value in criteria.items()):
                return user
        return None

    def _write(self, user: User, fields: dict[str, Any]) -> User:
        updated = replace(user, **fields, updated_at=next_timestamp(user.updated_at))
        self._users[self._users.index(user)] = updated
        return updated

    def _lookup(self, **criteria: Any) -> User | None:
        with self._lock:
            user = self._find(**criteria)
            return replace(user) if user is not None else None

    def find_by_id(self, user_id: str) -> User | None:
        return self._lookup(id=user_id)

    def find_by_email(self, email: str) -> User | None:
        return self._lookup(email=email.lower())

    def find_by_email_verification_token(self, token: str) -> User | None:
        return self._lookup(email_verification_token=token)

    def find_by_password_reset_token(self, token: str) -> User | None:
        return self._lookup(password_reset_token=token)

    def create(self, user: User) -> User:
        with self._lock:
            if self._find(email=user.email.lower()) is not None:
                raise DomainError.conflict(user.email)
            stored = replace(user, email=user.email.lower())
            self._users.append(stored)
            return replace(stored)

    def update(self, user_id: str, fields: dict[str, Any]) -> User | None:
        unknown = set(fields) - MUTABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown user fields: {sorted(unknown)}")

        with self._lock:
            user = self._find(id=user_id)
            if user is None:
                return None
            return replace(self._write(user, fields))

    def delete(self, user_id: str) -> bool:
        with self._lock:
            user = self._find(id=user_id)
            if user is None:
                return False
            self._users.remove(user)
            return True

    def find_all(self, filters: dict[str, Any] | None = None) -> list[User]:
        filters = filters or {}
        with self._lock:
            return [
                replace(user)
                for user in self._users
                if all(getattr(user, key) == value for key, value in filters.items())
            ]

    def find_by_role(self, role: UserRole) -> list[User]:
        return self.find_all({"role": role})

    def update_password(self, user_id: str, hashed_password: str) -> bool:
        return self.update(user_id, {"hashed_password": hashed_password}) is not None

    def verify_email(self, user_id: str) -> bool:
        with self._lock:
            user = self._find(id=user_id)
            if user is None or user.email_verified:
                return False
            fields: dict[str, Any] = {"email_verified": True}
            if user.status == UserStatus.PENDING:
                fields["status"] = UserStatus.ACTIVE
            self._write(user, fields)
            return True

    def complete_password_reset(self, user_id: str, token: str, hashed_password: str) -> bool:
        with self._lock:
            user = self._find(id=user_id, password_reset_token=token)
            if user is None:
                return False
            self._write(
                user,
                {
                    "hashed_password": hashed_password,
                    "password_reset_token": None,
                    "password_reset_expires": None,
                },
            )
            return True

    def update_refresh_token(self, user_id: str, token: str | None) -> bool:
        return self.update(user_id, {"refresh_token": token}) is not None

    def ping(self) -> None:
        return None
