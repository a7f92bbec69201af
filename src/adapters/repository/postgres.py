"""
PostgreSQL repository adapter - Implements UserRepository protocol.

This module provides the PostgreSQL implementation of the domain's
repository port using psycopg3 with raw SQL.

Consistency Design:
-------------------
1. **Unique index on lower(email)**: the database is the final authority on
   email uniqueness. Two sign-ups racing past the domain's existence check
   still produce exactly one row; the loser's INSERT raises UniqueViolation,
   which is translated into DomainError(CONFLICT).

2. **Narrow updates**: every mutator writes only the columns it was given.
   No method overwrites the whole record, so concurrent updates to
   different fields of one user do not clobber each other.

3. **Monotonic updated_at**: each write sets
   updated_at = GREATEST(NOW(), updated_at + 1 microsecond).

Driver failures are translated at this boundary: connection and pool
errors become DomainError(STORAGE).
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import fields as dataclass_fields
from dataclasses import replace
from enum import Enum
from pathlib import Path
from typing import Any

import psycopg
from psycopg import errors
from psycopg.rows import dict_row
from psycopg_pool import ConnectionPool, PoolTimeout

from src.domain.exceptions import DomainError
from src.domain.user import MUTABLE_FIELDS, User, UserRole, UserStatus

logger = logging.getLogger(__name__)

_COLUMNS = [f.name for f in dataclass_fields(User)]
_COLUMN_LIST = ", ".join(_COLUMNS)

_TOUCH = "updated_at = GREATEST(NOW(), updated_at + INTERVAL '1 microsecond')"


def _to_db(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    return value


def _row_to_user(row: dict[str, Any]) -> User:
    data = dict(row)
    data["role"] = UserRole(data["role"])
    data["status"] = UserStatus(data["status"])
    return User(**data)


class PostgresUserRepository:
    """
    Implements UserRepository protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    All SQL uses parameterized queries; column names only ever come from
    the User dataclass, never from callers.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        """
        Initialize repository with connection pool.

        Args:
            pool: psycopg3 ConnectionPool for database connections
        """
        self._pool = pool

    @contextmanager
    def _cursor(self) -> Iterator[psycopg.Cursor]:
        try:
            with self._pool.connection() as conn, conn.cursor(row_factory=dict_row) as cursor:
                yield cursor
        except (psycopg.OperationalError, PoolTimeout) as e:
            logger.error("Database unavailable: %s", e)
            raise DomainError.storage() from e

    def _fetch_one(self, where: str, params: tuple[Any, ...]) -> User | None:
        sql = f"SELECT {_COLUMN_LIST} FROM users WHERE {where}"
        with self._cursor() as cursor:
            cursor.execute(sql, params)
            row = cursor.fetchone()
        return _row_to_user(row) if row is not None else None

    def find_by_id(self, user_id: str) -> User | None:
        return self._fetch_one("id = %s", (user_id,))

    def find_by_email(self, email: str) -> User | None:
        return self._fetch_one("lower(email) = lower(%s)", (email,))

    def find_by_email_verification_token(self, token: str) -> User | None:
        return self._fetch_one("email_verification_token = %s", (token,))

    def find_by_password_reset_token(self, token: str) -> User | None:
        return self._fetch_one("password_reset_token = %s", (token,))

    def create(self, user: User) -> User:
        """
        Insert a new user row.

        Raises:
            DomainError(CONFLICT): The unique email index rejected the row
        """
        placeholders = ", ".join(["%s"] * len(_COLUMNS))
        sql = f"""
            INSERT INTO users ({_COLUMN_LIST})
            VALUES ({placeholders})
            RETURNING {_COLUMN_LIST}
        """
        stored = replace(user, email=user.email.lower())
        params = tuple(_to_db(getattr(stored, column)) for column in _COLUMNS)

        try:
            with self._cursor() as cursor:
                cursor.execute(sql, params)
                row = cursor.fetchone()
        except errors.UniqueViolation as e:
            raise DomainError.conflict(user.email) from e
        return _row_to_user(row)

    def update(self, user_id: str, fields: dict[str, Any]) -> User | None:
        unknown = set(fields) - MUTABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown user fields: {sorted(unknown)}")

        assignments = [f"{column} = %s" for column in fields]
        assignments.append(_TOUCH)
        sql = f"""
            UPDATE users
            SET {", ".join(assignments)}
            WHERE id = %s
            RETURNING {_COLUMN_LIST}
        """
        params = (*(_to_db(value) for value in fields.values()), user_id)

        try:
            with self._cursor() as cursor:
                cursor.execute(sql, params)
                row = cursor.fetchone()
        except errors.UniqueViolation as e:
            raise DomainError.conflict(str(fields.get("email"))) from e
        return _row_to_user(row) if row is not None else None

    def delete(self, user_id: str) -> bool:
        with self._cursor() as cursor:
            cursor.execute("DELETE FROM users WHERE id = %s", (user_id,))
            return cursor.rowcount == 1

    def find_all(self, filters: dict[str, Any] | None = None) -> list[User]:
        filters = filters or {}
        unknown = set(filters) - set(_COLUMNS)
        if unknown:
            raise ValueError(f"Unknown user fields: {sorted(unknown)}")

        sql = f"SELECT {_COLUMN_LIST} FROM users"
        if filters:
            sql += " WHERE " + " AND ".join(f"{column} = %s" for column in filters)
        sql += " ORDER BY created_at DESC"

        with self._cursor() as cursor:
            cursor.execute(sql, tuple(_to_db(value) for value in filters.values()))
            rows = cursor.fetchall()
        return [_row_to_user(row) for row in rows]

    def find_by_role(self, role: UserRole) -> list[User]:
        return self.find_all({"role": role})

    def update_password(self, user_id: str, hashed_password: str) -> bool:
        return self.update(user_id, {"hashed_password": hashed_password}) is not None

    def verify_email(self, user_id: str) -> bool:
        """Set email_verified and promote a PENDING status to ACTIVE, once."""
        sql = f"""
            UPDATE users
            SET email_verified = TRUE,
                status = CASE WHEN status = %s THEN %s ELSE status END,
                {_TOUCH}
            WHERE id = %s AND email_verified = FALSE
        """
        with self._cursor() as cursor:
            cursor.execute(sql, (UserStatus.PENDING.value, UserStatus.ACTIVE.value, user_id))
            return cursor.rowcount == 1

    def complete_password_reset(self, user_id: str, token: str, hashed_password: str) -> bool:
        """Swap the password hash only while token is still the active reset token."""
        sql = f"""
            UPDATE users
            SET hashed_password = %s,
                password_reset_token = NULL,
                password_reset_expires = NULL,
                {_TOUCH}
            WHERE id = %s AND password_reset_token = %s
        """
        with self._cursor() as cursor:
            cursor.execute(sql, (hashed_password, user_id, token))
            return cursor.rowcount == 1

    def update_refresh_token(self, user_id: str, token: str | None) -> bool:
        return self.update(user_id, {"refresh_token": token}) is not None

    def ping(self) -> None:
        with self._cursor() as cursor:
            cursor.execute("SELECT 1")


MIGRATIONS_DIR = Path(__file__).resolve().parents[3] / "migrations"


def run_migrations(pool: ConnectionPool, migrations_dir: Path = MIGRATIONS_DIR) -> None:
    """
    Apply every *.sql file in migrations_dir, in filename order.

    Files must be idempotent (IF NOT EXISTS); they run on every startup.

    Raises:
        RuntimeError: A migration failed; the failing file is named
    """
    sql_files = sorted(migrations_dir.glob("*.sql"))
    if not sql_files:
        logger.warning("No migrations found in %s", migrations_dir)
        return

    for sql_file in sql_files:
        logger.info("Applying migration %s", sql_file.name)
        try:
            with pool.connection() as conn:
                conn.execute(sql_file.read_text())
        except psycopg.Error as e:
            logger.error("Migration %s failed: %s", sql_file.name, e)
            raise RuntimeError(f"Database migration failed: {sql_file.name}") from e

    logger.info("Applied %d migration(s)", len(sql_files))
