"""
Integration tests for PostgresUserRepository.

Tests repository operations against a real PostgreSQL database at
DATABASE_URL. Skipped when no database is reachable.
"""

from collections.abc import Generator
from concurrent.futures import ThreadPoolExecutor

import psycopg
import pytest
from psycopg_pool import ConnectionPool

from src.adapters.repository.postgres import PostgresUserRepository, run_migrations
from src.config.settings import Settings
from src.domain.exceptions import DomainError, ErrorKind
from src.domain.security import PasswordHasher
from src.domain.user import UserRole, UserStatus, utcnow
from tests.helpers import make_user

pytestmark = pytest.mark.postgres


@pytest.fixture(scope="module")
def pool() -> Generator[ConnectionPool, None, None]:
    """Create connection pool for integration tests."""
    database_url = Settings().database_url
    try:
        psycopg.connect(database_url, connect_timeout=2).close()
    except psycopg.OperationalError:
        pytest.skip("PostgreSQL is not reachable")

    pool = ConnectionPool(conninfo=database_url, min_size=1, max_size=10, open=True)
    run_migrations(pool)
    yield pool
    pool.close()


@pytest.fixture
def repository(pool: ConnectionPool) -> PostgresUserRepository:
    return PostgresUserRepository(pool)


@pytest.fixture(autouse=True)
def clean_database(pool: ConnectionPool) -> None:
    """Clean users table before each test."""
    with pool.connection() as conn:
        conn.execute("DELETE FROM users")
        conn.commit()


class TestCreate:
    def test_create_round_trips_all_fields(
        self, repository: PostgresUserRepository, hasher: PasswordHasher
    ) -> None:
        user = make_user(hasher, role=UserRole.TEACHER)

        created = repository.create(user)

        assert created.id == user.id
        assert created.role is UserRole.TEACHER
        assert created.status is UserStatus.PENDING
        assert created.hashed_password == user.hashed_password
        assert repository.find_by_email("JO@EXAMPLE.COM").id == user.id
        assert repository.find_by_email_verification_token("verify-token").id == user.id

    def test_duplicate_email_is_conflict(
        self, repository: PostgresUserRepository, hasher: PasswordHasher
    ) -> None:
        repository.create(make_user(hasher))

        with pytest.raises(DomainError) as exc_info:
            repository.create(make_user(hasher, user_id="user-2", email="Jo@Example.com"))

        assert exc_info.value.kind is ErrorKind.CONFLICT

    def test_concurrent_creates_exactly_one_wins(
        self, repository: PostgresUserRepository, hasher: PasswordHasher
    ) -> None:
        """The unique index decides a race between identical sign-ups."""
        users = [make_user(hasher, user_id=f"user-{i}") for i in range(5)]

        def attempt(user) -> bool:
            try:
                repository.create(user)
            except DomainError as e:
                assert e.kind is ErrorKind.CONFLICT
                return False
            return True

        with ThreadPoolExecutor(max_workers=5) as executor:
            results = list(executor.map(attempt, users))

        assert results.count(True) == 1
        assert len(repository.find_all()) == 1


class TestMutations:
    def test_update_advances_updated_at(
        self, repository: PostgresUserRepository, hasher: PasswordHasher
    ) -> None:
        created = repository.create(make_user(hasher))

        first = repository.update("user-1", {"bio": "a"})
        second = repository.update("user-1", {"bio": "b"})

        assert created.updated_at < first.updated_at < second.updated_at
        assert second.bio == "b"

    def test_update_missing_user(self, repository: PostgresUserRepository) -> None:
        assert repository.update("missing", {"bio": "x"}) is None

    def test_verify_email_promotes_pending(
        self, repository: PostgresUserRepository, hasher: PasswordHasher
    ) -> None:
        repository.create(make_user(hasher))

        assert repository.verify_email("user-1") is True

        user = repository.find_by_id("user-1")
        assert user.email_verified is True
        assert user.status is UserStatus.ACTIVE

    def test_verify_email_keeps_suspended(
        self, repository: PostgresUserRepository, hasher: PasswordHasher
    ) -> None:
        repository.create(make_user(hasher))
        repository.update("user-1", {"status": UserStatus.SUSPENDED})

        repository.verify_email("user-1")

        assert repository.find_by_id("user-1").status is UserStatus.SUSPENDED

    def test_concurrent_verify_email_flips_once(
        self, repository: PostgresUserRepository, hasher: PasswordHasher
    ) -> None:
        repository.create(make_user(hasher))

        with ThreadPoolExecutor(max_workers=5) as executor:
            results = list(executor.map(lambda _: repository.verify_email("user-1"), range(5)))

        assert results.count(True) == 1
        assert repository.verify_email("user-1") is False

    def test_complete_password_reset_consumes_token_once(
        self, repository: PostgresUserRepository, hasher: PasswordHasher
    ) -> None:
        repository.create(make_user(hasher))
        repository.update("user-1", {"password_reset_token": "reset-1", "password_reset_expires": utcnow()})

        assert repository.complete_password_reset("user-1", "other", "digest-x") is False
        assert repository.complete_password_reset("user-1", "reset-1", "digest-a") is True
        assert repository.complete_password_reset("user-1", "reset-1", "digest-b") is False

        user = repository.find_by_id("user-1")
        assert user.hashed_password == "digest-a"
        assert user.password_reset_token is None
        assert user.password_reset_expires is None

    def test_password_and_refresh_token(
        self, repository: PostgresUserRepository, hasher: PasswordHasher
    ) -> None:
        repository.create(make_user(hasher))

        assert repository.update_password("user-1", "digest") is True
        assert repository.update_refresh_token("user-1", "rt") is True

        user = repository.find_by_id("user-1")
        assert user.hashed_password == "digest"
        assert user.refresh_token == "rt"

    def test_delete(self, repository: PostgresUserRepository, hasher: PasswordHasher) -> None:
        repository.create(make_user(hasher))
        assert repository.delete("user-1") is True
        assert repository.delete("user-1") is False


class TestQueries:
    def test_find_by_role_and_filters(
        self, repository: PostgresUserRepository, hasher: PasswordHasher
    ) -> None:
        repository.create(make_user(hasher))
        repository.create(make_user(hasher, user_id="user-2", email="t@example.com", role=UserRole.TEACHER))

        assert [user.id for user in repository.find_by_role(UserRole.TEACHER)] == ["user-2"]
        assert len(repository.find_all({"status": UserStatus.PENDING})) == 2

    def test_ping(self, repository: PostgresUserRepository) -> None:
        repository.ping()
