"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- Fast password hashing (bcrypt cost 4)
- In-memory repository and mocked email sender
- A fully wired application on the in-memory backend
"""

from collections.abc import Generator
from unittest.mock import Mock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.adapters.repository.memory import InMemoryUserRepository
from src.adapters.security.jwt_tokens import JoseTokenIssuer
from src.api.main import create_app
from src.config.settings import Settings
from src.domain.security import PasswordHasher
from tests.helpers import TEST_SECRET


@pytest.fixture
def hasher() -> PasswordHasher:
    """bcrypt hasher with the minimum cost so tests stay fast."""
    return PasswordHasher(rounds=4)


@pytest.fixture
def repository() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture
def email_sender() -> Mock:
    return Mock()


@pytest.fixture
def token_issuer() -> JoseTokenIssuer:
    return JoseTokenIssuer(secret=TEST_SECRET, expires_minutes=15)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        storage_backend="memory",
        bcrypt_cost=4,
        jwt_secret=TEST_SECRET,
        _env_file=None,
    )


@pytest.fixture
def app(settings: Settings) -> FastAPI:
    return create_app(settings)


@pytest.fixture
def client(app: FastAPI) -> Generator[TestClient, None, None]:
    """Test client with lifespan run, so app.state.repository exists."""
    with TestClient(app) as test_client:
        yield test_client
