"""
Shared fixtures for adversarial tests.

Provides services wired to one shared in-memory repository so concurrent
attackers hit the same store.
"""

from unittest.mock import Mock

import pytest

from src.adapters.repository.memory import InMemoryUserRepository
from src.domain.password_reset import PasswordResetService
from src.domain.registration import RegistrationService
from src.domain.security import PasswordHasher

# Module-level marker for all adversarial tests
pytestmark = pytest.mark.adversarial


@pytest.fixture
def registration_service(
    repository: InMemoryUserRepository, email_sender: Mock, hasher: PasswordHasher
) -> RegistrationService:
    return RegistrationService(repository=repository, email_sender=email_sender, hasher=hasher)


@pytest.fixture
def password_reset_service(
    repository: InMemoryUserRepository, email_sender: Mock, hasher: PasswordHasher
) -> PasswordResetService:
    return PasswordResetService(repository=repository, email_sender=email_sender, hasher=hasher)
