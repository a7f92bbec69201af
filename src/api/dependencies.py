"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories for injecting
domain services and infrastructure adapters into routes. Every
collaborator is built at startup from the Settings object and kept on
app.state; nothing here reads configuration on its own.
"""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import timedelta

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from src.adapters.security.jwt_tokens import JoseTokenIssuer
from src.adapters.smtp.console import ConsoleEmailSender
from src.config.settings import Settings
from src.domain.authentication import AuthenticationService
from src.domain.exceptions import DomainError
from src.domain.password_reset import PasswordResetService
from src.domain.ports import EmailSender, TokenIssuer, UserRepository
from src.domain.registration import RegistrationService
from src.domain.security import PasswordHasher
from src.domain.user import UserRole
from src.domain.users import UserService


@dataclass(frozen=True)
class CurrentUser:
    """Identity asserted by a verified session token."""

    id: str
    email: str
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_repository(request: Request) -> UserRepository:
    """
    Get the user repository chosen at startup.

    The repository is created during app lifespan startup and stored in app.state.
    """
    return request.app.state.repository


def get_email_sender(request: Request) -> EmailSender:
    return request.app.state.email_sender


def get_token_issuer(request: Request) -> TokenIssuer:
    return request.app.state.token_issuer


def get_hasher(settings: Settings = Depends(get_app_settings)) -> PasswordHasher:
    return PasswordHasher(rounds=settings.bcrypt_cost)


def get_registration_service(
    settings: Settings = Depends(get_app_settings),
    repository: UserRepository = Depends(get_repository),
    email_sender: EmailSender = Depends(get_email_sender),
    hasher: PasswordHasher = Depends(get_hasher),
) -> RegistrationService:
    """
    Create registration service with injected dependencies.

    Wires together the repository and email sender for the domain service.
    """
    return RegistrationService(
        repository=repository,
        email_sender=email_sender,
        hasher=hasher,
        verification_ttl=timedelta(hours=settings.verification_ttl_hours),
    )


def get_authentication_service(
    repository: UserRepository = Depends(get_repository),
    token_issuer: TokenIssuer = Depends(get_token_issuer),
    hasher: PasswordHasher = Depends(get_hasher),
) -> AuthenticationService:
    return AuthenticationService(repository=repository, token_issuer=token_issuer, hasher=hasher)


def get_password_reset_service(
    settings: Settings = Depends(get_app_settings),
    repository: UserRepository = Depends(get_repository),
    email_sender: EmailSender = Depends(get_email_sender),
    hasher: PasswordHasher = Depends(get_hasher),
) -> PasswordResetService:
    return PasswordResetService(
        repository=repository,
        email_sender=email_sender,
        hasher=hasher,
        reset_ttl=timedelta(minutes=settings.password_reset_ttl_minutes),
    )


def get_user_service(
    repository: UserRepository = Depends(get_repository),
    hasher: PasswordHasher = Depends(get_hasher),
) -> UserService:
    return UserService(repository=repository, hasher=hasher)


def build_email_sender(settings: Settings) -> ConsoleEmailSender:
    return ConsoleEmailSender(frontend_url=settings.frontend_url)


def build_token_issuer(settings: Settings) -> JoseTokenIssuer:
    return JoseTokenIssuer(
        secret=settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
        expires_minutes=settings.jwt_expires_minutes,
    )


# Bearer security scheme for OpenAPI documentation; missing headers are
# reported through the uniform error envelope instead of FastAPI's default.
bearer_scheme = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    token_issuer: TokenIssuer = Depends(get_token_issuer),
) -> CurrentUser:
    """
    Authenticate the request from its bearer session token.

    The token is verified cryptographically; no storage lookup happens.

    Raises:
        DomainError(UNAUTHORIZED): Missing, invalid or expired token
    """
    if credentials is None:
        raise DomainError.unauthorized("Access token is required")

    claims = token_issuer.decode(credentials.credentials)
    try:
        role = UserRole(claims.get("role"))
    except ValueError as e:
        raise DomainError.unauthorized("Invalid access token") from e
    return CurrentUser(id=claims["sub"], email=claims.get("email", ""), role=role)


def require_roles(*roles: UserRole) -> Callable[..., CurrentUser]:
    """Dependency factory admitting only callers holding one of roles."""

    def dependency(current: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if current.role not in roles:
            raise DomainError.forbidden()
        return current

    return dependency


def ensure_self_or_admin(current: CurrentUser, user_id: str) -> None:
    """
    Raises:
        DomainError(FORBIDDEN): Caller is neither the target user nor an admin
    """
    if not current.is_admin and current.id != user_id:
        raise DomainError.forbidden("Unauthorized to modify this user")
