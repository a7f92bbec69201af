"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.
JSON field names are camelCase; Python attributes are snake_case.
"""

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from src.domain.user import User, UserRole, UserStatus

NAME_PATTERN = r"^[a-zA-Z\s]+$"


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CreateUserRequest(CamelModel):
    """Request model for direct user creation."""

    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128, description="User password (min 8 characters)")
    first_name: str = Field(..., min_length=2, max_length=50, pattern=NAME_PATTERN)
    last_name: str = Field(..., min_length=2, max_length=50, pattern=NAME_PATTERN)
    role: UserRole
    phone: str | None = Field(default=None, pattern=r"^\+?[0-9]{7,15}$")
    bio: str | None = Field(default=None, max_length=500)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, value: Any) -> Any:
        return value.strip().lower() if isinstance(value, str) else value

    @field_validator("first_name", "last_name", "bio", mode="before")
    @classmethod
    def strip_text(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value


class RegisterRequest(CreateUserRequest):
    """Request model for self-service registration."""

    confirm_password: str

    @model_validator(mode="after")
    def passwords_match(self) -> "RegisterRequest":
        if self.password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self


class RegisterResponse(CamelModel):
    """Response model for successful registration."""

    message: str
    user_id: str


class MessageResponse(BaseModel):
    message: str


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, value: Any) -> Any:
        return value.strip().lower() if isinstance(value, str) else value


class UserSummary(CamelModel):
    id: str
    email: str
    first_name: str
    last_name: str
    role: UserRole


class LoginResponse(BaseModel):
    """Response model for successful login. Keys are snake_case on the wire."""

    access_token: str
    user: UserSummary
    expires_in: str


class RefreshRequest(BaseModel):
    refresh_token: str


class ForgotPasswordRequest(BaseModel):
    email: EmailStr

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, value: Any) -> Any:
        return value.strip().lower() if isinstance(value, str) else value


class ResetPasswordRequest(CamelModel):
    token: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=8, max_length=128)


class UpdateUserRequest(CamelModel):
    first_name: str | None = Field(default=None, min_length=2, max_length=50, pattern=NAME_PATTERN)
    last_name: str | None = Field(default=None, min_length=2, max_length=50, pattern=NAME_PATTERN)
    phone: str | None = Field(default=None, pattern=r"^\+?[0-9]{7,15}$")
    bio: str | None = Field(default=None, max_length=500)
    avatar: str | None = None
    date_of_birth: date | None = None
    address: str | None = None
    status: UserStatus | None = None

    @field_validator("first_name", "last_name", "bio", mode="before")
    @classmethod
    def strip_text(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value


class ChangePasswordRequest(CamelModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=8, max_length=128)


class UserResponse(CamelModel):
    id: str
    email: str
    first_name: str
    last_name: str
    role: UserRole
    status: UserStatus
    email_verified: bool
    phone: str | None = None
    bio: str | None = None
    avatar: str | None = None
    date_of_birth: date | None = None
    address: str | None = None
    last_login_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            role=user.role,
            status=user.status,
            email_verified=user.email_verified,
            phone=user.phone,
            bio=user.bio,
            avatar=user.avatar,
            date_of_birth=user.date_of_birth,
            address=user.address,
            last_login_at=user.last_login_at,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )


class ErrorResponse(BaseModel):
    """Uniform error envelope returned by every failing endpoint."""

    statusCode: int
    error: str
    message: str
    timestamp: str
    path: str
    method: str
