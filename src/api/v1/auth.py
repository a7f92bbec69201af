"""
API v1 authentication routes.

Defines REST endpoints for sign-up, email verification, login and
password reset. Handlers are plain functions: bcrypt and the database
driver block, so FastAPI runs them in its worker threadpool.
"""

from fastapi import APIRouter, Depends, Query, status

from src.api.dependencies import (
    get_authentication_service,
    get_password_reset_service,
    get_registration_service,
)
from src.api.models import (
    ErrorResponse,
    ForgotPasswordRequest,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    RefreshRequest,
    RegisterRequest,
    RegisterResponse,
    ResetPasswordRequest,
    UserSummary,
)
from src.domain.authentication import AuthenticationService, LoginResult
from src.domain.password_reset import (
    RESET_COMPLETED_MESSAGE,
    RESET_REQUESTED_MESSAGE,
    PasswordResetService,
)
from src.domain.ports import VerifyEmailResult
from src.domain.registration import (
    ALREADY_VERIFIED_MESSAGE,
    VERIFIED_MESSAGE,
    RegistrationService,
)

router = APIRouter(prefix="/auth", tags=["authentication"])


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Validation error"},
        409: {"model": ErrorResponse, "description": "Email already registered"},
    },
    summary="Register a new user",
    description="Create a pending account and send a verification link to the email address.",
)
def register(
    request_data: RegisterRequest,
    service: RegistrationService = Depends(get_registration_service),
) -> RegisterResponse:
    """
    Register a new user and send the verification email.

    The verification token is never returned here; it only travels by email.
    """
    result = service.register(
        email=request_data.email,
        password=request_data.password,
        first_name=request_data.first_name,
        last_name=request_data.last_name,
        role=request_data.role,
        phone=request_data.phone,
        bio=request_data.bio,
    )
    return RegisterResponse(message=result.message, user_id=result.user_id)


@router.get(
    "/verify-email",
    response_model=MessageResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Missing or expired token"},
        404: {"model": ErrorResponse, "description": "Unknown token"},
    },
    summary="Verify an email address",
)
def verify_email(
    token: str = Query(default="", description="Verification token from the email"),
    service: RegistrationService = Depends(get_registration_service),
) -> MessageResponse:
    result = service.verify_email(token)
    if result is VerifyEmailResult.ALREADY_VERIFIED:
        return MessageResponse(message=ALREADY_VERIFIED_MESSAGE)
    return MessageResponse(message=VERIFIED_MESSAGE)


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={
        401: {"model": ErrorResponse, "description": "Invalid credentials or unverified email"},
        404: {"model": ErrorResponse, "description": "Unknown email"},
    },
    summary="User login",
)
def login(
    request_data: LoginRequest,
    service: AuthenticationService = Depends(get_authentication_service),
) -> LoginResponse:
    return _login_response(service.login(request_data.email, request_data.password))


def _login_response(result: LoginResult) -> LoginResponse:
    user = result.user
    return LoginResponse(
        access_token=result.access_token,
        user=UserSummary(
            id=user.id,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            role=user.role,
        ),
        expires_in=result.expires_in,
    )


@router.post(
    "/refresh",
    response_model=LoginResponse,
    responses={501: {"model": ErrorResponse, "description": "Not implemented"}},
    summary="Refresh access token",
)
def refresh(
    request_data: RefreshRequest,
    service: AuthenticationService = Depends(get_authentication_service),
) -> LoginResponse:
    return _login_response(service.refresh(request_data.refresh_token))


@router.post(
    "/forgot-password",
    response_model=MessageResponse,
    summary="Request a password reset link",
)
def forgot_password(
    request_data: ForgotPasswordRequest,
    service: PasswordResetService = Depends(get_password_reset_service),
) -> MessageResponse:
    service.request_reset(request_data.email)
    return MessageResponse(message=RESET_REQUESTED_MESSAGE)


@router.post(
    "/reset-password",
    response_model=MessageResponse,
    responses={400: {"model": ErrorResponse, "description": "Invalid token or weak password"}},
    summary="Reset password with a reset token",
)
def reset_password(
    request_data: ResetPasswordRequest,
    service: PasswordResetService = Depends(get_password_reset_service),
) -> MessageResponse:
    service.reset_password(request_data.token, request_data.new_password)
    return MessageResponse(message=RESET_COMPLETED_MESSAGE)
