"""
API v1 user management routes.

Access rules:
- POST /users: public
- GET /users: ADMIN
- GET /users/profile: any authenticated user
- GET /users/{id}, GET /users/email/{email}: ADMIN or TEACHER
- PUT /users/{id}, PUT /users/{id}/password: the user themself or ADMIN
- DELETE /users/{id}: ADMIN
"""

from fastapi import APIRouter, Depends, Query, status

from src.api.dependencies import (
    CurrentUser,
    ensure_self_or_admin,
    get_current_user,
    get_user_service,
    require_roles,
)
from src.api.models import (
    ChangePasswordRequest,
    CreateUserRequest,
    ErrorResponse,
    MessageResponse,
    UpdateUserRequest,
    UserResponse,
)
from src.domain.exceptions import DomainError
from src.domain.user import UserRole
from src.domain.users import UserService

router = APIRouter(
    prefix="/users",
    tags=["users"],
    responses={
        401: {"model": ErrorResponse, "description": "Missing or invalid access token"},
        403: {"model": ErrorResponse, "description": "Insufficient permissions"},
    },
)


@router.post(
    "",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": ErrorResponse, "description": "User already exists"}},
    summary="Create a new user",
)
def create_user(
    request_data: CreateUserRequest,
    service: UserService = Depends(get_user_service),
) -> UserResponse:
    """Create a user directly; no verification email is sent."""
    user = service.create_user(
        email=request_data.email,
        password=request_data.password,
        first_name=request_data.first_name,
        last_name=request_data.last_name,
        role=request_data.role,
        phone=request_data.phone,
        bio=request_data.bio,
    )
    return UserResponse.from_user(user)


@router.get("", response_model=list[UserResponse], summary="Get all users")
def list_users(
    role: UserRole | None = Query(default=None),
    _: CurrentUser = Depends(require_roles(UserRole.ADMIN)),
    service: UserService = Depends(get_user_service),
) -> list[UserResponse]:
    return [UserResponse.from_user(user) for user in service.list_users(role)]


@router.get("/profile", response_model=UserResponse, summary="Get current user profile")
def get_profile(
    current: CurrentUser = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
) -> UserResponse:
    return UserResponse.from_user(service.get_by_id(current.id))


@router.get("/email/{email}", response_model=UserResponse, summary="Get user by email")
def get_user_by_email(
    email: str,
    _: CurrentUser = Depends(require_roles(UserRole.ADMIN, UserRole.TEACHER)),
    service: UserService = Depends(get_user_service),
) -> UserResponse:
    return UserResponse.from_user(service.get_by_email(email))


@router.get("/{user_id}", response_model=UserResponse, summary="Get user by ID")
def get_user(
    user_id: str,
    _: CurrentUser = Depends(require_roles(UserRole.ADMIN, UserRole.TEACHER)),
    service: UserService = Depends(get_user_service),
) -> UserResponse:
    return UserResponse.from_user(service.get_by_id(user_id))


@router.put("/{user_id}", response_model=UserResponse, summary="Update user")
def update_user(
    user_id: str,
    request_data: UpdateUserRequest,
    current: CurrentUser = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
) -> UserResponse:
    ensure_self_or_admin(current, user_id)
    changes = request_data.model_dump(exclude_unset=True)
    if "status" in changes and not current.is_admin:
        raise DomainError.forbidden("Only administrators can change account status")
    return UserResponse.from_user(service.update_user(user_id, changes))


@router.put("/{user_id}/password", response_model=MessageResponse, summary="Change user password")
def change_password(
    user_id: str,
    request_data: ChangePasswordRequest,
    current: CurrentUser = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
) -> MessageResponse:
    ensure_self_or_admin(current, user_id)
    service.change_password(user_id, request_data.current_password, request_data.new_password)
    return MessageResponse(message="Password changed successfully")


@router.delete("/{user_id}", response_model=MessageResponse, summary="Delete user")
def delete_user(
    user_id: str,
    _: CurrentUser = Depends(require_roles(UserRole.ADMIN)),
    service: UserService = Depends(get_user_service),
) -> MessageResponse:
    service.delete_user(user_id)
    return MessageResponse(message="User deleted successfully")
