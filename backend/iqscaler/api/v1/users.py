"""
IQScaler - User API Routes
Registration, login, password reset, profile and admin account management
"""
import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, status

from iqscaler.api.deps import AdminUser, BaseUrl, CurrentUser, DbSession
from iqscaler.schemas.common import MessageResponse, SuccessMessageResponse
from iqscaler.schemas.user import (
    AuthResponse,
    ForgotPasswordRequest,
    ResetPasswordRequest,
    UserAdminUpdate,
    UserCreate,
    UserLogin,
    UserResponse,
)
from iqscaler.services.email import Mailer, get_mailer
from iqscaler.services.users import UserService, build_auth_payload

router = APIRouter(prefix="/users", tags=["Users"])


@router.post(
    "",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
)
async def register(
    user_data: UserCreate,
    db: DbSession,
) -> AuthResponse:
    """Create an account and return it with a bearer token."""
    user = await UserService(db).register_user(user_data)
    return AuthResponse(**build_auth_payload(user))


@router.post(
    "/login",
    response_model=AuthResponse,
    summary="Authenticate user",
)
async def login(
    credentials: UserLogin,
    db: DbSession,
) -> AuthResponse:
    user = await UserService(db).authenticate(
        email=credentials.email,
        password=credentials.password,
    )
    return AuthResponse(**build_auth_payload(user))


@router.post(
    "/forgotpassword",
    response_model=SuccessMessageResponse,
    summary="Request a password reset email",
)
async def forgot_password(
    data: ForgotPasswordRequest,
    db: DbSession,
    base_url: BaseUrl,
    mailer: Annotated[Mailer, Depends(get_mailer)],
) -> SuccessMessageResponse:
    await UserService(db).forgot_password(data.email, base_url, mailer)
    return SuccessMessageResponse(message="Reset token sent to email.")


@router.put(
    "/resetpassword/{token}",
    response_model=SuccessMessageResponse,
    summary="Reset password with an emailed token",
)
async def reset_password(
    token: str,
    data: ResetPasswordRequest,
    db: DbSession,
) -> SuccessMessageResponse:
    await UserService(db).reset_password(token, data.password)
    return SuccessMessageResponse(message="Password reset successfully. You can now log in.")


@router.get(
    "/profile",
    response_model=UserResponse,
    summary="Get current user profile",
)
async def get_profile(current_user: CurrentUser) -> UserResponse:
    return UserResponse.model_validate(current_user)


# ============================================================================
# Admin
# ============================================================================

@router.get(
    "",
    response_model=list[UserResponse],
    summary="List all users (admin)",
)
async def list_users(
    admin: AdminUser,
    db: DbSession,
) -> list[UserResponse]:
    users = await UserService(db).list_users()
    return [UserResponse.model_validate(u) for u in users]


@router.get(
    "/{user_id}",
    response_model=UserResponse,
    summary="Get a user (admin)",
)
async def get_user(
    user_id: uuid.UUID,
    admin: AdminUser,
    db: DbSession,
) -> UserResponse:
    user = await UserService(db).get_user(user_id)
    return UserResponse.model_validate(user)


@router.put(
    "/{user_id}",
    response_model=UserResponse,
    summary="Update a user (admin)",
)
async def update_user(
    user_id: uuid.UUID,
    data: UserAdminUpdate,
    admin: AdminUser,
    db: DbSession,
) -> UserResponse:
    user = await UserService(db).update_user(user_id, data)
    return UserResponse.model_validate(user)


@router.delete(
    "/{user_id}",
    response_model=MessageResponse,
    summary="Delete a user (admin)",
)
async def delete_user(
    user_id: uuid.UUID,
    admin: AdminUser,
    db: DbSession,
) -> MessageResponse:
    await UserService(db).delete_user(user_id)
    return MessageResponse(message="User removed")
