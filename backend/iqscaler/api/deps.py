"""
IQScaler - API Dependencies
FastAPI dependencies for authentication and authorization
"""
from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from iqscaler.core.config import settings
from iqscaler.core.database import get_db
from iqscaler.core.exceptions import AuthenticationError, AuthorizationError
from iqscaler.core.security import verify_token
from iqscaler.models.user import User
from iqscaler.services.users import UserService

# Security scheme; a missing header is reported by get_current_user
security = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    """
    Get current authenticated user from JWT token.

    Raises:
        AuthenticationError: If the token is missing, invalid or its user is gone
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Not authorized, no token")

    user_id = verify_token(credentials.credentials, token_type="access")
    if not user_id:
        raise AuthenticationError("Not authorized, token failed")

    user = await UserService(db).get_user_by_id(user_id)
    if not user:
        raise AuthenticationError("Not authorized, token failed")

    return user


async def require_admin(
    current_user: Annotated[User, Depends(get_current_user)],
) -> User:
    """Only administrators pass."""
    if not current_user.is_admin:
        raise AuthorizationError("Not authorized as an admin")
    return current_user


def public_base_url(request: Request) -> str:
    """Base for links sent to users: CLIENT_URL, else the request's own origin."""
    if settings.CLIENT_URL:
        return settings.CLIENT_URL.rstrip("/")
    return str(request.base_url).rstrip("/")


# Type aliases for common dependencies
CurrentUser = Annotated[User, Depends(get_current_user)]
AdminUser = Annotated[User, Depends(require_admin)]
DbSession = Annotated[AsyncSession, Depends(get_db)]
BaseUrl = Annotated[str, Depends(public_base_url)]
